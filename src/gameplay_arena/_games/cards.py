# Area: Games
"""Playing cards: ranks, suits, the 52 card deck and a short text notation."""

from __future__ import annotations
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class Rank(str, Enum):
    """Card ranks in ascending order. ``ACE_LOW`` only appears in the A-5 straight."""
    ACE_LOW = "ace_low"
    TWO = "two"
    THREE = "three"
    FOUR = "four"
    FIVE = "five"
    SIX = "six"
    SEVEN = "seven"
    EIGHT = "eight"
    NINE = "nine"
    TEN = "ten"
    JACK = "jack"
    QUEEN = "queen"
    KING = "king"
    ACE = "ace"

    @property
    def order(self) -> int:
        return _RANK_ORDER[self]


class Suit(str, Enum):
    CLUBS = "clubs"
    DIAMONDS = "diamonds"
    HEARTS = "hearts"
    SPADES = "spades"


_RANK_ORDER = {rank: index for index, rank in enumerate(Rank)}

RANK_SYMBOLS = {
    Rank.TWO: "2", Rank.THREE: "3", Rank.FOUR: "4", Rank.FIVE: "5",
    Rank.SIX: "6", Rank.SEVEN: "7", Rank.EIGHT: "8", Rank.NINE: "9",
    Rank.TEN: "10", Rank.JACK: "J", Rank.QUEEN: "Q", Rank.KING: "K",
    Rank.ACE: "A",
}
SUIT_SYMBOLS = {Suit.CLUBS: "♣", Suit.DIAMONDS: "♦", Suit.HEARTS: "♥", Suit.SPADES: "♠"}

_RANK_BY_SYMBOL = {symbol: rank for rank, symbol in RANK_SYMBOLS.items()}
_RANK_BY_SYMBOL["T"] = Rank.TEN
_SUIT_BY_SYMBOL = {symbol: suit for suit, symbol in SUIT_SYMBOLS.items()}
_SUIT_BY_SYMBOL.update({"c": Suit.CLUBS, "d": Suit.DIAMONDS, "h": Suit.HEARTS, "s": Suit.SPADES})


@dataclass(frozen=True)
class Card:
    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return RANK_SYMBOLS.get(self.rank, "A") + SUIT_SYMBOLS[self.suit]


def card_from_string(text: str) -> Card:
    """Parse ``"A♠"``, ``"10♥"``, ``"Td"`` or ``"2c"`` into a Card."""
    if len(text) < 2:
        raise ValueError(f"Invalid card: {text!r}")
    rank_text, suit_text = text[:-1], text[-1]
    if rank_text not in _RANK_BY_SYMBOL:
        raise ValueError(f"Invalid rank: {rank_text!r}")
    if suit_text not in _SUIT_BY_SYMBOL:
        raise ValueError(f"Invalid suit: {suit_text!r}")
    return Card(_RANK_BY_SYMBOL[rank_text], _SUIT_BY_SYMBOL[suit_text])


def cards_from_string(text: str) -> List[Card]:
    """Parse a space separated list of cards."""
    return [card_from_string(part) for part in text.split()]


def new_deck() -> List[Card]:
    """The 52 cards in ascending order, from 2♣ to A♠."""
    return [Card(rank, suit) for rank in list(Rank)[1:] for suit in Suit]


def shuffled_deck(rng: Optional[random.Random] = None) -> List[Card]:
    deck = new_deck()
    (rng or random).shuffle(deck)
    return deck
