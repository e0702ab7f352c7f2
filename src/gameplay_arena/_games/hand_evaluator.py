# Area: Games
"""
gameplay_arena._games.hand_evaluator - Poker hand ranking
=========================================================

Classifies five card hands, compares them, and picks the best five
card hand out of up to seven cards.

A ``Hand`` is its kind plus the ranks that decide ties, most
significant first:

    one pair         pair, kicker, kicker, kicker
    two pair         high pair, low pair, kicker
    three of a kind  trips, kicker, kicker
    full house       trips, pair
    four of a kind   quads, kicker
    everything else  the five ranks, highest first

A wheel (A-5-4-3-2) is a five-high straight, so its ace is reported
as ``Rank.ACE_LOW``.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from itertools import combinations
from typing import Iterable, List, Tuple

from .cards import Card, Rank


class HandKind(IntEnum):
    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8


_WHEEL = (Rank.ACE, Rank.FIVE, Rank.FOUR, Rank.THREE, Rank.TWO)
_WHEEL_RANKS = (Rank.FIVE, Rank.FOUR, Rank.THREE, Rank.TWO, Rank.ACE_LOW)

# Group sizes (largest first) to hand kind, for hands that are not straights or flushes
_KIND_BY_GROUPS = {
    (4, 1): HandKind.FOUR_OF_A_KIND,
    (3, 2): HandKind.FULL_HOUSE,
    (3, 1, 1): HandKind.THREE_OF_A_KIND,
    (2, 2, 1): HandKind.TWO_PAIR,
    (2, 1, 1, 1): HandKind.ONE_PAIR,
    (1, 1, 1, 1, 1): HandKind.HIGH_CARD,
}


@dataclass(frozen=True)
class Hand:
    """A classified five card hand."""
    kind: HandKind
    ranks: Tuple[Rank, ...]

    def key(self) -> Tuple[int, ...]:
        """Sort key: larger is better, equal keys tie."""
        return (int(self.kind),) + tuple(rank.order for rank in self.ranks)

    def to_dict(self) -> dict:
        return {"kind": self.kind.name.lower(), "ranks": [rank.value for rank in self.ranks]}


def evaluate_hand(cards: Iterable[Card]) -> Hand:
    """Classify exactly five distinct cards."""
    cards = list(cards)
    if len(cards) != 5:
        raise ValueError(f"A hand has exactly 5 cards, got {len(cards)}")
    if len(set(cards)) != 5:
        raise ValueError("A hand cannot contain the same card twice")

    counts = Counter(card.rank for card in cards)
    groups = sorted(counts.items(), key=lambda item: (item[1], item[0].order), reverse=True)
    ranks = tuple(rank for rank, _ in groups)
    sizes = tuple(size for _, size in groups)

    if sizes != (1, 1, 1, 1, 1):
        return Hand(_KIND_BY_GROUPS[sizes], ranks)

    is_flush = len({card.suit for card in cards}) == 1
    straight_ranks = None
    if ranks[0].order - ranks[4].order == 4:
        straight_ranks = ranks
    elif ranks == _WHEEL:
        straight_ranks = _WHEEL_RANKS

    if straight_ranks and is_flush:
        return Hand(HandKind.STRAIGHT_FLUSH, straight_ranks)
    if is_flush:
        return Hand(HandKind.FLUSH, ranks)
    if straight_ranks:
        return Hand(HandKind.STRAIGHT, straight_ranks)
    return Hand(HandKind.HIGH_CARD, ranks)


def compare_hands(a: Hand, b: Hand) -> int:
    """Return 1 if ``a`` beats ``b``, -1 if it loses, 0 on a tie."""
    key_a, key_b = a.key(), b.key()
    return (key_a > key_b) - (key_a < key_b)


def best_hand(cards: Iterable[Card]) -> Hand:
    """Best five card hand out of five to seven cards."""
    cards = list(cards)
    if not 5 <= len(cards) <= 7:
        raise ValueError(f"Need 5 to 7 cards, got {len(cards)}")
    return max((evaluate_hand(combo) for combo in combinations(cards, 5)), key=Hand.key)


def winning_seats(hands: List[Tuple[int, Hand]]) -> List[int]:
    """Seats holding the best hand, in the order given."""
    top = max(hand.key() for _, hand in hands)
    return [seat for seat, hand in hands if hand.key() == top]
