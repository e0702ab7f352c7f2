# Area: Games
"""
gameplay_arena._games.poker - No-Limit Texas Hold'em
====================================================

Every player starts with the same stack. The match is played as a
series of rounds, one hand of poker each, until a single player holds
all the chips.

A round moves through preflop, flop, turn and river. Each stage closes
once every seat still able to act has acted and matched the current
bet, or when only one contender is left. At showdown the pot goes to
the best hand; ties split it, with odd chips handed out one at a time
starting left of the dealer so the chip total never changes.
"""

from __future__ import annotations
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ..errors import GameError, GameErrorKind
from ..types import PokerView
from .actions import PokerAction, PokerAgentResponse
from .base import Game, GameKind, Player, Result, Status
from .cards import Card, shuffled_deck
from .hand_evaluator import best_hand, winning_seats

MIN_PLAYERS = 2
# Two hole cards each plus five on the table must fit in one deck
MAX_PLAYERS = 10
STARTING_CHIPS = 100
BLINDS = (1, 2)


class RoundStage(str, Enum):
    PRE_FLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"
    SHOWDOWN = "showdown"


class RoundPlayerStatus(str, Enum):
    PLAYING = "playing"
    ALL_IN = "all-in"     # No chips left to act with, still in the hand
    FOLDED = "folded"
    OUT = "out"           # Out of chips, out of the match


# Stage reached when the current one closes, and the table cards it reveals
_NEXT_STAGE = {
    RoundStage.PRE_FLOP: (RoundStage.FLOP, 3),
    RoundStage.FLOP: (RoundStage.TURN, 1),
    RoundStage.TURN: (RoundStage.RIVER, 1),
    RoundStage.RIVER: (RoundStage.SHOWDOWN, 0),
}

_CONTENDING = (RoundPlayerStatus.PLAYING, RoundPlayerStatus.ALL_IN)


@dataclass
class Round:
    """
    One hand of poker.

    Attributes:
        stage: Betting stage of the hand
        deck: Cards not yet dealt
        table_cards: Shared cards revealed so far
        bet: Amount every seat must have in ``player_bets`` to stay in
        pot: Chips from closed stages
        dealer: Seat holding the dealer button
        active_player: Seat whose turn it is
        player_status: Per-seat status for this hand
        player_bets: Per-seat chips wagered in the current stage
        player_acted: Per-seat flag, reset when a stage closes or the bet is raised
        player_cards: Per-seat hole cards, None for seats that are out
        winners: Seats that took the pot, filled in at showdown
    """

    stage: RoundStage
    deck: List[Card]
    table_cards: List[Card]
    bet: int
    pot: int
    dealer: int
    active_player: int
    player_status: List[RoundPlayerStatus]
    player_bets: List[int]
    player_acted: List[bool]
    player_cards: List[Optional[List[Card]]]
    winners: List[int] = field(default_factory=list)


@dataclass
class PokerState:
    player_chips: List[int]
    blinds: List[int]
    round: int
    rounds: List[Round]

    @property
    def current_round(self) -> Round:
        return self.rounds[self.round]


def player_after(player: int, player_status: Sequence[RoundPlayerStatus]) -> Optional[int]:
    """Next seat after ``player`` that is still ``PLAYING``, or None."""
    count = len(player_status)
    for offset in range(1, count):
        seat = (player + offset) % count
        if player_status[seat] is RoundPlayerStatus.PLAYING:
            return seat
    return None


class Poker(Game[PokerState]):
    """No-Limit Hold'em engine.

    ``rng`` shuffles every deck; pass a seeded ``random.Random`` for
    reproducible deals.
    """

    kind = GameKind.POKER
    state_type = PokerState
    action_type = PokerAction
    response_model = PokerAgentResponse

    def __init__(
        self,
        starting_chips: int = STARTING_CHIPS,
        blinds: Tuple[int, int] = BLINDS,
        rng: Optional[random.Random] = None,
    ):
        super().__init__()
        self.starting_chips = starting_chips
        self.blinds = list(blinds)
        self._rng = rng or random.Random()

    # ══════════════════════════════════════════════════════════
    # GAME INTERFACE
    # ══════════════════════════════════════════════════════════

    def new_game(self, players: List[Player]) -> Tuple[PokerState, Status]:
        if len(players) < MIN_PLAYERS:
            raise GameError(GameErrorKind.ARGS, "Poker requires at least 2 players.")
        if len(players) > MAX_PLAYERS:
            raise GameError(GameErrorKind.ARGS, f"Poker allows at most {MAX_PLAYERS} players.")

        state = PokerState(
            player_chips=[self.starting_chips] * len(players),
            blinds=list(self.blinds),
            round=0,
            rounds=[],
        )
        statuses = [RoundPlayerStatus.PLAYING] * len(players)
        return state, self._start_round(state, 0, statuses)

    def check_action(self, state: PokerState, player: int, action: PokerAction) -> None:
        round_ = state.current_round
        if round_.stage is RoundStage.SHOWDOWN:
            raise GameError(GameErrorKind.STATE, "The round is over.")
        if player != round_.active_player:
            raise GameError(GameErrorKind.PLAYER, "It is not this player's turn.")
        if round_.player_status[player] is not RoundPlayerStatus.PLAYING:
            raise GameError(GameErrorKind.PLAYER, "Player cannot act in this round.")

        chips = state.player_chips[player]
        to_call = round_.bet - round_.player_bets[player]

        if action.kind == "check":
            if to_call != 0:
                raise GameError(
                    GameErrorKind.ACTION, "Cannot check, you have to fold, call, or raise."
                )
        elif action.kind == "bet":
            if round_.bet != 0:
                raise GameError(GameErrorKind.ACTION, "Cannot bet, you have to call or raise.")
            if action.amount > chips:
                raise GameError(GameErrorKind.ACTION, "Not enough chips.")
        elif action.kind == "call":
            if round_.bet == 0:
                raise GameError(GameErrorKind.ACTION, "Nothing to call, check instead.")
        elif action.kind == "raise":
            if round_.bet == 0:
                raise GameError(GameErrorKind.ACTION, "Nothing to raise, bet instead.")
            if to_call + action.amount > chips:
                raise GameError(GameErrorKind.ACTION, "Not enough chips.")

    def apply_action(self, state: PokerState, player: int, action: PokerAction) -> Status:
        self.check_action(state, player, action)

        round_ = state.current_round
        to_call = round_.bet - round_.player_bets[player]

        if action.kind == "fold":
            round_.player_status[player] = RoundPlayerStatus.FOLDED
        elif action.kind == "bet":
            self._wager(state, round_, player, action.amount)
            round_.bet = round_.player_bets[player]
            self._reopen_betting(round_, player)
        elif action.kind == "call":
            # Calling more than the stack puts the player all in
            self._wager(state, round_, player, min(to_call, state.player_chips[player]))
        elif action.kind == "raise":
            self._wager(state, round_, player, to_call + action.amount)
            round_.bet += action.amount
            self._reopen_betting(round_, player)
        round_.player_acted[player] = True

        if self._stage_over(round_):
            return self._close_stage(state, round_)

        next_player = player_after(player, round_.player_status)
        if next_player is None:
            raise GameError(GameErrorKind.STATE, "No player left to act.")
        round_.active_player = next_player
        return Status.in_progress(next_player)

    def get_view(self, state: PokerState, player: int) -> PokerView:
        view = self.dump_state(state)
        for round_view in view["rounds"]:
            cards = round_view.pop("player_cards")
            round_view.pop("deck")
            round_view["my_cards"] = cards[player]
        return view

    # ══════════════════════════════════════════════════════════
    # BETTING
    # ══════════════════════════════════════════════════════════

    @staticmethod
    def _wager(state: PokerState, round_: Round, player: int, amount: int) -> None:
        """Move ``amount`` from the player's stack to their stage bet."""
        state.player_chips[player] -= amount
        round_.player_bets[player] += amount
        if state.player_chips[player] == 0:
            round_.player_status[player] = RoundPlayerStatus.ALL_IN

    @staticmethod
    def _reopen_betting(round_: Round, aggressor: int) -> None:
        """Everyone else must respond to a new bet."""
        for seat in range(len(round_.player_acted)):
            if seat != aggressor:
                round_.player_acted[seat] = False

    @staticmethod
    def _stage_over(round_: Round) -> bool:
        contenders = [s for s in round_.player_status if s in _CONTENDING]
        if len(contenders) <= 1:
            return True
        return all(
            round_.player_acted[seat] and round_.player_bets[seat] == round_.bet
            for seat, status in enumerate(round_.player_status)
            if status is RoundPlayerStatus.PLAYING
        )

    def _close_stage(self, state: PokerState, round_: Round) -> Status:
        round_.pot += sum(round_.player_bets)
        round_.player_bets = [0] * len(round_.player_bets)
        round_.player_acted = [False] * len(round_.player_acted)
        round_.bet = 0

        contenders = [s for s in round_.player_status if s in _CONTENDING]
        playing = [s for s in round_.player_status if s is RoundPlayerStatus.PLAYING]

        if len(contenders) == 1:
            round_.stage = RoundStage.SHOWDOWN
            return self._finish_round(state, round_)

        if len(playing) <= 1:
            # Nobody can bet any more, run out the board
            while len(round_.table_cards) < 5:
                round_.table_cards.append(round_.deck.pop())
            round_.stage = RoundStage.SHOWDOWN
            return self._finish_round(state, round_)

        next_stage, reveal = _NEXT_STAGE[round_.stage]
        for _ in range(reveal):
            round_.table_cards.append(round_.deck.pop())
        round_.stage = next_stage
        if next_stage is RoundStage.SHOWDOWN:
            return self._finish_round(state, round_)

        round_.active_player = player_after(round_.dealer, round_.player_status)
        return Status.in_progress(round_.active_player)

    # ══════════════════════════════════════════════════════════
    # ROUNDS
    # ══════════════════════════════════════════════════════════

    def _finish_round(self, state: PokerState, round_: Round) -> Status:
        contenders = [
            seat for seat, status in enumerate(round_.player_status) if status in _CONTENDING
        ]
        if len(contenders) == 1:
            winners = contenders
        else:
            hands = [
                (seat, best_hand(round_.player_cards[seat] + round_.table_cards))
                for seat in contenders
            ]
            winners = winning_seats(hands)

        self._award_pot(state, round_, winners)
        round_.winners = winners

        next_status = [
            RoundPlayerStatus.OUT
            if status is RoundPlayerStatus.OUT or state.player_chips[seat] == 0
            else RoundPlayerStatus.PLAYING
            for seat, status in enumerate(round_.player_status)
        ]
        remaining = [
            seat for seat, status in enumerate(next_status)
            if status is RoundPlayerStatus.PLAYING
        ]
        if len(remaining) == 1:
            return Status.over(Result.winner(remaining))

        dealer = player_after(round_.dealer, next_status)
        return self._start_round(state, dealer, next_status)

    def _start_round(
        self,
        state: PokerState,
        dealer: int,
        player_status: List[RoundPlayerStatus],
    ) -> Status:
        round_ = self._deal_round(state, dealer, player_status)
        state.rounds.append(round_)
        state.round = len(state.rounds) - 1
        if RoundPlayerStatus.PLAYING not in round_.player_status:
            # Posting the blinds put every seat all in
            return self._close_stage(state, round_)
        return Status.in_progress(round_.active_player)

    @staticmethod
    def _award_pot(state: PokerState, round_: Round, winners: List[int]) -> None:
        share, odd_chips = divmod(round_.pot, len(winners))
        for seat in winners:
            state.player_chips[seat] += share
        seats = len(state.player_chips)
        left_of_dealer = sorted(winners, key=lambda seat: (seat - round_.dealer - 1) % seats)
        for seat in left_of_dealer[:odd_chips]:
            state.player_chips[seat] += 1
        round_.pot = 0

    def _deal_round(
        self,
        state: PokerState,
        dealer: int,
        player_status: List[RoundPlayerStatus],
    ) -> Round:
        deck = shuffled_deck(self._rng)
        seats = len(player_status)
        round_ = Round(
            stage=RoundStage.PRE_FLOP,
            deck=deck,
            table_cards=[],
            bet=0,
            pot=0,
            dealer=dealer,
            active_player=dealer,
            player_status=list(player_status),
            player_bets=[0] * seats,
            player_acted=[False] * seats,
            player_cards=[
                [deck.pop(), deck.pop()] if status is RoundPlayerStatus.PLAYING else None
                for status in player_status
            ],
        )

        small_blind = player_after(dealer, player_status)
        big_blind = player_after(small_blind, player_status)
        self._wager(state, round_, small_blind, min(state.blinds[0], state.player_chips[small_blind]))
        self._wager(state, round_, big_blind, min(state.blinds[1], state.player_chips[big_blind]))
        round_.bet = max(round_.player_bets)

        active = player_after(big_blind, round_.player_status)
        if active is None:
            # Everyone but the big blind went all in posting blinds
            active = big_blind
        round_.active_player = active
        return round_
