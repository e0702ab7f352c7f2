# Area: Games Tests
"""Tests for the No-Limit Hold'em engine."""

import json
import random

import pytest

from gameplay_arena._games.actions import (
    BetAction,
    CallAction,
    CheckAction,
    FoldAction,
    RaiseAction,
)
from gameplay_arena._games.base import Player, ResultKind
from gameplay_arena._games.cards import cards_from_string, new_deck
from gameplay_arena._games.poker import (
    Poker,
    PokerState,
    Round,
    RoundPlayerStatus,
    RoundStage,
)
from gameplay_arena.errors import GameError, GameErrorKind

PLAYING = RoundPlayerStatus.PLAYING


def players(count):
    return [Player.user(f"player{i}") for i in range(count)]


def total_chips(state):
    """Chips in stacks, pots and outstanding bets."""
    return sum(state.player_chips) + sum(r.pot + sum(r.player_bets) for r in state.rounds)


def legal_actions(engine, state, seat, rng):
    chips = state.player_chips[seat]
    candidates = [FoldAction(kind="fold"), CheckAction(kind="check"), CallAction(kind="call")]
    if chips > 0:
        candidates.append(BetAction(kind="bet", amount=rng.randint(1, chips)))
        candidates.append(RaiseAction(kind="raise", amount=rng.randint(1, chips)))
    legal = []
    for action in candidates:
        try:
            engine.check_action(state, seat, action)
        except GameError:
            continue
        legal.append(action)
    return legal


@pytest.fixture
def engine():
    return Poker(rng=random.Random(1234))


class TestNewGame:
    """Tests for Poker.new_game."""

    def test_three_players_post_blinds_after_dealer(self, engine):
        """Test seat 1 posts the small blind, seat 2 the big blind, seat 0 acts."""
        state, status = engine.new_game(players(3))
        round_ = state.current_round
        assert state.player_chips == [100, 99, 98]
        assert round_.player_bets == [0, 1, 2]
        assert round_.bet == 2
        assert round_.dealer == 0
        assert status.active_player == 0
        assert round_.stage is RoundStage.PRE_FLOP

    def test_heads_up_blinds(self, engine):
        """Test heads-up: the non-dealer posts small and acts first."""
        state, status = engine.new_game(players(2))
        assert state.current_round.player_bets == [2, 1]
        assert status.active_player == 1

    def test_hole_cards_dealt_from_one_deck(self, engine):
        state, _ = engine.new_game(players(4))
        round_ = state.current_round
        dealt = [card for cards in round_.player_cards for card in cards]
        assert len(dealt) == 8
        assert len(set(dealt) | set(round_.deck)) == 52
        assert len(round_.deck) == 44

    @pytest.mark.parametrize("count", [0, 1, 11])
    def test_player_count_limits(self, engine, count):
        with pytest.raises(GameError) as exc:
            engine.new_game(players(count))
        assert exc.value.kind is GameErrorKind.ARGS

    def test_configured_stack_and_blinds(self):
        state, _ = Poker(starting_chips=50, blinds=(5, 10)).new_game(players(3))
        assert state.player_chips == [50, 45, 40]


class TestCheckAction:
    """Tests for action legality."""

    def test_not_your_turn(self, engine):
        state, _ = engine.new_game(players(3))
        with pytest.raises(GameError) as exc:
            engine.check_action(state, 1, FoldAction(kind="fold"))
        assert exc.value.kind is GameErrorKind.PLAYER

    @pytest.mark.parametrize("action,message", [
        (CheckAction(kind="check"), "Cannot check, you have to fold, call, or raise."),
        (BetAction(kind="bet", amount=5), "Cannot bet, you have to call or raise."),
        (RaiseAction(kind="raise", amount=99), "Not enough chips."),
    ])
    def test_preflop_facing_blind(self, engine, action, message):
        """Test the first actor owes the big blind."""
        state, _ = engine.new_game(players(3))
        with pytest.raises(GameError) as exc:
            engine.check_action(state, 0, action)
        assert exc.value.kind is GameErrorKind.ACTION
        assert exc.value.message == message

    def test_raise_within_stack_is_legal(self, engine):
        state, _ = engine.new_game(players(3))
        engine.check_action(state, 0, RaiseAction(kind="raise", amount=98))

    def test_after_flop_nothing_to_call_or_raise(self, engine):
        state, _ = engine.new_game(players(3))
        engine.apply_action(state, 0, CallAction(kind="call"))
        engine.apply_action(state, 1, CallAction(kind="call"))
        engine.apply_action(state, 2, CheckAction(kind="check"))
        assert state.current_round.bet == 0
        with pytest.raises(GameError, match="Nothing to call, check instead."):
            engine.check_action(state, 1, CallAction(kind="call"))
        with pytest.raises(GameError, match="Nothing to raise, bet instead."):
            engine.check_action(state, 1, RaiseAction(kind="raise", amount=1))
        with pytest.raises(GameError, match="Not enough chips."):
            engine.check_action(state, 1, BetAction(kind="bet", amount=99))

    def test_big_blind_may_call_a_matched_bet(self, engine):
        state, _ = engine.new_game(players(3))
        engine.apply_action(state, 0, CallAction(kind="call"))
        engine.apply_action(state, 1, CallAction(kind="call"))
        round_ = state.current_round
        assert round_.bet == 2
        assert round_.player_bets[2] == 2
        chips_before = state.player_chips[2]

        engine.check_action(state, 2, CallAction(kind="call"))
        status = engine.apply_action(state, 2, CallAction(kind="call"))

        assert state.player_chips[2] == chips_before
        assert round_.stage is RoundStage.FLOP
        assert not status.is_over

    def test_apply_rechecks_and_leaves_state_untouched(self, engine):
        state, _ = engine.new_game(players(3))
        before = engine.dump_state(state)
        with pytest.raises(GameError):
            engine.apply_action(state, 0, BetAction(kind="bet", amount=500))
        assert engine.dump_state(state) == before


class TestBetting:
    """Tests for how actions move the round along."""

    def test_big_blind_gets_option_then_flop(self, engine):
        """Test calls around to the big blind leave it to act, then the flop is dealt."""
        state, _ = engine.new_game(players(3))
        status = engine.apply_action(state, 0, CallAction(kind="call"))
        assert status.active_player == 1
        status = engine.apply_action(state, 1, CallAction(kind="call"))
        assert status.active_player == 2
        assert state.current_round.stage is RoundStage.PRE_FLOP

        status = engine.apply_action(state, 2, CheckAction(kind="check"))
        round_ = state.current_round
        assert round_.stage is RoundStage.FLOP
        assert len(round_.table_cards) == 3
        assert round_.pot == 6
        assert round_.player_bets == [0, 0, 0]
        assert status.active_player == 1

    def test_fold_does_not_close_stage_early(self, engine):
        """Test the remaining seats still act after the first seat folds."""
        state, _ = engine.new_game(players(3))
        engine.apply_action(state, 0, CallAction(kind="call"))
        engine.apply_action(state, 1, CallAction(kind="call"))
        engine.apply_action(state, 2, CheckAction(kind="check"))

        status = engine.apply_action(state, 1, FoldAction(kind="fold"))
        assert status.active_player == 2
        assert state.current_round.stage is RoundStage.FLOP
        status = engine.apply_action(state, 2, CheckAction(kind="check"))
        assert status.active_player == 0
        status = engine.apply_action(state, 0, CheckAction(kind="check"))
        assert state.current_round.stage is RoundStage.TURN
        assert len(state.current_round.table_cards) == 4
        assert status.active_player == 2

    def test_raise_reopens_action(self, engine):
        """Test a raise makes earlier callers act again."""
        state, _ = engine.new_game(players(3))
        engine.apply_action(state, 0, CallAction(kind="call"))
        status = engine.apply_action(state, 1, RaiseAction(kind="raise", amount=4))
        round_ = state.current_round
        assert round_.bet == 6
        assert round_.player_bets == [2, 6, 2]
        assert status.active_player == 2
        engine.apply_action(state, 2, CallAction(kind="call"))
        status = engine.apply_action(state, 0, CallAction(kind="call"))
        assert state.current_round.stage is RoundStage.FLOP
        assert state.current_round.pot == 18

    def test_fold_to_blind_starts_next_round(self, engine):
        """Test a heads-up fold awards the pot and deals a new round."""
        state, _ = engine.new_game(players(2))
        status = engine.apply_action(state, 1, FoldAction(kind="fold"))
        first = state.rounds[0]
        assert first.stage is RoundStage.SHOWDOWN
        assert first.winners == [0]
        assert first.pot == 0

        assert state.round == 1
        second = state.current_round
        assert second.dealer == 1
        assert second.player_bets == [1, 2]
        assert state.player_chips == [100, 97]
        assert status.active_player == 0
        assert total_chips(state) == 200

    def test_all_in_runs_out_the_board(self, engine):
        """Test two all-in players go straight to showdown with five table cards."""
        state, _ = engine.new_game(players(2))
        engine.apply_action(state, 1, RaiseAction(kind="raise", amount=98))
        assert state.current_round.player_status[1] is RoundPlayerStatus.ALL_IN
        status = engine.apply_action(state, 0, CallAction(kind="call"))

        first = state.rounds[0]
        assert first.stage is RoundStage.SHOWDOWN
        assert len(first.table_cards) == 5
        assert total_chips(state) == 200
        if status.is_over:
            winner = status.result.players[0]
            assert state.player_chips[winner] == 200
        else:
            assert len(first.winners) == 2

    def test_blinds_putting_everyone_all_in(self):
        """Test a round nobody can act in is played out without waiting for a move."""
        engine = Poker(starting_chips=2, blinds=(2, 2), rng=random.Random(7))
        state, status = engine.new_game(players(2))

        first = state.rounds[0]
        assert first.stage is RoundStage.SHOWDOWN
        assert len(first.table_cards) == 5
        assert status.is_over
        assert sorted(state.player_chips) == [0, 4]
        assert status.result.players == (state.player_chips.index(4),)

    def test_short_call_goes_all_in(self, engine):
        state, _ = engine.new_game(players(2))
        engine.apply_action(state, 1, RaiseAction(kind="raise", amount=20))
        state.player_chips[0] = 10
        engine.apply_action(state, 0, CallAction(kind="call"))
        round_ = state.rounds[0]
        assert round_.player_status[0] is RoundPlayerStatus.ALL_IN
        assert len(round_.table_cards) == 5
        assert round_.stage is RoundStage.SHOWDOWN


class TestShowdown:
    """Tests for pot distribution at showdown."""

    def river_state(self, holdings, chips=(90, 90, 90), pot=11):
        """Three seats at the river, everything checked to seat 1."""
        table = cards_from_string("2c 3d 8h 9s Ks")
        hole = [cards_from_string(text) for text in holdings]
        used = set(table) | {card for cards in hole for card in cards}
        return PokerState(
            player_chips=list(chips),
            blinds=[1, 2],
            round=0,
            rounds=[Round(
                stage=RoundStage.RIVER,
                deck=[card for card in new_deck() if card not in used],
                table_cards=table,
                bet=0,
                pot=pot,
                dealer=0,
                active_player=1,
                player_status=[PLAYING] * 3,
                player_bets=[0, 0, 0],
                player_acted=[False] * 3,
                player_cards=hole,
            )],
        )

    def check_around(self, engine, state):
        status = None
        for seat in (1, 2, 0):
            status = engine.apply_action(state, seat, CheckAction(kind="check"))
        return status

    def test_split_pot_odd_chip_goes_left_of_dealer(self, engine):
        """Test tied seats share the pot and the odd chip goes to the first after the dealer."""
        state = self.river_state(["4c 5d", "Ah Qd", "As Qc"])
        self.check_around(engine, state)
        assert state.rounds[0].winners == [1, 2]
        # Next round: dealer 1, small blind seat 2, big blind seat 0
        assert state.player_chips == [88, 96, 94]
        assert total_chips(state) == 281

    def test_pot_credited_to_winning_seat(self, engine):
        """Test the best hand's own seat receives the pot."""
        state = self.river_state(["4c 5d", "Ah Qd", "Ac Ad"])
        self.check_around(engine, state)
        assert state.rounds[0].winners == [2]
        assert state.player_chips == [88, 90, 100]

    def test_busted_players_are_out_and_last_player_wins(self, engine):
        state = self.river_state(["4c 5d", "Ah Qd", "Ac Ad"], chips=(0, 0, 0), pot=300)
        status = self.check_around(engine, state)
        assert status.is_over
        assert status.result.kind is ResultKind.WINNER
        assert status.result.players == (2,)
        assert state.player_chips == [0, 0, 300]


class TestViewAndConservation:
    """Tests for redacted views and chip conservation over whole matches."""

    def test_view_hides_deck_and_other_cards(self, engine):
        state, _ = engine.new_game(players(3))
        view = engine.get_view(state, 1)
        round_view = view["rounds"][0]
        assert "deck" not in round_view
        assert "player_cards" not in round_view
        assert round_view["my_cards"] == engine.dump_state(state)["rounds"][0]["player_cards"][1]
        json.dumps(view)

    def test_view_does_not_mutate_state(self, engine):
        state, _ = engine.new_game(players(2))
        engine.get_view(state, 0)
        assert len(state.current_round.deck) == 48

    def test_dump_load_round_trip(self, engine):
        state, _ = engine.new_game(players(3))
        engine.apply_action(state, 0, CallAction(kind="call"))
        data = json.loads(json.dumps(engine.dump_state(state)))
        assert engine.load_state(data) == state

    def test_parse_action_discriminates_on_kind(self, engine):
        assert engine.parse_action({"kind": "raise", "amount": "4"}).amount == 4
        with pytest.raises(GameError):
            engine.parse_action({"kind": "bet", "amount": 0})
        with pytest.raises(GameError):
            engine.parse_action({"kind": "shove"})

    @pytest.mark.parametrize("seed,count", [(1, 2), (2, 3), (3, 5)])
    def test_random_play_conserves_chips(self, seed, count):
        """Test chips are conserved after every action of a random match."""
        rng = random.Random(seed)
        engine = Poker(rng=random.Random(seed))
        state, status = engine.new_game(players(count))
        start = total_chips(state)

        for _ in range(5000):
            if status.is_over:
                break
            seat = status.active_player
            status = engine.apply_action(state, seat, rng.choice(legal_actions(engine, state, seat, rng)))
            assert total_chips(state) == start
            assert all(chips >= 0 for chips in state.player_chips)

        if status.is_over:
            winner = status.result.players[0]
            assert state.player_chips[winner] == start
