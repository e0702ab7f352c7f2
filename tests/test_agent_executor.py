# Area: Matches Tests
"""Tests for agent turns: the HTTP exchange, failures and the lease."""

import time
from unittest.mock import patch

import httpx
import pytest

from gameplay_arena._games.base import GameKind, Player, ResultKind
from gameplay_arena._matches import AgentTurnOutcome, MatchOrchestrator
from gameplay_arena.errors import (
    AgentHTTPStatusError,
    InvalidJSONResponseError,
    NotFound,
)

ALICE = Player.user("alice")
BOT = Player.agent("bob", "bot")


@pytest.fixture
def arena(config, users, http_client):
    orchestrator = MatchOrchestrator(config, http_client=http_client)
    yield orchestrator
    orchestrator.close()


def register(arena, fake_agents, responder, game="connect4", status="active"):
    url = fake_agents.route("/bot", responder)
    arena.agents.create_agent("bob", "bot", game, url, status=status)


def agent_first_match(arena):
    return arena.create_match("alice", [BOT, ALICE], GameKind.CONNECT4).match_id


def errored_reason(arena, match_id):
    status = arena.fetch_match(match_id).status
    assert status.is_over
    assert status.result.kind is ResultKind.ERRORED
    return status.result.reason


class TestAgentTurn:
    """Tests for successful agent turns."""

    def test_agent_plays(self, arena, fake_agents, first_open_column):
        register(arena, fake_agents, first_open_column)
        match_id = agent_first_match(arena)

        result = arena.take_agent_turn(match_id)

        assert result.outcome is AgentTurnOutcome.TURN_TAKEN
        assert result.turn_number == 1
        assert result.status.active_player == 1
        assert result.next_is_agent is False

        view = arena.fetch_match(match_id)
        assert view.turns[1].player_number == 0
        assert view.turns[1].action == {"column": 0}
        assert arena.leases.get_lease(match_id) is None
        assert arena.publisher.latest(match_id) == 1

    def test_request_body(self, arena, fake_agents, first_open_column):
        register(arena, fake_agents, first_open_column)
        match_id = agent_first_match(arena)
        arena.take_agent_turn(match_id)

        path, body = fake_agents.requests[0]
        assert path == "/bot"
        assert body["game"] == "connect4"
        assert body["agentname"] == "bot"
        assert body["state"]["active_player"] == 0
        assert len(body["state"]["board"]) == 7
        assert "agent_data" not in body

    def test_agent_data_round_trip(self, arena, fake_agents):
        """Test agent_data returned on one turn is sent back on the next."""
        def remembering(body):
            count = body.get("agent_data", {"moves": 0})["moves"]
            return httpx.Response(200, json={"action": {"column": 3}, "agent_data": {"moves": count + 1}})

        register(arena, fake_agents, remembering)
        match_id = agent_first_match(arena)

        arena.take_agent_turn(match_id)
        arena.take_user_turn("alice", match_id, {"column": 0})
        arena.take_agent_turn(match_id)

        assert "agent_data" not in fake_agents.requests[0][1]
        assert fake_agents.requests[1][1]["agent_data"] == {"moves": 1}
        assert arena.matches.get_agent_data(match_id, 0) == {"moves": 2}

    def test_agent_data_cleared(self, arena, fake_agents):
        answers = iter([{"column": 3, "keep": True}, {"column": 3, "keep": False}])

        def responder(body):
            answer = next(answers)
            data = {"action": {"column": answer["column"]}}
            if answer["keep"]:
                data["agent_data"] = [1, 2]
            return httpx.Response(200, json=data)

        register(arena, fake_agents, responder)
        match_id = agent_first_match(arena)

        arena.take_agent_turn(match_id)
        assert arena.matches.get_agent_data(match_id, 0) == [1, 2]
        arena.take_user_turn("alice", match_id, {"column": 0})
        arena.take_agent_turn(match_id)
        assert arena.matches.get_agent_data(match_id, 0) is None

    def test_agent_against_agent(self, arena, fake_agents, first_open_column):
        register(arena, fake_agents, first_open_column)
        arena.agents.create_agent("alice", "bot", "connect4", fake_agents.route("/other", first_open_column))
        match_id = arena.create_match(
            "alice", [BOT, Player.agent("alice", "bot")], GameKind.CONNECT4
        ).match_id

        first = arena.take_agent_turn(match_id)
        second = arena.take_agent_turn(match_id)
        assert first.next_is_agent is True
        assert second.turn_number == 2
        assert [path for path, _ in fake_agents.requests] == ["/bot", "/other"]

    def test_poker_agent(self, arena, fake_agents):
        register(
            arena, fake_agents,
            lambda body: httpx.Response(200, json={"action": {"kind": "call"}}),
            game="poker",
        )
        match_id = arena.create_match("alice", [ALICE, BOT], GameKind.POKER).match_id

        result = arena.take_agent_turn(match_id)

        assert result.outcome is AgentTurnOutcome.TURN_TAKEN
        assert arena.fetch_match(match_id).turns[1].action == {"kind": "call"}
        state = fake_agents.requests[0][1]["state"]
        assert len(state["rounds"][0]["my_cards"]) == 2
        assert "player_cards" not in state["rounds"][0]


class TestSkippedTurns:
    """Tests for calls that do not write a turn."""

    def test_not_agent_turn(self, arena, fake_agents, first_open_column):
        register(arena, fake_agents, first_open_column)
        match_id = arena.create_match("alice", [ALICE, BOT], GameKind.CONNECT4).match_id

        result = arena.take_agent_turn(match_id)

        assert result.outcome is AgentTurnOutcome.NOT_AGENT_TURN
        assert fake_agents.requests == []
        assert arena.leases.get_lease(match_id) is None

    def test_match_over(self, arena, fake_agents):
        register(arena, fake_agents, lambda body: httpx.Response(500))
        match_id = agent_first_match(arena)
        arena.take_agent_turn(match_id)

        result = arena.take_agent_turn(match_id)

        assert result.outcome is AgentTurnOutcome.NOT_AGENT_TURN
        assert len(fake_agents.requests) == 1

    def test_lease_held(self, arena, fake_agents, first_open_column):
        register(arena, fake_agents, first_open_column)
        match_id = agent_first_match(arena)
        token = arena.leases.acquire(match_id)

        result = arena.take_agent_turn(match_id)

        assert result.outcome is AgentTurnOutcome.LEASE_HELD
        assert fake_agents.requests == []
        assert arena.fetch_match(match_id).turn_number == 0
        assert arena.leases.get_lease(match_id)["lease_token"] == token

    def test_stale_lease_taken_over(self, arena, fake_agents, first_open_column):
        """Test a lease left by a crashed worker does not block the match."""
        register(arena, fake_agents, first_open_column)
        match_id = agent_first_match(arena)
        arena.leases.acquire(match_id, now=time.time() - 3600)

        result = arena.take_agent_turn(match_id)

        assert result.outcome is AgentTurnOutcome.TURN_TAKEN
        assert arena.leases.get_lease(match_id) is None

    def test_unknown_match(self, arena):
        with pytest.raises(NotFound):
            arena.take_agent_turn("m_missing")
        assert arena.leases.get_lease("m_missing") is None


class TestAgentFailures:
    """Tests for agent failures ending the match as errored."""

    def test_invalid_json(self, arena, fake_agents):
        register(arena, fake_agents, lambda body: httpx.Response(200, text="not json"))
        match_id = agent_first_match(arena)

        with patch("gameplay_arena._matches.agent_executor.log_agent_error") as log:
            result = arena.take_agent_turn(match_id)

        assert result.outcome is AgentTurnOutcome.TURN_TAKEN
        assert result.status.is_over
        assert result.next_is_agent is False
        assert errored_reason(arena, match_id) == "Agent 'bob/bot' returned invalid JSON"
        assert isinstance(log.call_args[0][0], InvalidJSONResponseError)

        view = arena.fetch_match(match_id)
        assert view.turns[1].player_number == 0
        assert view.turns[1].action is None
        assert view.current_turn.state == arena.matches.get_turn_state(match_id, 0)
        assert arena.leases.get_lease(match_id) is None

    def test_server_error(self, arena, fake_agents):
        register(arena, fake_agents, lambda body: httpx.Response(500))
        match_id = agent_first_match(arena)

        with patch("gameplay_arena._matches.agent_executor.log_agent_error") as log:
            arena.take_agent_turn(match_id)

        assert errored_reason(arena, match_id) == "Agent 'bob/bot' returned 500 Internal Server Error"
        assert isinstance(log.call_args[0][0], AgentHTTPStatusError)

    def test_unreachable(self, arena, fake_agents):
        def refuse(body):
            raise httpx.ConnectError("connection refused")

        register(arena, fake_agents, refuse)
        match_id = agent_first_match(arena)
        arena.take_agent_turn(match_id)

        assert errored_reason(arena, match_id) == "Error calling agent 'bob/bot'"

    def test_timeout(self, arena, fake_agents):
        def slow(body):
            raise httpx.ReadTimeout("timed out")

        register(arena, fake_agents, slow)
        match_id = agent_first_match(arena)
        arena.take_agent_turn(match_id)

        assert errored_reason(arena, match_id) == "Error calling agent 'bob/bot'"

    def test_wrong_shape(self, arena, fake_agents):
        register(arena, fake_agents, lambda body: httpx.Response(200, json={"move": 3}))
        match_id = agent_first_match(arena)
        arena.take_agent_turn(match_id)

        assert errored_reason(arena, match_id) == 'Agent \'bob/bot\' returned invalid action {"move": 3}'

    def test_column_out_of_range(self, arena, fake_agents):
        register(arena, fake_agents, lambda body: httpx.Response(200, json={"action": {"column": 9}}))
        match_id = agent_first_match(arena)
        arena.take_agent_turn(match_id)

        assert errored_reason(arena, match_id).startswith("Agent 'bob/bot' returned invalid action")

    def test_illegal_action(self, arena, fake_agents):
        register(arena, fake_agents, lambda body: httpx.Response(200, json={"action": {"column": 0}}))
        match_id = agent_first_match(arena)
        for _ in range(3):
            arena.take_agent_turn(match_id)
            arena.take_user_turn("alice", match_id, {"column": 0})

        result = arena.take_agent_turn(match_id)

        assert result.turn_number == 7
        assert errored_reason(arena, match_id) == (
            'Agent \'bob/bot\' returned illegal action {"column": 0}: Column is full.'
        )
        assert arena.fetch_match(match_id).turns[7].action is None

    def test_inactive_agent(self, arena, fake_agents, first_open_column):
        register(arena, fake_agents, first_open_column, status="inactive")
        match_id = agent_first_match(arena)
        arena.take_agent_turn(match_id)

        assert errored_reason(arena, match_id) == "Agent 'bob/bot' is inactive"
        assert fake_agents.requests == []

    def test_seat_uses_agent_bound_at_creation(self, arena, fake_agents, first_open_column):
        register(arena, fake_agents, first_open_column)
        match_id = agent_first_match(arena)

        with patch.object(arena.agents, "get_agent", side_effect=AssertionError("lookup by name")):
            result = arena.take_agent_turn(match_id)

        assert result.outcome is AgentTurnOutcome.TURN_TAKEN
        assert [path for path, _ in fake_agents.requests] == ["/bot"]

    def test_agent_deactivated_after_seating(self, arena, fake_agents, first_open_column):
        register(arena, fake_agents, first_open_column)
        match_id = agent_first_match(arena)
        arena.agents.set_status("bob", "bot", "inactive")

        arena.take_agent_turn(match_id)

        assert errored_reason(arena, match_id) == "Agent 'bob/bot' is inactive"
        assert fake_agents.requests == []

    def test_failed_agent_keeps_previous_data(self, arena, fake_agents):
        answers = iter([
            httpx.Response(200, json={"action": {"column": 3}, "agent_data": "memo"}),
            httpx.Response(503),
        ])
        register(arena, fake_agents, lambda body: next(answers))
        match_id = agent_first_match(arena)

        arena.take_agent_turn(match_id)
        arena.take_user_turn("alice", match_id, {"column": 0})
        arena.take_agent_turn(match_id)

        assert errored_reason(arena, match_id) == "Agent 'bob/bot' returned 503 Service Unavailable"
        assert arena.matches.get_agent_data(match_id, 0) == "memo"
