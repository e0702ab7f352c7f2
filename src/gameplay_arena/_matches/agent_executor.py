# Area: Matches
"""
gameplay_arena._matches.agent_executor - Agent turn execution
=============================================================

Plays one turn for the agent seated at a match's active seat.

The executor first takes the match's lease so no other worker plays
the same turn. It then calls the agent, checks the answer against the
game rules and writes the new turn, releasing the lease in the same
transaction. Any agent failure ends the match as errored; a match is
never left waiting on an agent that misbehaved.
"""

from __future__ import annotations
import copy
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from .._games.base import Game, GameKind, Player, Result, Status
from .._shared.logging_config import log_agent_error
from .._store import LeaseRepository, MatchRepository
from .._store.repo_users import AGENT_ACTIVE
from ..errors import (
    AgentCallError,
    AgentUnavailableError,
    GameError,
    IllegalActionError,
    NotFound,
    TurnConflictError,
)
from ..types import AgentRequest
from .agent_client import call_agent
from .publisher import TurnPublisher
from .views import MatchView, match_view_from_record

logger = logging.getLogger("gameplay_arena.matches.agent_executor")


class AgentTurnOutcome(Enum):
    TURN_TAKEN = "turn_taken"
    LEASE_HELD = "lease_held"            # Another worker is on it
    NOT_AGENT_TURN = "not_agent_turn"    # Match over or a user is to move
    CONFLICT = "conflict"                # Turn was written by someone else


@dataclass(frozen=True)
class AgentTurnResult:
    """
    What ``take_agent_turn`` did.

    Attributes:
        outcome: Whether a turn was written, and if not why
        match_id: Match processed
        turn_number: Number of the turn written
        status: Status after the turn written
        next_is_agent: The new active seat is an agent, so another
            agent turn should be scheduled
    """

    outcome: AgentTurnOutcome
    match_id: str
    turn_number: Optional[int] = None
    status: Optional[Status] = None
    next_is_agent: bool = False


class AgentTurnExecutor:
    """Runs agent turns under the per-match lease."""

    def __init__(
        self,
        matches: MatchRepository,
        leases: LeaseRepository,
        games: Dict[GameKind, Game],
        publisher: TurnPublisher,
        http_client: httpx.Client,
    ):
        self.matches = matches
        self.leases = leases
        self.games = games
        self.publisher = publisher
        self.http_client = http_client

    def take_agent_turn(self, match_id: str) -> AgentTurnResult:
        """
        Play the current turn if it belongs to an agent.

        Raises:
            NotFound: If the match does not exist
        """
        token = self.leases.acquire(match_id)
        if token is None:
            logger.info(f"Match {match_id} already being processed")
            return AgentTurnResult(AgentTurnOutcome.LEASE_HELD, match_id)

        committed = False
        try:
            result = self._take_turn(match_id, token)
            committed = result.outcome is AgentTurnOutcome.TURN_TAKEN
            return result
        finally:
            if not committed:
                self.leases.release(match_id, token)

    def _take_turn(self, match_id: str, token: str) -> AgentTurnResult:
        record = self.matches.get_match(match_id)
        if record is None:
            raise NotFound("match", match_id)
        view = match_view_from_record(record)

        status = view.status
        if status.is_over or not view.players[status.active_player].is_agent:
            logger.debug(f"Match {match_id} is not waiting on an agent")
            return AgentTurnResult(AgentTurnOutcome.NOT_AGENT_TURN, match_id)

        seat = status.active_player
        player = view.players[seat]
        game = self.games[view.game]
        state = game.load_state(copy.deepcopy(view.current_turn.state))

        payload: AgentRequest = {
            "game": view.game.value,
            "agentname": player.agentname,
            "state": game.get_view(state, seat),
        }
        agent_data = self.matches.get_agent_data(match_id, seat)
        if agent_data is not None:
            payload["agent_data"] = agent_data

        action: Optional[Dict[str, Any]] = None
        new_agent_data: Optional[Dict[str, Any]] = None
        try:
            response = self._request_action(view, player, record["players"][seat], payload)
            try:
                game.check_action(state, seat, response.action)
            except GameError as e:
                raise IllegalActionError(
                    player.slug, match_id, dict(payload), game.dump_action(response.action), e
                ) from e
            new_status = game.apply_action(state, seat, response.action)
            action = game.dump_action(response.action)
            new_state = game.dump_state(state)
            new_agent_data = {"player_number": seat, "data": response.agent_data}
        except AgentCallError as e:
            log_agent_error(e)
            new_status = Status.over(Result.errored(e.reason))
            new_state = view.current_turn.state

        turn_number = view.current_turn.turn_number + 1
        try:
            self.matches.append_turn(
                match_id,
                turn_number,
                seat,
                action,
                new_status.to_dict(),
                new_state,
                lease_token=token,
                agent_data=new_agent_data,
            )
        except TurnConflictError:
            logger.warning(f"Turn {turn_number} of {match_id} was already written")
            return AgentTurnResult(AgentTurnOutcome.CONFLICT, match_id)

        self.publisher.publish(match_id, turn_number, over=new_status.is_over)
        logger.info(f"Agent {player.slug} played turn {turn_number} of {match_id}")

        next_is_agent = (
            not new_status.is_over and view.players[new_status.active_player].is_agent
        )
        return AgentTurnResult(
            AgentTurnOutcome.TURN_TAKEN, match_id, turn_number, new_status, next_is_agent
        )

    def _request_action(
        self, view: MatchView, player: Player, seat: Dict[str, Any], payload: AgentRequest
    ) -> Any:
        """Call the agent row the seat was bound to when the match was created."""
        if seat["url"] is None:
            raise AgentUnavailableError(player.slug, view.match_id, dict(payload), "is not registered")
        if seat["agent_status"] != AGENT_ACTIVE:
            raise AgentUnavailableError(player.slug, view.match_id, dict(payload), "is inactive")

        return call_agent(
            self.http_client,
            seat["url"],
            payload,
            self.games[view.game].response_model,
            player.slug,
            view.match_id,
        )
