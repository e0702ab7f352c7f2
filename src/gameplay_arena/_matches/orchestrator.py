# Area: Matches
"""
gameplay_arena._matches.orchestrator - Match orchestration
==========================================================

Entry point for everything that happens to a match: creation, user
turns, agent turns and reads. The orchestrator keeps no per-match
state in memory; concurrent callers coordinate only through the store
(the turn primary key for user turns, the lease for agent turns).
"""

from __future__ import annotations
import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .._games import build_games
from .._games.base import GameKind, Player, PlayerKind
from .._shared.ids import new_match_id
from .._store import AgentRepository, LeaseRepository, MatchRepository, UserRepository
from .._tasks.task_queue import AgentTurnTask, TaskQueue
from ..errors import GameError, GameErrorKind, NotAllowed, NotFound, TurnConflictError
from .agent_executor import AgentTurnExecutor, AgentTurnResult
from .publisher import TurnPublisher
from .views import MatchView, match_view_from_record


logger = logging.getLogger("gameplay_arena.matches.orchestrator")


@dataclass(frozen=True)
class CreatedMatch:
    match_id: str
    first_player_agent: bool


class MatchOrchestrator:
    """
    Creates matches and applies turns.

    Args:
        config: Runtime config, see ``gameplay_arena._config``
        publisher: Turn signal, a private one is created if omitted
        task_queue: Where agent turns are scheduled. Without one,
            agent turns only run when ``take_agent_turn`` is called.
        http_client: Client used to call agents. Created with the
            configured timeout if omitted, and closed by ``close``.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        publisher: Optional[TurnPublisher] = None,
        task_queue: Optional[TaskQueue] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        db_path = config["db_path"]
        self.users = UserRepository(db_path)
        self.agents = AgentRepository(db_path)
        self.matches = MatchRepository(db_path)
        self.leases = LeaseRepository(db_path, ttl_seconds=config["lease_ttl_seconds"])
        self.games = build_games(config)
        self.publisher = publisher or TurnPublisher()
        self.task_queue = task_queue

        self._owns_client = http_client is None
        self.http_client = http_client or httpx.Client(timeout=config["agent_timeout_seconds"])
        self.agent_executor = AgentTurnExecutor(
            self.matches, self.leases, self.games, self.publisher, self.http_client
        )

    def close(self) -> None:
        if self._owns_client:
            self.http_client.close()

    # ══════════════════════════════════════════════════════════
    # MATCH CREATION
    # ══════════════════════════════════════════════════════════

    def create_match(
        self, created_by: str, players: List[Player], game: GameKind
    ) -> CreatedMatch:
        """
        Create a match and write its genesis turn.

        Args:
            created_by: Username of the creator
            players: Seats in order
            game: Game to play

        Returns:
            The new match id and whether seat to move first is an agent

        Raises:
            NotFound: If the creator, a seated user or a seated agent does not exist
            GameError: If the game rejects the players
        """
        creator = self.users.get_user_by_username(created_by)
        if creator is None:
            raise NotFound("user", created_by)

        seats = [self._resolve_seat(player, game) for player in players]

        engine = self.games[game]
        state, status = engine.new_game(players)
        if status.is_over:
            raise GameError(GameErrorKind.STATE, "New game is already over.")

        match_id = new_match_id()
        self.matches.create_match(
            match_id,
            game.value,
            creator["user_id"],
            seats,
            status.to_dict(),
            engine.dump_state(state),
        )
        logger.info(f"Match {match_id} created by {created_by}: {game.value}, {len(players)} players")
        self.publisher.publish(match_id, 0)

        first_player_agent = players[status.active_player].is_agent
        if first_player_agent:
            self._schedule_agent_turn(match_id)
        return CreatedMatch(match_id, first_player_agent)

    def _resolve_seat(self, player: Player, game: GameKind) -> Dict[str, Any]:
        user = self.users.get_user_by_username(player.username)
        if user is None:
            raise NotFound("user", player.username)
        if player.kind is PlayerKind.USER:
            return {"player_kind": "user", "user_id": user["user_id"], "agent_id": None}

        agent = self.agents.get_agent(player.username, player.agentname)
        if agent is None:
            raise NotFound("agent", player.slug)
        if agent["game"] != game.value:
            raise GameError(
                GameErrorKind.ARGS, f"Agent '{player.slug}' plays {agent['game']}, not {game.value}."
            )
        return {"player_kind": "agent", "user_id": user["user_id"], "agent_id": agent["agent_id"]}

    # ══════════════════════════════════════════════════════════
    # TURNS
    # ══════════════════════════════════════════════════════════

    def take_user_turn(self, username: str, match_id: str, action: Any) -> bool:
        """
        Apply a user's action to a match.

        Args:
            username: User acting
            match_id: Match identifier
            action: JSON action for the match's game

        Returns:
            True if the turn was written, False if another writer took
            this turn first

        Raises:
            NotFound: If the match does not exist
            NotAllowed: If the active seat is not this user's
            GameError: If the match is over or the action is illegal
        """
        view = self.fetch_match(match_id)
        status = view.status
        if status.is_over:
            raise GameError(GameErrorKind.STATE, "Match is over.")

        seat = status.active_player
        player = view.players[seat]
        if player.kind is not PlayerKind.USER or player.username != username:
            raise NotAllowed(username, "match", match_id, "not your turn")

        engine = self.games[view.game]
        parsed = engine.parse_action(action)
        state = engine.load_state(copy.deepcopy(view.current_turn.state))
        engine.check_action(state, seat, parsed)
        new_status = engine.apply_action(state, seat, parsed)

        turn_number = view.current_turn.turn_number + 1
        try:
            self.matches.append_turn(
                match_id,
                turn_number,
                seat,
                engine.dump_action(parsed),
                new_status.to_dict(),
                engine.dump_state(state),
            )
        except TurnConflictError:
            logger.info(f"{username} lost the race for turn {turn_number} of {match_id}")
            return False

        logger.info(f"{username} played turn {turn_number} of {match_id}")
        self.publisher.publish(match_id, turn_number, over=new_status.is_over)

        if not new_status.is_over and view.players[new_status.active_player].is_agent:
            self._schedule_agent_turn(match_id)
        return True

    def take_agent_turn(self, match_id: str) -> AgentTurnResult:
        """Play the current turn for the agent at the active seat, if any."""
        return self.agent_executor.take_agent_turn(match_id)

    def _schedule_agent_turn(self, match_id: str) -> None:
        if self.task_queue is None:
            logger.debug(f"No task queue, agent turn for {match_id} left to the caller")
            return
        self.task_queue.put(AgentTurnTask(match_id))

    # ══════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════

    def fetch_match(self, match_id: str) -> MatchView:
        """
        Snapshot of a match.

        Raises:
            NotFound: If the match does not exist
        """
        record = self.matches.get_match(match_id)
        if record is None:
            raise NotFound("match", match_id)
        return match_view_from_record(record)

    def get_player_view(self, match_id: str, seat: int) -> Dict[str, Any]:
        """
        What one seat may see of the current state.

        Raises:
            NotFound: If the match does not exist
            GameError: If the seat is not in the match
        """
        view = self.fetch_match(match_id)
        if not 0 <= seat < len(view.players):
            raise GameError(GameErrorKind.PLAYER, f"Seat {seat} is not in this match.")
        engine = self.games[view.game]
        return engine.get_view(engine.load_state(view.current_turn.state), seat)

    def resume_agent_matches(self) -> int:
        """
        Schedule an agent turn for every match waiting on an agent.

        Returns:
            Number of matches scheduled
        """
        match_ids = self.matches.find_matches_awaiting_agent()
        for match_id in match_ids:
            self._schedule_agent_turn(match_id)
        if match_ids:
            logger.info(f"Resumed {len(match_ids)} matches waiting on agents")
        return len(match_ids)
