# Area: Store
"""
gameplay_arena._store.repo_matches - Matches repository
=======================================================

Matches, their seats, the append-only turn log and the opaque data
agents carry between their own turns.

Turns are keyed by (match_id, turn_number). Writing a turn number that
already exists raises ``TurnConflictError``; that is how two players
racing for the same turn are told apart.
"""

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional

from ..errors import TurnConflictError
from .database import BaseRepository

logger = logging.getLogger("gameplay_arena.store.matches")


def _dumps(value: Any) -> Optional[str]:
    return None if value is None else json.dumps(value)


def _loads(text: Optional[str]) -> Any:
    return None if text is None else json.loads(text)


class MatchRepository(BaseRepository):
    """Repository for matches, match_players, match_turns and match_agent_data."""

    def create_match(
        self,
        match_id: str,
        game: str,
        created_by: str,
        seats: List[Dict[str, Any]],
        status: Dict[str, Any],
        state: Dict[str, Any],
    ) -> None:
        """
        Create a match with its seats and genesis turn 0 in one transaction.

        Args:
            match_id: New match identifier
            game: Game kind value
            created_by: user_id of the creator
            seats: One dict per seat with ``player_kind``, ``user_id`` and
                ``agent_id`` (None for user seats), in seat order
            status: Initial status dict
            state: Initial game state dict
        """
        with self.transaction() as conn:
            conn.execute(
                "INSERT INTO matches (match_id, game, created_by, turn_number) VALUES (?, ?, ?, 0)",
                (match_id, game, created_by),
            )
            conn.executemany(
                """
                INSERT INTO match_players
                (match_id, player_number, player_kind, user_id, agent_id)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (match_id, number, seat["player_kind"], seat["user_id"], seat.get("agent_id"))
                    for number, seat in enumerate(seats)
                ],
            )
            self._insert_turn(conn, match_id, 0, status, None, None, state)
        logger.debug(f"Match {match_id} created with {len(seats)} seats")

    def get_match(self, match_id: str) -> Optional[Dict[str, Any]]:
        """
        Read a match, its seats, turn log and current turn as one snapshot.

        Returns:
            Dict with ``match_id``, ``game``, ``created_by`` (username),
            ``turn_number``, ``players``, ``turns`` and ``current_turn``,
            or None if the match does not exist
        """
        with self.transaction(write=False) as conn:
            match = conn.execute(
                """
                SELECT m.match_id, m.game, u.username AS created_by,
                       m.turn_number, m.created_at
                FROM matches m JOIN users u ON u.user_id = m.created_by
                WHERE m.match_id = ?
                """,
                (match_id,),
            ).fetchone()
            if match is None:
                return None

            players = conn.execute(
                """
                SELECT mp.player_number, mp.player_kind, u.username,
                       a.agentname, a.url, a.status AS agent_status
                FROM match_players mp
                JOIN users u ON u.user_id = mp.user_id
                LEFT JOIN agents a ON a.agent_id = mp.agent_id
                WHERE mp.match_id = ?
                ORDER BY mp.player_number
                """,
                (match_id,),
            ).fetchall()

            turns = conn.execute(
                """
                SELECT turn_number, player_number, action, created_at
                FROM match_turns WHERE match_id = ?
                ORDER BY turn_number
                """,
                (match_id,),
            ).fetchall()

            current = conn.execute(
                """
                SELECT turn_number, status, state
                FROM match_turns WHERE match_id = ?
                ORDER BY turn_number DESC LIMIT 1
                """,
                (match_id,),
            ).fetchone()

        result = dict(match)
        result["players"] = [dict(row) for row in players]
        result["turns"] = [
            {
                "turn_number": row["turn_number"],
                "player_number": row["player_number"],
                "action": _loads(row["action"]),
                "created_at": row["created_at"],
            }
            for row in turns
        ]
        result["current_turn"] = {
            "turn_number": current["turn_number"],
            "status": json.loads(current["status"]),
            "state": json.loads(current["state"]),
        }
        return result

    def append_turn(
        self,
        match_id: str,
        turn_number: int,
        player_number: int,
        action: Optional[Dict[str, Any]],
        status: Dict[str, Any],
        state: Dict[str, Any],
        lease_token: Optional[str] = None,
        agent_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Write the next turn atomically.

        The turn row, the match's turn counter, the release of the agent
        lease and the agent's data for its next turn are one transaction.

        Args:
            match_id: Match identifier
            turn_number: Number of the turn being written
            player_number: Seat that acted
            action: Action taken, None when an agent failed to produce one
            status: Status after the turn
            state: Game state after the turn
            lease_token: Agent lease to release, if an agent turn
            agent_data: ``{"player_number": n, "data": ...}`` to store for
                that seat, if any

        Raises:
            TurnConflictError: If ``turn_number`` was already written
        """
        try:
            with self.transaction() as conn:
                self._insert_turn(conn, match_id, turn_number, status, player_number, action, state)
                updated = conn.execute(
                    "UPDATE matches SET turn_number = ? WHERE match_id = ? AND turn_number = ?",
                    (turn_number, match_id, turn_number - 1),
                ).rowcount
                if updated != 1:
                    raise TurnConflictError(match_id, turn_number)
                if lease_token is not None:
                    conn.execute(
                        "DELETE FROM match_leases WHERE match_id = ? AND lease_token = ?",
                        (match_id, lease_token),
                    )
                if agent_data is not None:
                    conn.execute(
                        """
                        INSERT INTO match_agent_data (match_id, player_number, agent_data)
                        VALUES (?, ?, ?)
                        ON CONFLICT (match_id, player_number) DO UPDATE SET
                            agent_data = excluded.agent_data,
                            updated_at = CURRENT_TIMESTAMP
                        """,
                        (match_id, agent_data["player_number"], _dumps(agent_data["data"])),
                    )
        except sqlite3.IntegrityError as e:
            logger.debug(f"Turn {turn_number} of {match_id} rejected: {e}")
            raise TurnConflictError(match_id, turn_number) from e

    def get_agent_data(self, match_id: str, player_number: int) -> Any:
        """Data the seat's agent returned on its previous turn, or None."""
        row = self._execute_one(
            "SELECT agent_data FROM match_agent_data WHERE match_id = ? AND player_number = ?",
            (match_id, player_number),
        )
        return _loads(row["agent_data"]) if row else None

    def get_turn_state(self, match_id: str, turn_number: int) -> Optional[Dict[str, Any]]:
        """State stored with a given turn, for replays."""
        row = self._execute_one(
            "SELECT state FROM match_turns WHERE match_id = ? AND turn_number = ?",
            (match_id, turn_number),
        )
        return _loads(row["state"]) if row else None

    def find_matches_awaiting_agent(self) -> List[str]:
        """Ids of in-progress matches whose active seat is an agent, oldest first."""
        rows = self._execute(
            """
            SELECT m.match_id
            FROM matches m
            JOIN match_turns t
              ON t.match_id = m.match_id AND t.turn_number = m.turn_number
            JOIN match_players mp
              ON mp.match_id = m.match_id AND mp.player_number = t.active_player
            WHERE t.status_kind = 'in_progress' AND mp.player_kind = 'agent'
            ORDER BY m.match_id
            """,
            fetch=True,
        )
        return [row["match_id"] for row in rows]

    @staticmethod
    def _insert_turn(
        conn: sqlite3.Connection,
        match_id: str,
        turn_number: int,
        status: Dict[str, Any],
        player_number: Optional[int],
        action: Optional[Dict[str, Any]],
        state: Dict[str, Any],
    ) -> None:
        conn.execute(
            """
            INSERT INTO match_turns
            (match_id, turn_number, status_kind, status, active_player,
             player_number, action, state)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                match_id,
                turn_number,
                status["status"],
                json.dumps(status),
                status.get("active_player"),
                player_number,
                _dumps(action),
                json.dumps(state),
            ),
        )
