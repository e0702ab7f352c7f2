# Area: Store
"""
gameplay_arena._store.repo_users - Users and agents repositories
================================================================

Users own agents. An agent is addressed by ``username/agentname`` and
is called over HTTP at its registered url while its status is active.
"""

from typing import Any, Dict, List, Optional

from .._shared.ids import new_agent_id, new_user_id
from ..errors import NotFound
from .database import BaseRepository

AGENT_ACTIVE = "active"
AGENT_INACTIVE = "inactive"


class UserRepository(BaseRepository):
    """Repository for the users table."""

    def create_user(self, username: str) -> str:
        """
        Create a user.

        Args:
            username: Unique login name

        Returns:
            The new user_id

        Raises:
            sqlite3.IntegrityError: If the username is taken
        """
        user_id = new_user_id()
        self._execute(
            "INSERT INTO users (user_id, username) VALUES (?, ?)",
            (user_id, username),
        )
        return user_id

    def get_user_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        return self._execute_one(
            "SELECT user_id, username, created_at FROM users WHERE username = ?",
            (username,),
        )


class AgentRepository(BaseRepository):
    """Repository for the agents table."""

    def create_agent(
        self,
        username: str,
        agentname: str,
        game: str,
        url: str,
        status: str = AGENT_ACTIVE,
    ) -> str:
        """
        Register an agent for an existing user.

        Args:
            username: Owner of the agent
            agentname: Name, unique per owner
            game: Game kind value the agent plays
            url: Endpoint receiving turn requests
            status: 'active' or 'inactive'

        Returns:
            The new agent_id

        Raises:
            NotFound: If the user does not exist
        """
        user = UserRepository(self.db_path).get_user_by_username(username)
        if user is None:
            raise NotFound("user", username)
        agent_id = new_agent_id()
        self._execute(
            """
            INSERT INTO agents (agent_id, user_id, game, agentname, url, status)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (agent_id, user["user_id"], game, agentname, url, status),
        )
        return agent_id

    def get_agent(self, username: str, agentname: str) -> Optional[Dict[str, Any]]:
        """
        Look up an agent by owner and name.

        Returns:
            Agent record including ``username``, or None
        """
        return self._execute_one(
            """
            SELECT a.agent_id, a.user_id, u.username, a.agentname, a.game,
                   a.url, a.status
            FROM agents a JOIN users u ON u.user_id = a.user_id
            WHERE u.username = ? AND a.agentname = ?
            """,
            (username, agentname),
        )

    def get_agents_for_user(self, username: str) -> List[Dict[str, Any]]:
        return self._execute(
            """
            SELECT a.agent_id, u.username, a.agentname, a.game, a.url, a.status
            FROM agents a JOIN users u ON u.user_id = a.user_id
            WHERE u.username = ?
            ORDER BY a.agentname
            """,
            (username,),
            fetch=True,
        )

    def set_status(self, username: str, agentname: str, status: str) -> None:
        """Mark an agent active or inactive."""
        if status not in (AGENT_ACTIVE, AGENT_INACTIVE):
            raise ValueError(f"Unknown agent status: {status}")
        self._execute(
            """
            UPDATE agents SET status = ?
            WHERE agentname = ?
              AND user_id = (SELECT user_id FROM users WHERE username = ?)
            """,
            (status, agentname, username),
        )
