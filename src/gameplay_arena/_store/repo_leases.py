# Area: Store
"""
gameplay_arena._store.repo_leases - Agent lease repository
==========================================================

At most one worker processes a match's agent turn at a time. A worker
holds the match's lease row while it calls the agent. Leases older
than the TTL are treated as abandoned by a crashed worker and may be
taken over.
"""

import logging
import time
from typing import Any, Dict, Optional

from .._shared.ids import new_lease_token
from .database import BaseRepository

logger = logging.getLogger("gameplay_arena.store.leases")


class LeaseRepository(BaseRepository):
    """Repository for the match_leases table."""

    def __init__(self, db_path: str = "gameplay.db", ttl_seconds: float = 60.0):
        super().__init__(db_path)
        self.ttl_seconds = ttl_seconds

    def acquire(self, match_id: str, now: Optional[float] = None) -> Optional[str]:
        """
        Try to take the lease for a match.

        Args:
            match_id: Match identifier
            now: Current unix time, defaults to ``time.time()``

        Returns:
            Lease token if acquired, None if another holder's lease is
            still fresh
        """
        now = time.time() if now is None else now
        token = new_lease_token()
        with self.transaction() as conn:
            stale = conn.execute(
                "DELETE FROM match_leases WHERE match_id = ? AND acquired_at < ?",
                (match_id, now - self.ttl_seconds),
            ).rowcount
            if stale:
                logger.warning(f"Took over stale agent lease on {match_id}")
            inserted = conn.execute(
                """
                INSERT OR IGNORE INTO match_leases (match_id, lease_token, acquired_at)
                VALUES (?, ?, ?)
                """,
                (match_id, token, now),
            ).rowcount
        return token if inserted == 1 else None

    def release(self, match_id: str, token: str) -> bool:
        """
        Release a lease if it is still ours.

        Returns:
            True if a lease row was deleted
        """
        conn = self._get_conn()
        try:
            deleted = conn.execute(
                "DELETE FROM match_leases WHERE match_id = ? AND lease_token = ?",
                (match_id, token),
            ).rowcount
        finally:
            conn.close()
        return deleted == 1

    def get_lease(self, match_id: str) -> Optional[Dict[str, Any]]:
        return self._execute_one(
            "SELECT match_id, lease_token, acquired_at FROM match_leases WHERE match_id = ?",
            (match_id,),
        )
