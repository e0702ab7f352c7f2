# Area: Store
"""
gameplay_arena._store - SQLite persistence
==========================================

Repositories for users, agents, matches and agent leases. Every
operation opens its own connection, so repositories may be shared
between threads.
"""

from .database import BaseRepository, get_connection, init_database
from .repo_leases import LeaseRepository
from .repo_matches import MatchRepository
from .repo_users import AgentRepository, UserRepository

__all__ = [
    "BaseRepository",
    "get_connection",
    "init_database",
    "LeaseRepository",
    "MatchRepository",
    "AgentRepository",
    "UserRepository",
]
