# Area: Shared
"""Identifier generation for matches, users, agents and leases."""

import uuid

from uuid6 import uuid7


def new_match_id() -> str:
    """Return a time-sortable match id such as ``m_0192f3...``."""
    return "m_" + uuid7().hex


def new_user_id() -> str:
    return "u_" + uuid7().hex


def new_agent_id() -> str:
    return "a_" + uuid7().hex


def new_lease_token() -> str:
    return uuid.uuid4().hex
