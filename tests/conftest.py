# Area: Tests
"""Shared fixtures: temporary database, config and a fake agent endpoint."""

import json
import logging
import os
import tempfile
from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest

from gameplay_arena._config import DEFAULT_CONFIG
from gameplay_arena._store import AgentRepository, UserRepository, init_database

AGENT_URL = "http://agents.test/"


@pytest.fixture
def db_path():
    """Create temporary database for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    init_database(path)
    yield path
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(path + suffix):
            os.unlink(path + suffix)


@pytest.fixture
def config(db_path):
    cfg = dict(DEFAULT_CONFIG)
    cfg["db_path"] = db_path
    cfg["agent_timeout_seconds"] = 5
    return cfg


@pytest.fixture
def users(db_path):
    """Users alice, bob and carol."""
    repo = UserRepository(db_path)
    for name in ("alice", "bob", "carol"):
        repo.create_user(name)
    return repo


@pytest.fixture
def agents(db_path, users):
    return AgentRepository(db_path)


class FakeAgents:
    """
    Stands in for agent HTTP endpoints.

    Each agent url path maps to a function taking the decoded request
    body and returning an ``httpx.Response``. Requests are recorded.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Callable[[Dict[str, Any]], httpx.Response]] = {}
        self.requests: List[Tuple[str, Dict[str, Any]]] = []

    def route(self, path: str, responder: Callable[[Dict[str, Any]], httpx.Response]) -> str:
        self.routes[path] = responder
        return AGENT_URL.rstrip("/") + path

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append((request.url.path, body))
        return self.routes[request.url.path](body)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


def _first_open_column(body: Dict[str, Any]) -> httpx.Response:
    """Connect4 agent dropping into the leftmost column with room."""
    board = body["state"]["board"]
    column = next(i for i, col in enumerate(board) if col[-1] is None)
    return httpx.Response(200, json={"action": {"column": column}})


@pytest.fixture
def fake_agents():
    return FakeAgents()


@pytest.fixture
def http_client(fake_agents):
    client = fake_agents.client()
    yield client
    client.close()


@pytest.fixture
def restore_package_logger():
    """Undo setup_logging so later tests see default logger settings."""
    pkg_logger = logging.getLogger("gameplay_arena")
    level, propagate = pkg_logger.level, pkg_logger.propagate
    yield pkg_logger
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
        handler.close()
    pkg_logger.setLevel(level)
    pkg_logger.propagate = propagate


@pytest.fixture
def first_open_column():
    return _first_open_column
