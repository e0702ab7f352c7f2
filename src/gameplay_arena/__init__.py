"""
gameplay_arena - Turn-based matches between users and HTTP agents
==================================================================

Quick Start:
    from gameplay_arena import MatchOrchestrator, Player, GameKind, load_config
    from gameplay_arena import init_database

    config = load_config()
    init_database(config["db_path"])
    arena = MatchOrchestrator(config)

    created = arena.create_match(
        "alice",
        [Player.user("alice"), Player.agent("bob", "minimax")],
        GameKind.CONNECT4,
    )
    arena.take_user_turn("alice", created.match_id, {"column": 3})

Agent turns run in the background when the orchestrator is given a
``TaskQueue`` consumed by a ``WorkerPool`` (see ``WorkerRunner`` or
``python -m gameplay_arena worker``).

Games
-----
- Connect4: two players, 7x6 board.
- Poker: No-Limit Texas Hold'em for 2 to 10 players.

Agent request and response shapes are documented in ``gameplay_arena.types``.
"""

from ._config import DEFAULT_CONFIG, load_config, validate_config
from ._games import Connect4, Game, GameKind, Player, PlayerKind, Poker, Result, ResultKind, Status
from ._matches import (
    AgentTurnOutcome,
    AgentTurnResult,
    CreatedMatch,
    MatchOrchestrator,
    MatchView,
    TurnPublisher,
)
from ._shared.logging_config import setup_logging
from ._store import AgentRepository, UserRepository, init_database
from ._tasks import AgentTurnTask, TaskQueue, WorkerPool, process_task
from .errors import (
    AgentCallError,
    AgentHTTPStatusError,
    AgentTransportError,
    AgentUnavailableError,
    GameError,
    GameErrorKind,
    GameplayError,
    IllegalActionError,
    InvalidJSONResponseError,
    NotAllowed,
    NotFound,
    SchemaValidationError,
)
from .types import AgentRequest, AgentResponse, Connect4View, PokerView
from .worker_runner import WorkerRunner

__all__ = [
    # Orchestration
    "MatchOrchestrator",
    "CreatedMatch",
    "MatchView",
    "AgentTurnOutcome",
    "AgentTurnResult",
    "TurnPublisher",
    # Games
    "Game",
    "GameKind",
    "Connect4",
    "Poker",
    "Player",
    "PlayerKind",
    "Result",
    "ResultKind",
    "Status",
    # Workers
    "AgentTurnTask",
    "TaskQueue",
    "WorkerPool",
    "WorkerRunner",
    "process_task",
    # Setup
    "DEFAULT_CONFIG",
    "load_config",
    "validate_config",
    "setup_logging",
    "init_database",
    "UserRepository",
    "AgentRepository",
    # Errors
    "GameplayError",
    "GameError",
    "GameErrorKind",
    "NotFound",
    "NotAllowed",
    "AgentCallError",
    "AgentUnavailableError",
    "AgentTransportError",
    "AgentHTTPStatusError",
    "InvalidJSONResponseError",
    "SchemaValidationError",
    "IllegalActionError",
    # Types
    "AgentRequest",
    "AgentResponse",
    "Connect4View",
    "PokerView",
]

__version__ = "1.0.0"
