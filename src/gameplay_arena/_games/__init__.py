# Area: Games
"""
gameplay_arena._games - Game engines
====================================

Each supported game is a ``Game`` subclass. ``build_games`` returns one
engine per ``GameKind``, configured from the runtime config.
"""

from typing import Any, Dict, Optional

from .base import Game, GameKind, Player, PlayerKind, Result, ResultKind, Status
from .connect4 import Connect4
from .poker import Poker


def build_games(config: Optional[Dict[str, Any]] = None) -> Dict[GameKind, Game]:
    """Create the engine for every game kind."""
    config = config or {}
    poker_options = {}
    if "poker_starting_chips" in config:
        poker_options["starting_chips"] = int(config["poker_starting_chips"])
    if "poker_blinds" in config:
        small, big = config["poker_blinds"]
        poker_options["blinds"] = (int(small), int(big))
    return {
        GameKind.CONNECT4: Connect4(),
        GameKind.POKER: Poker(**poker_options),
    }


__all__ = [
    "Game",
    "GameKind",
    "Player",
    "PlayerKind",
    "Result",
    "ResultKind",
    "Status",
    "Connect4",
    "Poker",
    "build_games",
]
