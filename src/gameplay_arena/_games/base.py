# Area: Games
"""
gameplay_arena._games.base - Game engine contract
=================================================

Shared value types for all games (players, status, result) and the
abstract ``Game`` interface each engine implements. Engines are pure:
they receive a state loaded from the store, mutate that fresh copy in
place, and return the new status. They never perform I/O.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..errors import GameError, GameErrorKind


class GameKind(Enum):
    """Games the arena can run."""
    CONNECT4 = "connect4"
    POKER = "poker"


class PlayerKind(Enum):
    USER = "user"
    AGENT = "agent"


@dataclass(frozen=True)
class Player:
    """A seat in a match: a human user or one of a user's agents."""
    kind: PlayerKind
    username: str
    agentname: Optional[str] = None

    @classmethod
    def user(cls, username: str) -> "Player":
        return cls(PlayerKind.USER, username)

    @classmethod
    def agent(cls, username: str, agentname: str) -> "Player":
        return cls(PlayerKind.AGENT, username, agentname)

    @property
    def is_agent(self) -> bool:
        return self.kind is PlayerKind.AGENT

    @property
    def slug(self) -> str:
        """``username/agentname`` for agents, ``username`` for users."""
        if self.is_agent:
            return f"{self.username}/{self.agentname}"
        return self.username

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind.value, "username": self.username}
        if self.is_agent:
            data["agentname"] = self.agentname
        return data


class ResultKind(Enum):
    WINNER = "winner"
    DRAW = "draw"
    ERRORED = "errored"


@dataclass(frozen=True)
class Result:
    """How a match ended.

    Attributes:
        kind: Winner, draw or errored.
        players: Winning seats, only for ``winner``.
        reason: Failure description, only for ``errored``.
    """
    kind: ResultKind
    players: Tuple[int, ...] = ()
    reason: Optional[str] = None

    @classmethod
    def winner(cls, players: List[int]) -> "Result":
        return cls(ResultKind.WINNER, players=tuple(players))

    @classmethod
    def draw(cls) -> "Result":
        return cls(ResultKind.DRAW)

    @classmethod
    def errored(cls, reason: str) -> "Result":
        return cls(ResultKind.ERRORED, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        if self.kind is ResultKind.WINNER:
            return {"kind": "winner", "players": list(self.players)}
        if self.kind is ResultKind.ERRORED:
            return {"kind": "errored", "reason": self.reason}
        return {"kind": "draw"}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Result":
        kind = ResultKind(data["kind"])
        if kind is ResultKind.WINNER:
            return cls.winner(data["players"])
        if kind is ResultKind.ERRORED:
            return cls.errored(data["reason"])
        return cls.draw()


@dataclass(frozen=True)
class Status:
    """Either in progress with an active seat, or over with a result."""
    active_player: Optional[int] = None
    result: Optional[Result] = None

    @classmethod
    def in_progress(cls, active_player: int) -> "Status":
        return cls(active_player=active_player)

    @classmethod
    def over(cls, result: Result) -> "Status":
        return cls(result=result)

    @property
    def is_over(self) -> bool:
        return self.result is not None

    @property
    def kind(self) -> str:
        return "over" if self.is_over else "in_progress"

    def to_dict(self) -> Dict[str, Any]:
        if self.result is not None:
            return {"status": "over", "result": self.result.to_dict()}
        return {"status": "in_progress", "active_player": self.active_player}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Status":
        if data["status"] == "over":
            return cls.over(Result.from_dict(data["result"]))
        return cls.in_progress(data["active_player"])


S = TypeVar("S")


class Game(ABC, Generic[S]):
    """Rules of one game.

    Subclasses set ``kind``, ``state_type``, ``action_type`` and
    ``response_model``; the (de)serialisation helpers below are derived
    from those.
    """

    kind: GameKind
    state_type: Type[Any]
    action_type: Any
    response_model: Type[BaseModel]

    def __init__(self) -> None:
        self._state_adapter = TypeAdapter(self.state_type)
        self._action_adapter = TypeAdapter(self.action_type)

    # ── Rules ──────────────────────────────────────────────────

    @abstractmethod
    def new_game(self, players: List[Player]) -> Tuple[S, Status]:
        """Create the initial state for ``players``. Raises GameError(ARGS)."""

    @abstractmethod
    def check_action(self, state: S, player: int, action: Any) -> None:
        """Raise GameError if ``player`` may not take ``action`` now."""

    @abstractmethod
    def apply_action(self, state: S, player: int, action: Any) -> Status:
        """Validate then apply ``action``, mutating ``state``."""

    @abstractmethod
    def get_view(self, state: S, player: int) -> Dict[str, Any]:
        """Return what ``player`` is allowed to see of ``state``."""

    # ── Serialisation ──────────────────────────────────────────

    def load_state(self, data: Dict[str, Any]) -> S:
        return self._state_adapter.validate_python(data)

    def dump_state(self, state: S) -> Dict[str, Any]:
        return self._state_adapter.dump_python(state, mode="json")

    def parse_action(self, data: Any) -> Any:
        """Validate a JSON action. Malformed input is an Action error."""
        try:
            return self._action_adapter.validate_python(data)
        except ValidationError as e:
            raise GameError(GameErrorKind.ACTION, f"Invalid action: {_first_error(e)}")

    def dump_action(self, action: Any) -> Dict[str, Any]:
        return self._action_adapter.dump_python(action, mode="json")


def _first_error(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        return f"{location}: {first['msg']}"
    return first["msg"]
