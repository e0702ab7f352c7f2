# Area: Matches
"""
gameplay_arena._matches.views - Match read model
================================================

Dataclasses returned by ``MatchOrchestrator.fetch_match``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .._games.base import GameKind, Player, PlayerKind, Status


@dataclass
class TurnRecord:
    """
    One entry of the turn log.

    Attributes:
        turn_number: Position in the log, 0 for the genesis turn
        player_number: Seat that acted, None for turn 0
        action: Action taken, None for turn 0 and for failed agent turns
        created_at: Database timestamp of the write
    """

    turn_number: int
    player_number: Optional[int]
    action: Optional[Dict[str, Any]]
    created_at: Optional[str] = None


@dataclass
class CurrentTurn:
    turn_number: int
    status: Status
    state: Dict[str, Any]


@dataclass
class MatchView:
    """
    Snapshot of a match.

    Attributes:
        match_id: Opaque, time-sortable identifier
        game: Which game is played
        created_by: Username of the creator
        turn_number: Number of the latest turn
        players: Seats in order
        turns: Full turn log, oldest first
        current_turn: Status and full state after the latest turn
    """

    match_id: str
    game: GameKind
    created_by: str
    turn_number: int
    players: List[Player]
    current_turn: CurrentTurn
    turns: List[TurnRecord] = field(default_factory=list)

    @property
    def status(self) -> Status:
        return self.current_turn.status

    def to_dict(self) -> Dict[str, Any]:
        return {
            "match_id": self.match_id,
            "game": self.game.value,
            "created_by": self.created_by,
            "turn_number": self.turn_number,
            "players": [player.to_dict() for player in self.players],
            "turns": [
                {
                    "turn_number": turn.turn_number,
                    "player_number": turn.player_number,
                    "action": turn.action,
                }
                for turn in self.turns
            ],
            "current_turn": {
                "turn_number": self.current_turn.turn_number,
                "status": self.current_turn.status.to_dict(),
                "state": self.current_turn.state,
            },
        }


def match_view_from_record(record: Dict[str, Any]) -> MatchView:
    """Build a MatchView from ``MatchRepository.get_match`` output."""
    players = [
        Player(PlayerKind(row["player_kind"]), row["username"], row.get("agentname"))
        for row in record["players"]
    ]
    current = record["current_turn"]
    return MatchView(
        match_id=record["match_id"],
        game=GameKind(record["game"]),
        created_by=record["created_by"],
        turn_number=record["turn_number"],
        players=players,
        current_turn=CurrentTurn(
            turn_number=current["turn_number"],
            status=Status.from_dict(current["status"]),
            state=current["state"],
        ),
        turns=[TurnRecord(**turn) for turn in record["turns"]],
    )
