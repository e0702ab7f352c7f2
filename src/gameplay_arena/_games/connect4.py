# Area: Games
"""
gameplay_arena._games.connect4 - Connect4 rules
===============================================

Two players drop discs into a 7 column by 6 row board. The board is
stored column-major: ``board[col][row]`` with row 0 at the bottom.
Four in a row on any axis wins; a full board with no line is a draw.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..errors import GameError, GameErrorKind
from ..types import Connect4View
from .actions import COLS, ROWS, Connect4Action, Connect4AgentResponse
from .base import Game, GameKind, Player, Result, Status

# Directions checked for a line through the last disc
_AXES = ((1, 0), (0, 1), (1, 1), (1, -1))


def _empty_board() -> List[List[Optional[int]]]:
    return [[None] * ROWS for _ in range(COLS)]


@dataclass
class Connect4State:
    board: List[List[Optional[int]]] = field(default_factory=_empty_board)
    active_player: int = 0


class Connect4(Game[Connect4State]):
    """Connect4 engine."""

    kind = GameKind.CONNECT4
    state_type = Connect4State
    action_type = Connect4Action
    response_model = Connect4AgentResponse

    def new_game(self, players: List[Player]) -> Tuple[Connect4State, Status]:
        if len(players) != 2:
            raise GameError(GameErrorKind.ARGS, "Connect4 requires exactly 2 players.")
        state = Connect4State()
        return state, Status.in_progress(state.active_player)

    def check_action(self, state: Connect4State, player: int, action: Connect4Action) -> None:
        if player != state.active_player:
            raise GameError(GameErrorKind.PLAYER, "It is not this player's turn.")
        if not 0 <= action.column < COLS:
            raise GameError(GameErrorKind.ACTION, "Column is out of bounds.")
        if state.board[action.column][ROWS - 1] is not None:
            raise GameError(GameErrorKind.ACTION, "Column is full.")

    def apply_action(self, state: Connect4State, player: int, action: Connect4Action) -> Status:
        self.check_action(state, player, action)

        column = state.board[action.column]
        row = column.index(None)
        column[row] = player
        state.active_player = 1 - player

        if self._line_length(state, action.column, row) >= 4:
            return Status.over(Result.winner([player]))
        if all(col[ROWS - 1] is not None for col in state.board):
            return Status.over(Result.draw())
        return Status.in_progress(state.active_player)

    def get_view(self, state: Connect4State, player: int) -> Connect4View:
        # Nothing is hidden in Connect4
        return self.dump_state(state)

    @staticmethod
    def _line_length(state: Connect4State, col: int, row: int) -> int:
        """Longest line of equal discs through (col, row)."""
        owner = state.board[col][row]
        longest = 1
        for dc, dr in _AXES:
            count = 1
            for sign in (1, -1):
                c, r = col + sign * dc, row + sign * dr
                while 0 <= c < COLS and 0 <= r < ROWS and state.board[c][r] == owner:
                    count += 1
                    c, r = c + sign * dc, r + sign * dr
            longest = max(longest, count)
        return longest
