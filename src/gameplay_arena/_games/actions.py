# Area: Games
"""
gameplay_arena._games.actions - Action and agent response models
================================================================

Pydantic models for the moves a player can make and for the body an
agent must answer with. Agent responses are validated against these
before the action is checked against the game rules.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

COLS = 7
ROWS = 6


# ============================================
# Connect4
# ============================================

class Connect4Action(BaseModel):
    """Drop a disc in ``column``. Numeric strings are coerced."""
    column: int = Field(ge=0, lt=COLS)


class Connect4AgentResponse(BaseModel):
    action: Connect4Action
    agent_data: Optional[Any] = None


# ============================================
# Poker
# ============================================

class FoldAction(BaseModel):
    kind: Literal["fold"]


class CheckAction(BaseModel):
    kind: Literal["check"]


class CallAction(BaseModel):
    kind: Literal["call"]


class BetAction(BaseModel):
    kind: Literal["bet"]
    amount: int = Field(gt=0)


class RaiseAction(BaseModel):
    """Raise ``amount`` on top of calling the current bet."""
    kind: Literal["raise"]
    amount: int = Field(gt=0)


PokerAction = Annotated[
    Union[FoldAction, CheckAction, CallAction, BetAction, RaiseAction],
    Field(discriminator="kind"),
]


class PokerAgentResponse(BaseModel):
    action: PokerAction
    agent_data: Optional[Any] = None
