"""
gameplay_arena.types - TypedDict schemas for agent requests and views
=====================================================================

This module documents the exact JSON exchanged with agents and the
per-player views produced by each game. Agent authors should reference
these types when implementing an agent endpoint.

An agent receives an ``AgentRequest`` as the body of an HTTP POST and
answers with an ``AgentResponse``:

    POST <agent url>
    {"game": "connect4", "agentname": "bot", "state": {...}, "agent_data": {...}}

    200 OK
    {"action": {"column": 3}, "agent_data": {...}}
"""

from typing import Any, Dict, List, Literal, Optional, TypedDict


# ============================================
# Connect4
# ============================================

class Connect4View(TypedDict):
    """Full Connect4 state; nothing is hidden.

    Fields
    ------
    board : List[List[Optional[int]]]
        Seven columns of six slots, row 0 at the bottom. A slot holds
        the seat (0 or 1) whose disc fills it, or None.
    active_player : int
        Seat that moves next.
    """
    board: List[List[Optional[int]]]
    active_player: int


# ============================================
# Poker
# ============================================

class CardDict(TypedDict):
    rank: str               # "two" ... "king", "ace"
    suit: str               # "clubs", "diamonds", "hearts", "spades"


class PokerRoundView(TypedDict):
    """One round as seen by a single seat.

    The deck and the other seats' hole cards are removed; ``my_cards``
    holds the viewer's own two cards (None once the seat is out).
    """
    stage: Literal["preflop", "flop", "turn", "river", "showdown"]
    table_cards: List[CardDict]
    bet: int
    pot: int
    dealer: int
    active_player: int
    player_status: List[Literal["playing", "all-in", "folded", "out"]]
    player_bets: List[int]
    player_acted: List[bool]
    winners: List[int]
    my_cards: Optional[List[CardDict]]


class PokerView(TypedDict):
    """Poker state as seen by a single seat."""
    player_chips: List[int]
    blinds: List[int]
    round: int
    rounds: List[PokerRoundView]


# ============================================
# Agent protocol
# ============================================

class _AgentRequestRequired(TypedDict):
    game: Literal["connect4", "poker"]
    agentname: str
    state: Dict[str, Any]   # Connect4View or PokerView


class AgentRequest(_AgentRequestRequired, total=False):
    """Body POSTed to an agent.

    ``agent_data`` is present only when the agent returned some on its
    previous turn in this match.
    """
    agent_data: Any


class _AgentResponseRequired(TypedDict):
    action: Dict[str, Any]


class AgentResponse(_AgentResponseRequired, total=False):
    """Body an agent must answer with."""
    agent_data: Any
