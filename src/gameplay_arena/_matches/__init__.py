# Area: Matches
"""Match orchestration: creation, user and agent turns, reads and notifications."""

from .agent_executor import AgentTurnExecutor, AgentTurnOutcome, AgentTurnResult
from .orchestrator import CreatedMatch, MatchOrchestrator
from .publisher import TurnPublisher
from .views import CurrentTurn, MatchView, TurnRecord

__all__ = [
    "AgentTurnExecutor",
    "AgentTurnOutcome",
    "AgentTurnResult",
    "CreatedMatch",
    "MatchOrchestrator",
    "TurnPublisher",
    "CurrentTurn",
    "MatchView",
    "TurnRecord",
]
