# Area: Tasks
"""
gameplay_arena._tasks.task_queue - Agent turn tasks
===================================================

At-least-once queue of agent turns. A task names a match; running it
plays at most one agent turn for that match. Duplicate tasks are
harmless because the agent lease and the turn key make the second run
a no-op.

Consecutive agent turns are chained: each processed task enqueues the
next one while the new active seat is still an agent. ``chain`` counts
the hops so a chain can be cut at a configured length; a cut chain is
picked up again by ``resume_agent_matches``.
"""

from __future__ import annotations
import logging
import queue
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .._matches.agent_executor import AgentTurnResult
    from .._matches.orchestrator import MatchOrchestrator

logger = logging.getLogger("gameplay_arena.tasks.queue")


@dataclass(frozen=True)
class AgentTurnTask:
    match_id: str
    chain: int = 0


class TaskQueue:
    """Thread-safe FIFO of ``AgentTurnTask``."""

    def __init__(self) -> None:
        self._queue: "queue.Queue[AgentTurnTask]" = queue.Queue()

    def put(self, task: AgentTurnTask) -> None:
        self._queue.put(task)
        logger.debug(f"Queued agent turn for {task.match_id} (chain {task.chain})")

    def get(self, timeout: Optional[float] = None) -> Optional[AgentTurnTask]:
        """Next task, or None if none arrives within ``timeout`` seconds."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def task_done(self) -> None:
        self._queue.task_done()

    def join(self) -> None:
        """Block until every queued task has been marked done."""
        self._queue.join()

    def qsize(self) -> int:
        return self._queue.qsize()


def process_task(
    orchestrator: "MatchOrchestrator",
    task_queue: TaskQueue,
    task: AgentTurnTask,
    max_chain: int,
) -> "AgentTurnResult":
    """
    Run one agent turn and schedule the next one if an agent moves again.

    Args:
        orchestrator: Orchestrator that plays the turn
        task_queue: Queue receiving the follow-up task
        task: Task to run
        max_chain: Longest run of consecutive agent turns per chain

    Returns:
        The result of the agent turn
    """
    result = orchestrator.take_agent_turn(task.match_id)
    if result.next_is_agent:
        next_chain = task.chain + 1
        if next_chain < max_chain:
            task_queue.put(AgentTurnTask(task.match_id, next_chain))
        else:
            logger.warning(
                f"Agent chain for {task.match_id} cut after {next_chain} turns; "
                f"resume_agent_matches will pick it up"
            )
    return result
