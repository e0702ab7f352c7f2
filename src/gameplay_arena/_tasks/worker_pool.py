# Area: Tasks
"""
gameplay_arena._tasks.worker_pool - Agent turn workers
======================================================

Daemon threads consuming the task queue. A failing task is logged and
the worker moves on to the next one.
"""

from __future__ import annotations
import logging
import threading
from typing import TYPE_CHECKING, List

from .task_queue import TaskQueue, process_task

if TYPE_CHECKING:
    from .._matches.orchestrator import MatchOrchestrator

logger = logging.getLogger("gameplay_arena.tasks.workers")

# Seconds a worker waits on an empty queue before checking for shutdown
POLL_INTERVAL = 0.2


class WorkerPool:
    """Fixed number of threads running ``process_task``."""

    def __init__(
        self,
        orchestrator: "MatchOrchestrator",
        task_queue: TaskQueue,
        worker_count: int = 4,
        max_chain: int = 1000,
    ):
        self.orchestrator = orchestrator
        self.task_queue = task_queue
        self.worker_count = worker_count
        self.max_chain = max_chain
        self._stop = threading.Event()
        self._threads: List[threading.Thread] = []

    @property
    def running(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._threads = [
            threading.Thread(target=self._work, name=f"agent-worker-{i}", daemon=True)
            for i in range(self.worker_count)
        ]
        for thread in self._threads:
            thread.start()
        logger.info(f"Started {self.worker_count} agent workers")

    def stop(self, timeout: float = 5.0) -> None:
        """Signal workers to stop and wait for them to finish their current task."""
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout)
        self._threads = []
        logger.info("Agent workers stopped")

    def _work(self) -> None:
        while not self._stop.is_set():
            task = self.task_queue.get(timeout=POLL_INTERVAL)
            if task is None:
                continue
            try:
                process_task(self.orchestrator, self.task_queue, task, self.max_chain)
            except Exception:
                logger.error(f"Agent turn for {task.match_id} failed", exc_info=True)
            finally:
                self.task_queue.task_done()
