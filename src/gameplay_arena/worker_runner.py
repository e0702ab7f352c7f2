# Area: Tasks
"""
gameplay_arena.worker_runner - Agent worker process
===================================================

Runs the worker pool that plays agent turns. On start it schedules
every match left waiting on an agent (after a crash, or a chain that
was cut), then blocks until interrupted.
"""

from __future__ import annotations
import logging
import signal
import time
from typing import Any, Dict

from ._config import validate_config
from ._matches import MatchOrchestrator
from ._shared.logging_config import setup_logging
from ._store import init_database
from ._tasks import TaskQueue, WorkerPool

logger = logging.getLogger("gameplay_arena")


class WorkerRunner:
    """
    Wires logging, database, orchestrator, queue and workers together.

    Args:
        config: Runtime config, see ``gameplay_arena._config``
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self._running = False

        # Setup logging
        setup_logging(
            log_file_path=config.get("log_file", "gameplay_arena.log"),
            level=config.get("log_level", "INFO"),
        )

        # Validate config
        validate_config(config)

        init_database(config["db_path"])

        self.task_queue = TaskQueue()
        self.orchestrator = MatchOrchestrator(config, task_queue=self.task_queue)
        self.pool = WorkerPool(
            self.orchestrator,
            self.task_queue,
            worker_count=config["worker_count"],
            max_chain=config["max_agent_chain"],
        )
        self.poll_interval = config.get("poll_interval_seconds", 1.0)

    def run(self) -> None:
        """Start the workers. Blocks until interrupted."""
        self._running = True
        signal.signal(signal.SIGINT, lambda s, f: setattr(self, "_running", False))

        self._log_startup()
        self.orchestrator.resume_agent_matches()
        self.pool.start()

        while self._running:
            try:
                time.sleep(self.poll_interval)
            except KeyboardInterrupt:
                break

        self.shutdown()

    def shutdown(self) -> None:
        self._running = False
        self.pool.stop()
        self.orchestrator.close()
        logger.info("Worker runner stopped.")

    def _log_startup(self) -> None:
        """Log startup information."""
        logger.info("=" * 60)
        logger.info("  Gameplay Arena Workers - Starting")
        logger.info(f"  Database: {self.config['db_path']}")
        logger.info(f"  Workers:  {self.config['worker_count']}")
        logger.info(f"  Lease:    {self.config['lease_ttl_seconds']}s "
                    f"(agent timeout {self.config['agent_timeout_seconds']}s)")
        logger.info("=" * 60)
