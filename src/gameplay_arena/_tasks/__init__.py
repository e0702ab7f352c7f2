# Area: Tasks
"""Background agent turns: task queue, task processing and the worker pool."""

from .task_queue import AgentTurnTask, TaskQueue, process_task
from .worker_pool import WorkerPool

__all__ = ["AgentTurnTask", "TaskQueue", "process_task", "WorkerPool"]
