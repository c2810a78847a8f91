"""Task store adapters."""

from boardsync.store.base import TaskStore, parse_task_id
from boardsync.store.memory import InMemoryTaskStore

__all__ = [
    "InMemoryTaskStore",
    "TaskStore",
    "parse_task_id",
]
