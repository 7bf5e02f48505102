"""SQLite-backed storage for tasks."""

from tasklist.storage.sqlite import SqliteStore
from tasklist.storage.tasks import TaskStore

__all__ = ["SqliteStore", "TaskStore"]
