"""Tasklist - per-user task lists behind cookie sessions.

A small FastAPI backend: owner-scoped task CRUD over an embedded SQLite
database, and login/logout against a separate credential store.
"""

from tasklist.core.errors import ErrorCode, TasklistError

__version__ = "0.1.0"

__all__ = [
    "ErrorCode",
    "TasklistError",
    "__version__",
]
