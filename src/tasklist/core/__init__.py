"""Core types shared across Tasklist."""

from tasklist.core.errors import ErrorCode, TasklistError

__all__ = ["ErrorCode", "TasklistError"]
