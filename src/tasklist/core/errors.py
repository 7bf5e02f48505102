"""Tasklist Error System.

Provides structured error handling with:
- Numeric error codes for programmatic handling
- Plain-text messages suitable for HTTP response bodies
- An HTTP status per code, read by the server's error boundary
"""


from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Numeric error codes organized by category.

    Format: XYYY where X = category, YYY = specific error

    Categories:
        1xxx - Auth/session errors
        2xxx - Store errors
        3xxx - Configuration errors
    """

    # 1xxx - Auth/Session Errors
    AUTH_FAILED = 1001
    LOGIN_REQUIRED = 1002
    NOT_LOGGED_IN = 1003
    SESSION_INVALID = 1004

    # 2xxx - Store Errors
    TASKS_LIST_FAILED = 2001
    TASK_ADD_FAILED = 2002
    TASK_UPDATE_FAILED = 2003
    TASK_DELETE_FAILED = 2004
    STORE_CLOSED = 2101
    STORE_CORRUPT = 2102
    STORE_DUPLICATE = 2103

    # 3xxx - Configuration Errors
    CONFIG_INVALID = 3001

    @property
    def status(self) -> int:
        """HTTP status the error boundary responds with."""
        return HTTP_STATUS.get(self, 500)


ERROR_MESSAGES: dict[ErrorCode, str] = {
    # Auth errors
    ErrorCode.AUTH_FAILED: "Unauthorized",
    ErrorCode.LOGIN_REQUIRED: "Forbidden",
    ErrorCode.NOT_LOGGED_IN: "not logged in",
    ErrorCode.SESSION_INVALID: "invalid session",

    # Store errors
    ErrorCode.TASKS_LIST_FAILED: "failed to retrieve tasks from database",
    ErrorCode.TASK_ADD_FAILED: "failed to add task to tasks list",
    ErrorCode.TASK_UPDATE_FAILED: "failed to update task {task_id}",
    ErrorCode.TASK_DELETE_FAILED: "failed to delete task",
    ErrorCode.STORE_CLOSED: "database '{path}' is closed",
    ErrorCode.STORE_CORRUPT: "corrupt database '{path}': {detail}",
    ErrorCode.STORE_DUPLICATE: "duplicate value for '{field}': {value}",

    # Config errors
    ErrorCode.CONFIG_INVALID: "Invalid configuration for '{key}': {detail}",
}

HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.AUTH_FAILED: 401,
    ErrorCode.LOGIN_REQUIRED: 403,
    ErrorCode.NOT_LOGGED_IN: 404,
}


class TasklistError(Exception):
    """Base error type for all Tasklist errors.

    Example:
        >>> err = TasklistError(ErrorCode.TASK_UPDATE_FAILED, {"task_id": "abc"})
        >>> str(err)
        'failed to update task abc'
        >>> err.status
        500
    """

    def __init__(
        self,
        code: ErrorCode,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.context = context or {}
        self.cause = cause
        super().__init__(str(self))

    @property
    def message(self) -> str:
        """Get the formatted message."""
        template = ERROR_MESSAGES.get(self.code, "An error occurred: {detail}")
        try:
            return template.format(**self.context)
        except KeyError:
            # Fallback if context doesn't have all keys
            return template

    @property
    def status(self) -> int:
        return self.code.status

    @property
    def error_id(self) -> str:
        """Get the error ID string (e.g., 'TL-2003')."""
        return f"TL-{self.code.value}"

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"TasklistError(code={self.code!r}, context={self.context!r})"


def auth_failed(cause: Exception | None = None) -> TasklistError:
    """Generic credential failure; never says which part failed."""
    return TasklistError(ErrorCode.AUTH_FAILED, cause=cause)


def login_required() -> TasklistError:
    return TasklistError(ErrorCode.LOGIN_REQUIRED)


def store_error(code: ErrorCode, cause: Exception, **context: Any) -> TasklistError:
    """Wrap a store failure in the generic message for the operation."""
    return TasklistError(code, context=context, cause=cause)
