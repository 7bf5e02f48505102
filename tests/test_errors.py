"""Tests for structured errors."""

from tasklist.core.errors import (
    ErrorCode,
    TasklistError,
    auth_failed,
    login_required,
    store_error,
)


def test_auth_statuses() -> None:
    assert auth_failed().status == 401
    assert login_required().status == 403
    assert TasklistError(ErrorCode.NOT_LOGGED_IN).status == 404
    assert TasklistError(ErrorCode.SESSION_INVALID).status == 500


def test_auth_messages() -> None:
    assert str(auth_failed()) == "Unauthorized"
    assert str(login_required()) == "Forbidden"
    assert str(TasklistError(ErrorCode.NOT_LOGGED_IN)) == "not logged in"
    assert str(TasklistError(ErrorCode.SESSION_INVALID)) == "invalid session"


def test_store_error_formats_context() -> None:
    cause = OSError("disk full")
    err = store_error(ErrorCode.TASK_UPDATE_FAILED, cause, task_id="abc")

    assert err.message == "failed to update task abc"
    assert err.status == 500
    assert err.cause is cause


def test_missing_context_keeps_template() -> None:
    err = TasklistError(ErrorCode.TASK_UPDATE_FAILED)

    assert err.message == "failed to update task {task_id}"


def test_error_id() -> None:
    err = TasklistError(ErrorCode.STORE_CLOSED, {"path": "tasks.db"})

    assert err.error_id == "TL-2101"
    assert err.message == "database 'tasks.db' is closed"
