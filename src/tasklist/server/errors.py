"""Error boundary for the HTTP API.

Every failure raised while handling a request ends up here and is turned
into a plain-text response: the body is the error's message and the
status is the error's ``status`` (500 when it has none). Each handled
error is also published to ``ErrorEvents`` for out-of-band logging.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from tasklist.core.errors import TasklistError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    """A request that ended in an error response."""

    error: Exception
    status: int
    method: str
    path: str
    timestamp: datetime

    @property
    def name(self) -> str:
        return type(self.error).__name__


ErrorListener = Callable[[ErrorEvent], None]


def log_error_event(event: ErrorEvent) -> None:
    """Default listener: server errors with traceback, client errors briefly."""
    if event.status >= 500:
        logger.error(
            "%s %s failed with %d (%s): %s",
            event.method,
            event.path,
            event.status,
            event.name,
            event.error,
            exc_info=event.error,
        )
    else:
        logger.info(
            "%s %s rejected with %d: %s", event.method, event.path, event.status, event.error
        )


class ErrorEvents:
    """App-level error hub.

    Usage:
        events = ErrorEvents()
        events.subscribe(my_listener)
        events.emit(ErrorEvent(...))

    Listener failures are logged and never affect the response.
    """

    def __init__(self, listeners: list[ErrorListener] | None = None) -> None:
        self._listeners: list[ErrorListener] = (
            list(listeners) if listeners is not None else [log_error_event]
        )

    def subscribe(self, listener: ErrorListener) -> None:
        self._listeners.append(listener)

    def emit(self, event: ErrorEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Error listener %r failed", listener)


def _emit(request: Request, error: Exception, status: int) -> None:
    events: ErrorEvents | None = getattr(request.app.state, "error_events", None)
    if events is None:
        return
    events.emit(
        ErrorEvent(
            error=error,
            status=status,
            method=request.method,
            path=request.url.path,
            timestamp=datetime.now(UTC),
        )
    )


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "invalid request"


async def _handle_tasklist_error(request: Request, exc: TasklistError) -> PlainTextResponse:
    _emit(request, exc, exc.status)
    return PlainTextResponse(exc.message, status_code=exc.status)


async def _handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> PlainTextResponse:
    _emit(request, exc, exc.status_code)
    return PlainTextResponse(
        str(exc.detail), status_code=exc.status_code, headers=getattr(exc, "headers", None)
    )


async def _handle_validation_error(
    request: Request, exc: RequestValidationError
) -> PlainTextResponse:
    _emit(request, exc, 400)
    return PlainTextResponse(_validation_message(exc), status_code=400)


async def _handle_unexpected(request: Request, exc: Exception) -> PlainTextResponse:
    status = getattr(exc, "status", None)
    if not isinstance(status, int):
        status = 500
    _emit(request, exc, status)
    return PlainTextResponse(str(exc), status_code=status)


class UnhandledErrorMiddleware:
    """Answer exceptions no handler claimed, inside the session and log layers."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if started:
                raise
            response = await _handle_unexpected(Request(scope), exc)
            await response(scope, receive, send)


def install_error_boundary(app: FastAPI, events: ErrorEvents | None = None) -> ErrorEvents:
    """Register the plain-text exception handlers and the error hub on ``app``.

    Call before adding other middleware so the catch-all stays innermost.
    """
    events = events if events is not None else ErrorEvents()
    app.state.error_events = events
    app.add_exception_handler(TasklistError, _handle_tasklist_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_middleware(UnhandledErrorMiddleware)
    return events
