"""Plain ASGI middleware: favicon short-circuit and request logging."""

import logging
import time

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("tasklist.http")


class FaviconMiddleware:
    """Answer ``/favicon.ico`` with an empty 404 before any other layer runs."""

    def __init__(self, app: ASGIApp, path: str = "/favicon.ico") -> None:
        self.app = app
        self.path = path

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"] == self.path:
            await send({"type": "http.response.start", "status": 404, "headers": []})
            await send({"type": "http.response.body", "body": b""})
            return
        await self.app(scope, receive, send)


def _humanize_duration(seconds: float) -> str:
    ms = seconds * 1000
    if ms < 1000:
        return f"{ms:.0f}ms"
    return f"{seconds:.1f}s"


class RequestLogMiddleware:
    """Log one line when a request arrives and one when it completes.

        <-- GET /tasks/
        --> GET /tasks/ 200 3ms 512b
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope["method"]
        path = scope["path"]
        if scope.get("query_string"):
            path = f"{path}?{scope['query_string'].decode('latin-1')}"

        logger.info("<-- %s %s", method, path)
        start = time.perf_counter()
        status: int | None = None
        length = "-"

        async def send_wrapper(message: Message) -> None:
            nonlocal status, length
            if message["type"] == "http.response.start":
                status = message["status"]
                length = Headers(raw=message.get("headers", [])).get("content-length", "-")
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            logger.error(
                "xxx %s %s %s", method, path, _humanize_duration(time.perf_counter() - start)
            )
            raise

        logger.info(
            "--> %s %s %s %s %sb",
            method,
            path,
            status,
            _humanize_duration(time.perf_counter() - start),
            length,
        )
