"""Signed-cookie sessions.

The cookie carries the whole session payload, signed with itsdangerous.
A request either has a session or it does not:

- valid cookie             -> Session decoded from it
- no cookie / bad cookie   -> None

Sessions are immutable values. Handlers read the current one with
``get_session`` and publish a replacement with ``set_session``; the
middleware serializes whatever is current when the response starts.

Usage:
    session = get_session(request) or Session()
    set_session(request, session.with_user("ada"))
"""

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from itsdangerous import BadSignature, URLSafeTimedSerializer
from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from tasklist.config import TasklistConfig

logger = logging.getLogger(__name__)

SESSION_SCOPE_KEY = "tasklist.session"
_SIGNING_SALT = "tasklist.session"


@dataclass(frozen=True, slots=True)
class Session:
    """Session state. ``user`` is set once the client has logged in."""

    data: Mapping[str, Any] = field(default_factory=dict)
    issued_at: float | None = None
    """When the cookie this session came from was signed (epoch seconds)."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @property
    def user(self) -> str | None:
        return self.data.get("user")

    def with_user(self, user: str) -> "Session":
        return Session({**self.data, "user": user}, self.issued_at)

    def without_user(self) -> "Session":
        return Session({k: v for k, v in self.data.items() if k != "user"}, self.issued_at)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.data)


class SessionSlot:
    """Per-request holder for the current session value."""

    __slots__ = ("initial", "current")

    def __init__(self, initial: Session | None) -> None:
        self.initial = initial
        self.current = initial

    @property
    def changed(self) -> bool:
        if self.initial is None or self.current is None:
            return self.initial is not self.current
        return dict(self.initial.data) != dict(self.current.data)


class SessionCodec:
    """Sign and verify session cookies.

    The last key signs; every key is accepted when verifying, so keys can
    be rotated by appending a new one.
    """

    def __init__(self, keys: Sequence[str], max_age: int) -> None:
        if not keys:
            raise ValueError("at least one signing key is required")
        self._serializer = URLSafeTimedSerializer(list(keys), salt=_SIGNING_SALT)
        self._max_age = max_age

    def encode(self, session: Session) -> str:
        return self._serializer.dumps(session.to_dict())

    def decode(self, value: str) -> Session | None:
        """Decode a cookie value; anything invalid or expired is no session."""
        try:
            data, signed_at = self._serializer.loads(
                value, max_age=self._max_age, return_timestamp=True
            )
        except BadSignature:
            logger.debug("Discarding session cookie with bad or expired signature")
            return None
        if not isinstance(data, dict):
            return None
        return Session(data, issued_at=signed_at.timestamp())


def _slot(scope: Scope) -> SessionSlot:
    try:
        return scope[SESSION_SCOPE_KEY]
    except KeyError:
        raise RuntimeError("SessionMiddleware must be installed to use sessions") from None


def get_session(request: HTTPConnection) -> Session | None:
    return _slot(request.scope).current


def set_session(request: HTTPConnection, session: Session | None) -> None:
    """Replace the request's session; ``None`` ends it and expires the cookie."""
    _slot(request.scope).current = session


class SessionMiddleware:
    """ASGI middleware that decodes the session cookie and writes it back."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        codec: SessionCodec,
        cookie_name: str,
        max_age: int,
        renew: bool = True,
        rolling: bool = False,
        same_site: str = "strict",
        http_only: bool = True,
        secure: bool = True,
        overwrite: bool = True,
        path: str = "/",
    ) -> None:
        self.app = app
        self.codec = codec
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.renew = renew
        self.rolling = rolling
        self.overwrite = overwrite
        flags = f"path={path}; SameSite={same_site.lower()}"
        if http_only:
            flags += "; HttpOnly"
        if secure:
            flags += "; Secure"
        self._flags = flags

    @classmethod
    def options(cls, config: TasklistConfig) -> dict[str, Any]:
        """Keyword arguments for ``app.add_middleware`` from configuration."""
        session = config.session
        return {
            "codec": SessionCodec(session.keys, session.max_age),
            "cookie_name": session.cookie_name,
            "max_age": session.max_age,
            "renew": session.renew,
            "rolling": session.rolling,
            "same_site": session.same_site,
            "http_only": session.http_only,
            "secure": config.secure_cookies,
            "overwrite": session.overwrite,
            "path": session.path,
        }

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        connection = HTTPConnection(scope)
        raw = connection.cookies.get(self.cookie_name)
        slot = SessionSlot(self.codec.decode(raw) if raw else None)
        scope[SESSION_SCOPE_KEY] = slot

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                cookie = self._set_cookie_value(slot)
                if cookie is not None:
                    if self.overwrite:
                        prefix = f"{self.cookie_name}=".encode("latin-1")
                        message["headers"] = [
                            (k, v)
                            for k, v in message.get("headers", [])
                            if not (k.lower() == b"set-cookie" and v.startswith(prefix))
                        ]
                    headers = MutableHeaders(scope=message)
                    headers.append("Set-Cookie", cookie)
            await send(message)

        await self.app(scope, receive, send_wrapper)

    def _needs_renewal(self, session: Session) -> bool:
        if self.rolling:
            return True
        if not self.renew or session.issued_at is None:
            return False
        age = time.time() - session.issued_at
        return self.max_age - age < self.max_age / 2

    def _set_cookie_value(self, slot: SessionSlot) -> str | None:
        current = slot.current
        if current is None:
            if slot.initial is None:
                return None
            return (
                f"{self.cookie_name}=null; {self._flags}; "
                "expires=Thu, 01 Jan 1970 00:00:00 GMT; Max-Age=0"
            )
        if not slot.changed and not self._needs_renewal(current):
            return None
        value = self.codec.encode(current)
        return f"{self.cookie_name}={value}; {self._flags}; Max-Age={self.max_age}"
