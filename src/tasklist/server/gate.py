"""Auth gate for task routes.

Handlers that need a logged-in user take a ``Principal`` parameter. The
only way to get one is through ``require_login``, which checks the
session before the handler runs:

    @router.get("/")
    async def list_tasks(principal: LoggedIn) -> ...:
        ...
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from tasklist.core.errors import login_required
from tasklist.server.session import get_session


@dataclass(frozen=True, slots=True)
class Principal:
    """The authenticated user a request acts as."""

    username: str


def require_login(request: Request) -> Principal:
    """403 unless the request's session carries a user. Never hits a store."""
    session = get_session(request)
    if session is None or session.user is None:
        raise login_required()
    return Principal(session.user)


LoggedIn = Annotated[Principal, Depends(require_login)]
