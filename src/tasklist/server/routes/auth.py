"""Login and logout routes."""

import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse

from tasklist.core.errors import ErrorCode, TasklistError, auth_failed
from tasklist.server.deps import Users
from tasklist.server.routes.models import LoginRequest
from tasklist.server.session import Session, get_session, set_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/login/", status_code=204, response_class=Response)
async def login(request: Request, body: LoginRequest, users: Users) -> Response:
    """Check credentials and bind the session to the user.

    Unknown user, wrong password, and store or hash failures all answer
    401 with the same body.
    """
    try:
        ok = await users.authenticate(body.user, body.password)
    except Exception as e:
        logger.debug("Credential check for %s errored: %s", body.user, type(e).__name__)
        raise auth_failed(e) from e

    if not ok:
        raise auth_failed()

    session = get_session(request) or Session()
    set_session(request, session.with_user(body.user))
    logger.info("set user to %s", body.user)
    return Response(status_code=204)


@router.post("/logout/", response_class=PlainTextResponse)
async def logout(request: Request) -> PlainTextResponse:
    """Clear the session's user. The session itself stays."""
    session = get_session(request)
    if session is None:
        raise TasklistError(ErrorCode.SESSION_INVALID)

    if session.user is None:
        raise TasklistError(ErrorCode.NOT_LOGGED_IN)

    set_session(request, session.without_user())
    logger.info("logged out %s", session.user)
    return PlainTextResponse("OK", status_code=200)
