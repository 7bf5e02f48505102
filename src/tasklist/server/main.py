"""FastAPI application for the Tasklist API.

Routes are organized into modules under tasklist/server/routes/:
- auth: login/logout against the credential store
- tasks: owner-scoped task CRUD against the task store

Request pipeline (outermost first):
    favicon short-circuit -> request log -> session cookie -> catch-all -> router
Errors raised inside the router are answered by the error boundary.
"""

from fastapi import FastAPI

from tasklist.auth.users import UserStore
from tasklist.config import TasklistConfig, get_config
from tasklist.server.errors import ErrorEvents, install_error_boundary
from tasklist.server.middleware import FaviconMiddleware, RequestLogMiddleware
from tasklist.server.routes import auth_router, tasks_router
from tasklist.server.session import SessionMiddleware
from tasklist.storage.tasks import TaskStore


def create_app(
    config: TasklistConfig | None = None,
    *,
    tasks: TaskStore,
    users: UserStore,
    error_events: ErrorEvents | None = None,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        config: Settings; defaults to the loaded global configuration.
        tasks: Open task store. The caller owns its lifecycle.
        users: Open credential store. The caller owns its lifecycle.
        error_events: Error hub; a logging-only hub is created if omitted.

    Returns:
        Configured FastAPI application.
    """
    config = config or get_config()

    app = FastAPI(
        title="Tasklist",
        description="Per-user task lists behind cookie sessions",
        version="0.1.0",
    )
    app.state.config = config
    app.state.tasks = tasks
    app.state.users = users

    install_error_boundary(app, error_events)

    prefix = config.server.api_prefix.rstrip("/")
    app.include_router(auth_router, prefix=prefix)
    app.include_router(tasks_router, prefix=prefix)

    # add_middleware wraps, so the last one added runs first
    app.add_middleware(SessionMiddleware, **SessionMiddleware.options(config))
    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(FaviconMiddleware)

    return app
