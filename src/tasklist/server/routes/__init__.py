"""Route modules for the Tasklist API.

Each module defines an APIRouter mounted under the configured prefix:
- auth: login/logout
- tasks: list, add, update, delete
"""

from tasklist.server.routes.auth import router as auth_router
from tasklist.server.routes.tasks import router as tasks_router

__all__ = [
    "auth_router",
    "tasks_router",
]
