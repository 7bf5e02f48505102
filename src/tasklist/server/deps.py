"""Request-scoped access to the stores handed to ``create_app``."""

from typing import Annotated

from fastapi import Depends, Request

from tasklist.auth.users import UserStore
from tasklist.storage.tasks import TaskStore


def get_task_store(request: Request) -> TaskStore:
    return request.app.state.tasks


def get_user_store(request: Request) -> UserStore:
    return request.app.state.users


Tasks = Annotated[TaskStore, Depends(get_task_store)]
Users = Annotated[UserStore, Depends(get_user_store)]
