"""Task CRUD routes.

Every handler takes the logged-in ``Principal`` and passes its username
to the store as the owner; a client-supplied owner is never used.
"""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Body

from tasklist.core.errors import ErrorCode, store_error
from tasklist.server.deps import Tasks
from tasklist.server.gate import LoggedIn
from tasklist.server.routes.models import (
    AddTaskRequest,
    DeleteTaskRequest,
    DeleteTaskResponse,
    TaskListResponse,
    TaskPatch,
    TaskResponse,
    UpdateTaskRequest,
    UpdateTaskResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


@router.get("/", response_model=TaskListResponse)
async def list_tasks(
    principal: LoggedIn,
    tasks: Tasks,
    completed: bool | None = None,
) -> TaskListResponse:
    """List the caller's tasks, incomplete first, then by due date."""
    try:
        docs = await tasks.list(principal.username, completed=completed)
    except Exception as e:
        raise store_error(ErrorCode.TASKS_LIST_FAILED, e) from e

    return TaskListResponse(tasks=[TaskResponse.model_validate(doc) for doc in docs])


@router.post("/", status_code=201, response_model=TaskResponse)
async def add_task(principal: LoggedIn, tasks: Tasks, body: AddTaskRequest) -> TaskResponse:
    """Create a task owned by the caller, always starting incomplete."""
    try:
        doc = await tasks.add(principal.username, text=body.text, due=body.due)
    except Exception as e:
        raise store_error(ErrorCode.TASK_ADD_FAILED, e) from e

    return TaskResponse.model_validate(doc)


@router.patch("/", status_code=202, response_model=UpdateTaskResponse)
async def update_tasks(
    principal: LoggedIn,
    tasks: Tasks,
    body: Annotated[UpdateTaskRequest, Body()],
) -> UpdateTaskResponse:
    """Apply one partial update or a batch of them.

    Batch elements run concurrently. If any fails the request fails with
    that element's error; updates that already landed are kept.
    """

    async def _update_one(patch: TaskPatch) -> int:
        try:
            return await tasks.update(principal.username, patch.id, patch.changes())
        except Exception as e:
            raise store_error(ErrorCode.TASK_UPDATE_FAILED, e, task_id=patch.id) from e

    patches = body if isinstance(body, list) else [body]
    counts = await asyncio.gather(*(_update_one(patch) for patch in patches))
    return UpdateTaskResponse(updated=sum(counts))


@router.delete("/", response_model=DeleteTaskResponse)
async def delete_tasks(
    principal: LoggedIn,
    tasks: Tasks,
    body: Annotated[DeleteTaskRequest, Body()],
) -> DeleteTaskResponse:
    """Delete one task id or many, in a single store call."""
    try:
        deleted = await tasks.delete(principal.username, body)
    except Exception as e:
        raise store_error(ErrorCode.TASK_DELETE_FAILED, e) from e

    return DeleteTaskResponse(deleted=deleted)
