"""Request/response contracts for the API routes.

Each route validates its input against one of these models and its
output against another, so the handler and the validator share a type.

All models inherit from CamelModel which automatically converts
snake_case Python fields to camelCase in JSON (``created_at`` ->
``createdAt``). Document ids keep the store's ``_id`` name.
"""

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator


def _to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    parts = string.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class CamelModel(BaseModel):
    """Base model with camelCase JSON serialization."""

    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]
TaskId = NonEmptyStr


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


# ═══════════════════════════════════════════════════════════════
# TASK MODELS
# ═══════════════════════════════════════════════════════════════


class TaskResponse(CamelModel):
    """A task as clients see it. There is deliberately no ``owner`` field."""

    id: str = Field(alias="_id")
    text: str
    due: datetime
    completed: bool
    created_at: datetime
    updated_at: datetime


class TaskListResponse(CamelModel):
    tasks: list[TaskResponse]


class AddTaskRequest(CamelModel):
    """New task. Any ``owner`` or ``completed`` sent by the client is ignored."""

    text: NonEmptyStr
    due: datetime

    @field_validator("due")
    @classmethod
    def due_in_utc(cls, value: datetime) -> datetime:
        return _utc(value)


class TaskPatch(CamelModel):
    """Partial update of one task; only the fields present are changed."""

    id: TaskId = Field(alias="_id")
    text: NonEmptyStr | None = None
    due: datetime | None = None
    completed: bool | None = None

    @field_validator("text", "due", "completed", mode="before")
    @classmethod
    def not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may not be null")
        return value

    @field_validator("due")
    @classmethod
    def due_in_utc(cls, value: datetime | None) -> datetime | None:
        return _utc(value) if value is not None else None

    def changes(self) -> dict[str, Any]:
        """Fields the client actually sent, minus the id."""
        return self.model_dump(exclude_unset=True, exclude={"id"})


UpdateTaskRequest = TaskPatch | list[TaskPatch]


class UpdateTaskResponse(CamelModel):
    updated: int


DeleteTaskRequest = TaskId | list[TaskId]


class DeleteTaskResponse(CamelModel):
    deleted: int


# ═══════════════════════════════════════════════════════════════
# AUTH MODELS
# ═══════════════════════════════════════════════════════════════


class LoginRequest(CamelModel):
    user: NonEmptyStr
    password: NonEmptyStr = Field(alias="pass")
