"""Task persistence.

Every operation takes the owning username and folds it into the WHERE
clause, so a caller can only ever see or touch its own tasks.
"""

import asyncio
import logging
import secrets
import string
from collections.abc import Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from tasklist.storage.sqlite import SqliteStore, from_micros, to_micros, utcnow

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_letters + string.digits
_ID_LENGTH = 16

# Fields a client may change on an existing task
MUTABLE_FIELDS = ("text", "due", "completed")

_COLUMNS = "_id, text, due, completed, created_at, updated_at"


def new_id() -> str:
    """Random 16-character alphanumeric task id."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


def _row_to_task(row: Any) -> dict[str, Any]:
    # Keys match the API's JSON names; owner never leaves the store
    return {
        "_id": row["_id"],
        "text": row["text"],
        "due": from_micros(row["due"]),
        "completed": bool(row["completed"]),
        "createdAt": from_micros(row["created_at"]),
        "updatedAt": from_micros(row["updated_at"]),
    }


def _to_column(field: str, value: Any) -> Any:
    if field == "due":
        return to_micros(value)
    if field == "completed":
        return int(bool(value))
    return value


class TaskStore(SqliteStore):
    """Owner-scoped access to the tasks table."""

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS tasks (
            _id TEXT PRIMARY KEY,
            owner TEXT NOT NULL,
            text TEXT NOT NULL,
            due INTEGER NOT NULL,
            completed INTEGER NOT NULL DEFAULT 0,
            created_at INTEGER NOT NULL,
            updated_at INTEGER NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_tasks_owner_order ON tasks(owner, completed, due);
    """

    @classmethod
    def open(cls, path: str | Path) -> "TaskStore":
        """Open (or create) the tasks database."""
        return cls(path)

    # ---- synchronous operations ----

    def _list(self, owner: str, completed: bool | None) -> list[dict[str, Any]]:
        sql = f"SELECT {_COLUMNS} FROM tasks WHERE owner = ?"
        params: list[Any] = [owner]
        if completed is not None:
            sql += " AND completed = ?"
            params.append(int(completed))
        # Incomplete tasks first, each group by ascending due date
        sql += " ORDER BY completed ASC, due ASC"
        with self._transaction() as conn:
            return [_row_to_task(row) for row in conn.execute(sql, params).fetchall()]

    def _add(self, owner: str, text: str, due: datetime) -> dict[str, Any]:
        task_id = new_id()
        now = to_micros(utcnow())
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO tasks(_id, owner, text, due, completed, created_at, updated_at)
                VALUES (?, ?, ?, ?, 0, ?, ?)
                """,
                (task_id, owner, text, to_micros(due), now, now),
            )
            row = conn.execute(f"SELECT {_COLUMNS} FROM tasks WHERE _id = ?", (task_id,)).fetchone()
        logger.debug("Task added id=%s owner=%s", task_id, owner)
        return _row_to_task(row)

    def _update(self, owner: str, task_id: str, fields: Mapping[str, Any]) -> int:
        assignments = ["updated_at = ?"]
        params: list[Any] = [to_micros(utcnow())]
        for field in MUTABLE_FIELDS:
            if field in fields:
                assignments.append(f"{field} = ?")
                params.append(_to_column(field, fields[field]))
        params.extend([task_id, owner])
        with self._transaction() as conn:
            cur = conn.execute(
                f"UPDATE tasks SET {', '.join(assignments)} WHERE _id = ? AND owner = ?",
                params,
            )
            return cur.rowcount

    def _delete(self, owner: str, task_ids: Sequence[str]) -> int:
        if not task_ids:
            return 0
        placeholders = ",".join("?" for _ in task_ids)
        with self._transaction() as conn:
            cur = conn.execute(
                f"DELETE FROM tasks WHERE owner = ? AND _id IN ({placeholders})",
                (owner, *task_ids),
            )
            return cur.rowcount

    # ---- public async API ----

    async def list(self, owner: str, *, completed: bool | None = None) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._list, owner, completed)

    async def add(self, owner: str, *, text: str, due: datetime) -> dict[str, Any]:
        """Insert a task owned by ``owner``; new tasks always start incomplete."""
        return await asyncio.to_thread(self._add, owner, text, due)

    async def update(self, owner: str, task_id: str, fields: Mapping[str, Any]) -> int:
        """Set the given fields on one task; returns 0 or 1."""
        return await asyncio.to_thread(self._update, owner, task_id, fields)

    async def delete(self, owner: str, task_ids: str | Sequence[str]) -> int:
        """Remove one task or many in a single statement."""
        ids = [task_ids] if isinstance(task_ids, str) else list(task_ids)
        return await asyncio.to_thread(self._delete, owner, ids)
