"""Tests for the SQLite task store."""

from datetime import UTC, datetime
from pathlib import Path

import pytest

from tasklist.core.errors import ErrorCode, TasklistError
from tasklist.storage.sqlite import from_micros, to_micros
from tasklist.storage.tasks import TaskStore

DUE = datetime(2030, 1, 1, tzinfo=UTC)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "tasks.db"


@pytest.fixture
def store(db_path: Path) -> TaskStore:
    return TaskStore.open(db_path)


def test_micros_roundtrip_is_exact() -> None:
    value = datetime(2030, 1, 1, 0, 0, 0, 123456, tzinfo=UTC)

    assert from_micros(to_micros(value)) == value
    assert to_micros(datetime(2030, 1, 1)) == to_micros(DUE)


class TestAddAndList:
    @pytest.mark.asyncio
    async def test_add_assigns_id_and_timestamps(self, store: TaskStore) -> None:
        task = await store.add("ada", text="a", due=DUE)

        assert len(task["_id"]) == 16
        assert task["_id"].isalnum()
        assert task["completed"] is False
        assert task["createdAt"] == task["updatedAt"]
        assert "owner" not in task

    @pytest.mark.asyncio
    async def test_list_is_owner_scoped(self, store: TaskStore) -> None:
        await store.add("ada", text="mine", due=DUE)
        await store.add("grace", text="hers", due=DUE)

        assert [t["text"] for t in await store.list("ada")] == ["mine"]
        assert [t["text"] for t in await store.list("nobody")] == []

    @pytest.mark.asyncio
    async def test_list_order_and_filter(self, store: TaskStore) -> None:
        late = await store.add("ada", text="late", due=datetime(2030, 1, 3, tzinfo=UTC))
        await store.add("ada", text="early", due=datetime(2030, 1, 1, tzinfo=UTC))
        done = await store.add("ada", text="done", due=datetime(2030, 1, 2, tzinfo=UTC))
        await store.update("ada", done["_id"], {"completed": True})

        assert [t["text"] for t in await store.list("ada")] == ["early", "late", "done"]
        assert [t["text"] for t in await store.list("ada", completed=True)] == ["done"]
        assert [t["_id"] for t in await store.list("ada", completed=False)][-1] == late["_id"]


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_update_only_touches_given_fields(self, store: TaskStore) -> None:
        task = await store.add("ada", text="draft", due=DUE)

        assert await store.update("ada", task["_id"], {"text": "final", "owner": "grace"}) == 1

        (updated,) = await store.list("ada")
        assert updated["text"] == "final"
        assert updated["due"] == DUE
        assert updated["createdAt"] == task["createdAt"]
        assert updated["updatedAt"] >= task["updatedAt"]

    @pytest.mark.asyncio
    async def test_update_requires_owner(self, store: TaskStore) -> None:
        task = await store.add("ada", text="draft", due=DUE)

        assert await store.update("grace", task["_id"], {"text": "x"}) == 0
        assert await store.update("ada", "missing", {"text": "x"}) == 0

    @pytest.mark.asyncio
    async def test_delete_single_and_many(self, store: TaskStore) -> None:
        a = await store.add("ada", text="a", due=DUE)
        b = await store.add("ada", text="b", due=DUE)
        theirs = await store.add("grace", text="g", due=DUE)

        assert await store.delete("ada", [a["_id"], theirs["_id"], "missing"]) == 1
        assert await store.delete("ada", b["_id"]) == 1
        assert await store.delete("ada", b["_id"]) == 0
        assert await store.delete("ada", []) == 0
        assert len(await store.list("grace")) == 1


class TestPersistence:
    @pytest.mark.asyncio
    async def test_reopen_keeps_full_precision(self, store: TaskStore, db_path: Path) -> None:
        due = datetime(2030, 1, 1, 0, 0, 0, 123456, tzinfo=UTC)
        created = await store.add("ada", text="precise", due=due)
        store.close()

        (task,) = await TaskStore.open(db_path).list("ada")

        assert task["due"] == due
        assert task["createdAt"] == created["createdAt"]

    def test_non_database_file(self, db_path: Path) -> None:
        db_path.parent.mkdir(parents=True)
        db_path.write_text('["not", "a", "database"]\n' * 100)

        with pytest.raises(TasklistError) as exc_info:
            TaskStore.open(db_path)
        assert exc_info.value.code == ErrorCode.STORE_CORRUPT

    @pytest.mark.asyncio
    async def test_closed_store_refuses_operations(self, store: TaskStore) -> None:
        store.close()

        with pytest.raises(TasklistError) as exc_info:
            await store.list("ada")
        assert exc_info.value.code == ErrorCode.STORE_CLOSED
