"""Pytest fixtures for Tasklist tests."""

import asyncio
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tasklist.auth.users import UserStore
from tasklist.config import SessionConfig, StorageConfig, TasklistConfig
from tasklist.server.errors import ErrorEvent, ErrorEvents
from tasklist.server.main import create_app
from tasklist.storage.tasks import TaskStore

PASSWORDS = {"ada": "lovelace", "grace": "hopper"}
PREFIX = "/tasks"


@pytest.fixture
def config(tmp_path: Path) -> TasklistConfig:
    """Development config with stores under tmp_path."""
    return TasklistConfig(
        storage=StorageConfig(
            tasks_db=str(tmp_path / "tasks.db"),
            users_db=str(tmp_path / "users.db"),
        ),
        session=SessionConfig(keys=["test-signing-key"]),
    )


@pytest.fixture
def task_store(config: TasklistConfig) -> Iterator[TaskStore]:
    store = TaskStore.open(config.storage.tasks_db)
    yield store
    store.close()


@pytest.fixture
def user_store(config: TasklistConfig) -> Iterator[UserStore]:
    """Credential store provisioned with every user in PASSWORDS."""
    store = UserStore.open(config.storage.users_db)
    for name, password in PASSWORDS.items():
        # Low cost factor keeps the suite fast
        asyncio.run(store.add(name, password, rounds=4))
    yield store
    store.close()


@pytest.fixture
def recorded_errors() -> list[ErrorEvent]:
    return []


@pytest.fixture
def app(
    config: TasklistConfig,
    task_store: TaskStore,
    user_store: UserStore,
    recorded_errors: list[ErrorEvent],
) -> FastAPI:
    events = ErrorEvents(listeners=[recorded_errors.append])
    return create_app(config, tasks=task_store, users=user_store, error_events=events)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """A client with no session cookie."""
    return TestClient(app)


@pytest.fixture
def login(app: FastAPI) -> Callable[[str], TestClient]:
    """Factory: a fresh client logged in as the given user."""

    def _login(user: str) -> TestClient:
        c = TestClient(app)
        response = c.post(f"{PREFIX}/login/", json={"user": user, "pass": PASSWORDS[user]})
        assert response.status_code == 204, response.text
        return c

    return _login
