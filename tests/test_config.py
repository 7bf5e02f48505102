"""Tests for configuration loading."""

from pathlib import Path

import pytest

from tasklist.config import (
    DEFAULT_SESSION_KEY,
    TEN_THOUSAND_YEARS,
    get_config,
    load_config,
    reset_config,
)
from tasklist.core.errors import ErrorCode, TasklistError


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """No stray tasklist.yaml from the cwd or home directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    reset_config()
    yield
    reset_config()


def test_defaults() -> None:
    config = load_config(environ={})

    assert config.server.port == 8000
    assert config.server.api_prefix == "/tasks"
    assert config.storage.tasks_db == "tasks.db"
    assert config.storage.users_db == "users.db"
    assert config.session.keys == [DEFAULT_SESSION_KEY]
    assert config.session.max_age == TEN_THOUSAND_YEARS
    assert config.session.same_site == "strict"
    assert config.session.renew is True
    assert config.is_development
    assert config.secure_cookies is False


def test_yaml_file(tmp_path: Path) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text(
        "server:\n"
        "  port: 9001\n"
        "  env: production\n"
        "session:\n"
        "  keys: [old, new]\n"
        "  cookie_name: my.sess\n"
    )

    config = load_config(path, environ={})

    assert config.server.port == 9001
    assert config.session.keys == ["old", "new"]
    assert config.session.cookie_name == "my.sess"
    assert config.secure_cookies is True


def test_project_local_file_is_found(tmp_path: Path) -> None:
    (tmp_path / "tasklist.yaml").write_text("storage:\n  tasks_db: local.db\n")

    assert load_config(environ={}).storage.tasks_db == "local.db"


def test_env_overrides_file(tmp_path: Path) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text("server:\n  port: 9001\n")

    config = load_config(
        path,
        environ={
            "TASKLIST_SERVER_PORT": "9100",
            "TASKLIST_SESSION_KEYS": "a, b",
            "TASKLIST_SESSION_RENEW": "false",
            "TASKLIST_LOG_LEVEL": "debug",
            "UNRELATED": "1",
        },
    )

    assert config.server.port == 9100
    assert config.session.keys == ["a", "b"]
    assert config.session.renew is False
    assert config.log_level == "DEBUG"


def test_explicit_secure_flag_wins() -> None:
    config = load_config(environ={"TASKLIST_SESSION_SECURE": "true"})

    assert config.is_development
    assert config.secure_cookies is True


def test_invalid_same_site() -> None:
    with pytest.raises(TasklistError) as exc_info:
        load_config(environ={"TASKLIST_SESSION_SAME_SITE": "sometimes"})
    assert exc_info.value.code == ErrorCode.CONFIG_INVALID


def test_unknown_section_key(tmp_path: Path) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text("server:\n  colour: blue\n")

    with pytest.raises(TasklistError, match="colour"):
        load_config(path, environ={})


def test_broken_yaml(tmp_path: Path) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text("server: [unclosed\n")

    with pytest.raises(TasklistError):
        load_config(path, environ={})


def test_get_config_caches() -> None:
    assert get_config() is get_config()


def test_empty_section(tmp_path: Path) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text("server:\nsession:\n  cookie_name: my.sess\n")

    config = load_config(path, environ={"TASKLIST_SERVER_PORT": "9100"})

    assert config.server.port == 9100
    assert config.session.cookie_name == "my.sess"


@pytest.mark.parametrize("text", ["server: [a, b]\n", "- just\n- a list\n"])
def test_non_mapping_config(tmp_path: Path, text: str) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text(text)

    with pytest.raises(TasklistError) as exc_info:
        load_config(path, environ={})
    assert exc_info.value.code == ErrorCode.CONFIG_INVALID
