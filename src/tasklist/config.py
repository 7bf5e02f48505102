"""Tasklist configuration management.

Loads configuration from tasklist.yaml with sensible defaults.
All settings can be overridden via environment variables (TASKLIST_*).

Config locations (in priority order):
1. Explicit path passed to load_config()
2. ./tasklist.yaml (project-local)
3. ~/.config/tasklist/config.yaml (user-global)
4. Built-in defaults

Thread Safety:
    Uses threading.Lock for thread-safe lazy initialization.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from tasklist.core.errors import ErrorCode, TasklistError

logger = logging.getLogger(__name__)

DEFAULT_SESSION_KEY = "CHANGEME"

# Effectively "never expires": ten thousand years
TEN_THOUSAND_YEARS = 10_000 * 365 * 24 * 60 * 60

SAME_SITE_POLICIES = ("strict", "lax", "none")


@dataclass
class ServerConfig:
    """HTTP server settings."""

    host: str = "127.0.0.1"
    """Interface to bind."""

    port: int = 8000
    """Port to listen on."""

    env: str = "development"
    """Application environment; anything but 'development' enables secure cookies."""

    api_prefix: str = "/tasks"
    """Path prefix for every task, login and logout route."""


@dataclass
class StorageConfig:
    """SQLite database files."""

    tasks_db: str = "tasks.db"
    users_db: str = "users.db"


@dataclass
class SessionConfig:
    """Signed session cookie settings."""

    keys: list[str] = field(default_factory=lambda: [DEFAULT_SESSION_KEY])
    """Signing keys. The last key signs; all keys verify (rotation)."""

    cookie_name: str = "tasklist.sess"

    max_age: int = TEN_THOUSAND_YEARS
    """Session lifetime in seconds."""

    renew: bool = True
    """Re-issue the cookie when less than half of max_age remains."""

    rolling: bool = False
    """Re-issue the cookie on every response."""

    same_site: str = "strict"

    http_only: bool = True

    overwrite: bool = True
    """Replace any Set-Cookie for the same name already on the response."""

    path: str = "/"

    secure: bool | None = None
    """Secure-only cookies. None derives the flag from the environment."""


@dataclass
class TasklistConfig:
    """Root configuration for Tasklist."""

    server: ServerConfig = field(default_factory=ServerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    session: SessionConfig = field(default_factory=SessionConfig)

    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.server.env == "development"

    @property
    def secure_cookies(self) -> bool:
        if self.session.secure is not None:
            return self.session.secure
        return not self.is_development


# Global config instance (lazy-loaded, thread-safe)
_config: TasklistConfig | None = None
_config_lock = threading.Lock()

_SECTIONS: dict[str, type] = {
    "server": ServerConfig,
    "storage": StorageConfig,
    "session": SessionConfig,
}


def _deep_update(base: dict, updates: dict) -> dict:
    """Recursively update a dict with another dict."""
    for key, value in updates.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def _coerce(value: str) -> Any:
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
        return int(value)
    return value


def _apply_env_overrides(config_dict: dict, environ: dict[str, str] | None = None) -> dict:
    """Apply environment variable overrides.

    Environment variables follow pattern: TASKLIST_SECTION_KEY

    Examples:
        TASKLIST_SERVER_PORT=9000
        TASKLIST_SERVER_ENV=production
        TASKLIST_SESSION_KEYS=old-key,new-key
        TASKLIST_LOG_LEVEL=DEBUG
    """
    prefix = "TASKLIST_"
    environ = os.environ if environ is None else environ

    for key, value in environ.items():
        if not key.startswith(prefix):
            continue

        path_str = key[len(prefix):].lower()

        if path_str == "log_level":
            config_dict["log_level"] = value
            continue

        for section, cls in _SECTIONS.items():
            if not path_str.startswith(section + "_"):
                continue
            name = path_str[len(section) + 1:]
            if name not in {f.name for f in dataclasses.fields(cls)}:
                logger.warning("Ignoring unknown config variable %s", key)
                break
            section_dict = config_dict.get(section)
            if section_dict is None:
                section_dict = config_dict[section] = {}
            elif not isinstance(section_dict, dict):
                break
            if name == "keys":
                section_dict[name] = [k.strip() for k in value.split(",") if k.strip()]
            else:
                section_dict[name] = _coerce(value)
            break

    return config_dict


def _build_section(cls: type, data: Any, section: str) -> Any:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise TasklistError(
            ErrorCode.CONFIG_INVALID, {"key": section, "detail": "must be a mapping"}
        )
    known = {f.name for f in dataclasses.fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise TasklistError(
            ErrorCode.CONFIG_INVALID,
            {"key": section, "detail": f"unknown keys {sorted(unknown)}"},
        )
    return cls(**data)


def _validate(config: TasklistConfig) -> None:
    session = config.session
    if not session.keys:
        raise TasklistError(
            ErrorCode.CONFIG_INVALID, {"key": "session.keys", "detail": "at least one key required"}
        )
    if session.same_site.lower() not in SAME_SITE_POLICIES:
        raise TasklistError(
            ErrorCode.CONFIG_INVALID,
            {"key": "session.same_site", "detail": f"must be one of {SAME_SITE_POLICIES}"},
        )
    if session.max_age <= 0:
        raise TasklistError(
            ErrorCode.CONFIG_INVALID, {"key": "session.max_age", "detail": "must be positive"}
        )
    if not config.server.api_prefix.startswith("/"):
        raise TasklistError(
            ErrorCode.CONFIG_INVALID, {"key": "server.api_prefix", "detail": "must start with /"}
        )


def _dict_to_config(data: dict) -> TasklistConfig:
    """Convert a dict to TasklistConfig."""
    config = TasklistConfig(
        server=_build_section(ServerConfig, data.get("server", {}), "server"),
        storage=_build_section(StorageConfig, data.get("storage", {}), "storage"),
        session=_build_section(SessionConfig, data.get("session", {}), "session"),
        log_level=str(data.get("log_level", "INFO")).upper(),
    )
    _validate(config)
    return config


def load_config(
    path: str | Path | None = None,
    *,
    environ: dict[str, str] | None = None,
) -> TasklistConfig:
    """Load configuration from file with defaults and env overrides.

    Priority (highest to lowest):
    1. Environment variables (TASKLIST_*)
    2. Explicit path if provided
    3. ./tasklist.yaml (project-local)
    4. ~/.config/tasklist/config.yaml (user-global)
    5. Built-in defaults

    Args:
        path: Optional explicit config file path.
        environ: Environment mapping; defaults to os.environ.

    Returns:
        Merged TasklistConfig instance.
    """
    global _config

    config_dict: dict[str, Any] = {
        "server": {},
        "storage": {},
        "session": {},
    }

    config_paths = []
    if path:
        config_paths.append(Path(path))
    config_paths.extend([
        Path("tasklist.yaml"),
        Path.home() / ".config" / "tasklist" / "config.yaml",
    ])

    for config_path in config_paths:
        if config_path.exists():
            try:
                with open(config_path) as f:
                    file_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise TasklistError(
                    ErrorCode.CONFIG_INVALID, {"key": str(config_path), "detail": str(e)}, cause=e
                ) from e
            if not isinstance(file_config, dict):
                raise TasklistError(
                    ErrorCode.CONFIG_INVALID,
                    {"key": str(config_path), "detail": "top level must be a mapping"},
                )
            _deep_update(config_dict, file_config)
            logger.debug("Loaded config from %s", config_path)
            break  # Use first found config

    config_dict = _apply_env_overrides(config_dict, environ)

    _config = _dict_to_config(config_dict)

    if DEFAULT_SESSION_KEY in _config.session.keys and not _config.is_development:
        logger.warning(
            "Session cookies are signed with the default key in env=%s; set TASKLIST_SESSION_KEYS",
            _config.server.env,
        )
    return _config


def get_config() -> TasklistConfig:
    """Get the current configuration, loading if needed.

    Thread-safe with double-check locking.
    """
    global _config

    if _config is not None:
        return _config

    with _config_lock:
        if _config is None:
            _config = load_config()
        return _config


def reset_config() -> None:
    """Reset the global config (useful for testing)."""
    global _config
    with _config_lock:
        _config = None
