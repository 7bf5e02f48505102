"""Credential store: username to bcrypt hash.

Records are provisioned out of band (see ``tasklist user add``); the HTTP
API only ever reads them.
"""

import asyncio
import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from tasklist.auth.passwords import DEFAULT_ROUNDS, hash_password, verify_password_async
from tasklist.core.errors import ErrorCode, TasklistError
from tasklist.storage.sqlite import SqliteStore, to_micros, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UserRecord:
    """A stored credential."""

    user: str
    pass_hash: str


class UserStore(SqliteStore):
    """Read and provision user credentials."""

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS users (
            user TEXT PRIMARY KEY,
            pass TEXT NOT NULL,
            created_at INTEGER NOT NULL
        );
    """

    @classmethod
    def open(cls, path: str | Path) -> "UserStore":
        return cls(path)

    def _get(self, username: str) -> UserRecord | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT user, pass FROM users WHERE user = ?", (username,)
            ).fetchone()
        return UserRecord(user=row["user"], pass_hash=row["pass"]) if row else None

    def _insert(self, username: str, pass_hash: str) -> UserRecord:
        try:
            with self._transaction() as conn:
                conn.execute(
                    "INSERT INTO users(user, pass, created_at) VALUES (?, ?, ?)",
                    (username, pass_hash, to_micros(utcnow())),
                )
        except sqlite3.IntegrityError as e:
            raise TasklistError(
                ErrorCode.STORE_DUPLICATE, {"field": "user", "value": username}, cause=e
            ) from e
        logger.info("Provisioned user %s", username)
        return UserRecord(user=username, pass_hash=pass_hash)

    def _usernames(self) -> list[str]:
        with self._transaction() as conn:
            rows = conn.execute("SELECT user FROM users ORDER BY user").fetchall()
        return [row["user"] for row in rows]

    def _remove(self, username: str) -> bool:
        with self._transaction() as conn:
            removed = conn.execute("DELETE FROM users WHERE user = ?", (username,)).rowcount
        if removed:
            logger.info("Removed user %s", username)
        return bool(removed)

    async def get(self, username: str) -> UserRecord | None:
        return await asyncio.to_thread(self._get, username)

    async def authenticate(self, username: str, password: str) -> bool:
        """True only for a known user whose password matches.

        Store and hash errors propagate; callers decide how to report them.
        """
        record = await self.get(username)
        if record is None:
            return False
        return await verify_password_async(password, record.pass_hash)

    async def add(self, username: str, password: str, *, rounds: int = DEFAULT_ROUNDS) -> UserRecord:
        pass_hash = await asyncio.to_thread(hash_password, password, rounds)
        return await self.add_hashed(username, pass_hash)

    async def add_hashed(self, username: str, pass_hash: str) -> UserRecord:
        """Store an already-computed bcrypt hash, e.g. one carried over from another system."""
        return await asyncio.to_thread(self._insert, username, pass_hash)

    async def usernames(self) -> list[str]:
        return await asyncio.to_thread(self._usernames)

    async def remove(self, username: str) -> bool:
        return await asyncio.to_thread(self._remove, username)
