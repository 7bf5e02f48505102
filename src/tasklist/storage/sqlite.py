"""SQLite plumbing shared by the task and credential stores.

Each store owns one database file. Every operation opens its own
connection under the store's lock and runs in a single transaction; the
async store methods push that work onto a thread with ``asyncio.to_thread``.

Timestamps are stored as integer microseconds since the epoch (UTC), so a
value read back is exactly the value written.
"""

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from pathlib import Path

from tasklist.core.errors import ErrorCode, TasklistError

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_MICROSECOND = timedelta(microseconds=1)


def to_micros(value: datetime) -> int:
    """Aware (or naive-as-UTC) datetime to epoch microseconds, losslessly."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (value - _EPOCH) // _MICROSECOND


def from_micros(value: int) -> datetime:
    return _EPOCH + timedelta(microseconds=value)


def utcnow() -> datetime:
    return datetime.now(UTC)


class SqliteStore:
    """Base for a store backed by one SQLite file.

    Subclasses set ``SCHEMA`` (a script of ``CREATE ... IF NOT EXISTS``
    statements), which runs when the store is opened.
    """

    SCHEMA = ""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._closed = False
        self._init_db()
        logger.info("%s ready db=%s", type(self).__name__, self._path)

    @property
    def path(self) -> Path:
        return self._path

    def close(self) -> None:
        with self._lock:
            self._closed = True
        logger.debug("%s closed db=%s", type(self).__name__, self._path)

    def _init_db(self) -> None:
        try:
            with self._transaction() as conn:
                conn.executescript(self.SCHEMA)
        except sqlite3.DatabaseError as e:
            raise TasklistError(
                ErrorCode.STORE_CORRUPT, {"path": self._path, "detail": e}, cause=e
            ) from e

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Connection for one operation; commits on success, rolls back on error."""
        with self._lock:
            if self._closed:
                raise TasklistError(ErrorCode.STORE_CLOSED, {"path": self._path})
            conn = sqlite3.connect(str(self._path), timeout=30.0)
            conn.row_factory = sqlite3.Row
            try:
                with conn:
                    yield conn
            finally:
                conn.close()
