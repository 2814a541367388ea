"""Key-value persistence for the stream document and the field selector.

Two backends share the ``KeyValueStore`` protocol:

1. **SQLite** (``SqliteKeyValueStore``): survives restarts.  One ``kv``
   table holding canonical JSON values, WAL journal mode.
2. **In-memory** (``MemoryKeyValueStore``): volatile, for tests and
   throwaway sessions.  Values are JSON round-tripped on write so stored
   data never aliases live state.

``PersistentWriter`` wraps a store with bounded retries.  When every
attempt fails it logs at CRITICAL and raises ``PersistenceError``: the
in-memory state has already changed and the durable copy has not.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """Raised when a value could not be written after all retries."""


def encode_value(value: Any) -> str:
    """Compact JSON used for stored values."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal get/set store."""

    def get(self, key: str) -> Any | None:
        """Return the stored value, or ``None`` when *key* is unset."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable *value* under *key*."""
        ...


class MemoryKeyValueStore:
    """Dict-backed store."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = encode_value(value)

    def keys(self) -> list[str]:
        return sorted(self._data)


_CREATE_KV = """
CREATE TABLE IF NOT EXISTS kv (
    key         TEXT PRIMARY KEY,
    value_json  TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


class SqliteKeyValueStore:
    """SQLite-backed store.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.  Created (with parents) if it
        does not exist.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(_CREATE_KV)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def get(self, key: str) -> Any | None:
        with closing(self._connect()) as conn, conn:
            row = conn.execute(
                "SELECT value_json FROM kv WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    def set(self, key: str, value: Any) -> None:
        payload = encode_value(value)
        with closing(self._connect()) as conn, conn:
            conn.execute(
                """
                INSERT INTO kv (key, value_json, updated_at)
                VALUES (?, ?, datetime('now'))
                ON CONFLICT(key) DO UPDATE SET
                    value_json = excluded.value_json,
                    updated_at = excluded.updated_at
                """,
                (key, payload),
            )

    def keys(self) -> list[str]:
        with closing(self._connect()) as conn, conn:
            rows = conn.execute("SELECT key FROM kv ORDER BY key").fetchall()
        return [r[0] for r in rows]


class PersistentWriter:
    """Writes to a ``KeyValueStore`` with bounded retries.

    Parameters
    ----------
    store:
        The backing store.
    retries:
        Extra attempts after the first failure.
    """

    def __init__(self, store: KeyValueStore, retries: int = 3) -> None:
        self._store = store
        self._retries = max(0, retries)

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def read(self, key: str) -> Any | None:
        return self._store.get(key)

    def write(self, key: str, value: Any) -> None:
        last_exc: Exception | None = None
        for attempt in range(1, self._retries + 2):
            try:
                self._store.set(key, value)
                return
            except Exception as exc:  # noqa: BLE001
                last_exc = exc
                logger.warning(
                    "Write of %s failed (attempt %d/%d): %s",
                    key,
                    attempt,
                    self._retries + 1,
                    exc,
                )
        logger.critical(
            "Giving up on %s; in-memory state and store have diverged", key
        )
        raise PersistenceError(
            f"Could not persist {key} after {self._retries + 1} attempts: {last_exc}"
        ) from last_exc
