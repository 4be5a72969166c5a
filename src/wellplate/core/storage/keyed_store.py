"""Shared keyed store — small JSON values read and written across processes.

The usage monitor process writes its threshold record here and the manual
entry path writes per-day usage values. The engine only reads. Values are
stored as JSON so that an explicitly saved ``0.0`` is distinct from a key
that was never written.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable

from wellplate.core.storage.database import WellPlateDatabase

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyedStore(Protocol):
    """Key/value store with atomic per-key reads and writes."""

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or ``default`` when the key is absent."""
        ...

    def contains(self, key: str) -> bool:
        """Whether a value has been saved under ``key`` (including zero)."""
        ...

    def put(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under ``key``."""
        ...

    def delete(self, key: str) -> bool:
        """Remove ``key``; return True if it existed."""
        ...


class InMemoryKeyedStore:
    """Process-local KeyedStore used for tests and embedding."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.put(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._values.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def contains(self, key: str) -> bool:
        return key in self._values

    def put(self, key: str, value: Any) -> None:
        # Round-trip through JSON so behaviour matches the SQLite store
        self._values[key] = json.dumps(value, separators=(",", ":"))

    def delete(self, key: str) -> bool:
        return self._values.pop(key, None) is not None


class SQLiteKeyedStore:
    """KeyedStore backed by the ``shared_store`` table.

    Each ``put`` is a single upsert committed immediately, so a reader in
    another process never observes a partially written value.

    Usage::

        store = SQLiteKeyedStore(db)
        store.put("manual_usage_hours:2026-02-21", 0.0)
        store.contains("manual_usage_hours:2026-02-21")  # True
    """

    def __init__(self, database: WellPlateDatabase) -> None:
        self._db = database

    def get(self, key: str, default: Any = None) -> Any:
        row = self._db.connection.execute(
            "SELECT value_json FROM shared_store WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return default
        try:
            return json.loads(row["value_json"])
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable shared value for key %s", key)
            return default

    def contains(self, key: str) -> bool:
        row = self._db.connection.execute(
            "SELECT 1 FROM shared_store WHERE key = ?", (key,)
        ).fetchone()
        return row is not None

    def put(self, key: str, value: Any) -> None:
        conn = self._db.connection
        conn.execute(
            """INSERT INTO shared_store (key, value_json, updated_at)
               VALUES (?, ?, ?)
               ON CONFLICT(key) DO UPDATE SET
                   value_json = excluded.value_json,
                   updated_at = excluded.updated_at""",
            (
                key,
                json.dumps(value, separators=(",", ":")),
                datetime.now(timezone.utc).isoformat(),
            ),
        )
        conn.commit()

    def delete(self, key: str) -> bool:
        conn = self._db.connection
        cursor = conn.execute("DELETE FROM shared_store WHERE key = ?", (key,))
        conn.commit()
        return cursor.rowcount > 0
