"""Food log repository — the structured log store the diet factor reads.

Entries are keyed by local calendar day. Daily queries use exact day
equality; an entry dated tomorrow never appears in today's result.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone

from wellplate.core.storage.database import WellPlateDatabase
from wellplate.core.storage.encryption import FieldEncryptor
from wellplate.core.storage.models import FoodLogEntry

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when repository operations fail."""


def _day_str(day: date | str) -> str:
    if isinstance(day, date):
        return day.isoformat()
    try:
        return date.fromisoformat(day).isoformat()
    except ValueError as exc:
        raise RepositoryError(f"Invalid day {day!r}; expected YYYY-MM-DD") from exc


class FoodLogRepository:
    """CRUD repository for encrypted food log entries.

    Usage::

        db = WellPlateDatabase(":memory:")
        db.initialize()
        repo = FoodLogRepository(db, FieldEncryptor(key="..."))

        entry_id = repo.add_entry(entry)
        today = repo.query_entries_for_day(date.today())
    """

    def __init__(self, database: WellPlateDatabase, encryptor: FieldEncryptor) -> None:
        self._db = database
        self._enc = encryptor

    def add_entry(self, entry: FoodLogEntry) -> str:
        """Persist a food log entry.

        Args:
            entry: The entry to save. If ``entry.id`` is empty, a UUID is
                generated.

        Returns:
            The entry ID.

        Raises:
            RepositoryError: If the food name is empty or the day is malformed.
        """
        if not entry.food_name or not entry.food_name.strip():
            raise RepositoryError("Food name must not be empty")

        eid = entry.id or str(uuid.uuid4())
        created_at = entry.created_at or datetime.now(timezone.utc).isoformat()

        conn = self._db.connection
        conn.execute(
            """INSERT INTO food_log_entries (
                id, day, food_name_enc, serving_size_enc,
                calories, protein, carbs, fat, fiber, confidence, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                eid,
                _day_str(entry.day),
                self._enc.encrypt(entry.food_name),
                self._enc.encrypt(entry.serving_size),
                int(entry.calories),
                float(entry.protein),
                float(entry.carbs),
                float(entry.fat),
                float(entry.fiber),
                entry.confidence,
                created_at,
            ),
        )
        conn.commit()
        logger.info("Saved food log entry %s (day=%s)", eid, entry.day)
        return eid

    def query_entries_for_day(self, day: date | str) -> list[FoodLogEntry]:
        """Return all entries whose stored day equals ``day`` exactly, oldest first."""
        rows = self._db.connection.execute(
            "SELECT * FROM food_log_entries WHERE day = ? ORDER BY created_at ASC",
            (_day_str(day),),
        ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def query_macros_for_day(self, day: date | str) -> list[FoodLogEntry]:
        """Like ``query_entries_for_day`` but reads only the numeric columns.

        Encrypted text fields are not decrypted, so the result does not
        depend on the encryption key; ``food_name`` is empty and
        ``serving_size`` is None on every entry.
        """
        rows = self._db.connection.execute(
            """SELECT id, day, calories, protein, carbs, fat, fiber, created_at
               FROM food_log_entries WHERE day = ? ORDER BY created_at ASC""",
            (_day_str(day),),
        ).fetchall()
        return [
            FoodLogEntry(
                id=row["id"],
                day=row["day"],
                food_name="",
                calories=row["calories"],
                protein=row["protein"],
                carbs=row["carbs"],
                fat=row["fat"],
                fiber=row["fiber"],
                created_at=row["created_at"],
            )
            for row in rows
        ]

    def list_days(self, *, limit: int = 30) -> list[str]:
        """Return distinct logged days, newest first."""
        rows = self._db.connection.execute(
            "SELECT DISTINCT day FROM food_log_entries ORDER BY day DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [row["day"] for row in rows]

    def delete_entry(self, entry_id: str) -> bool:
        """Delete an entry; return True if it existed."""
        conn = self._db.connection
        cursor = conn.execute("DELETE FROM food_log_entries WHERE id = ?", (entry_id,))
        conn.commit()
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Deleted food log entry %s", entry_id)
        return deleted

    def count_entries(self, *, day: date | str | None = None) -> int:
        if day is None:
            row = self._db.connection.execute(
                "SELECT COUNT(*) FROM food_log_entries"
            ).fetchone()
        else:
            row = self._db.connection.execute(
                "SELECT COUNT(*) FROM food_log_entries WHERE day = ?", (_day_str(day),)
            ).fetchone()
        return row[0]

    def _row_to_entry(self, row) -> FoodLogEntry:
        return FoodLogEntry(
            id=row["id"],
            day=row["day"],
            food_name=self._enc.decrypt(row["food_name_enc"]) or "",
            serving_size=self._enc.decrypt(row["serving_size_enc"]),
            calories=row["calories"],
            protein=row["protein"],
            carbs=row["carbs"],
            fat=row["fat"],
            fiber=row["fiber"],
            confidence=row["confidence"],
            created_at=row["created_at"],
        )
