"""Audit trail for MCP tool calls and changes to stored data.

Each row says which tool ran, how long it took and whether it failed, or
which kind of record was written or deleted. Inputs are kept only as a
SHA-256 digest, so screen-time hours, food names and macro values never
reach the ``audit_log`` table.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sqlite3
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from wellplate.core.storage.database import DatabaseError, WellPlateDatabase

logger = logging.getLogger(__name__)

ACTION_TOOL_CALL = "tool_invocation"
ACTION_DATA_WRITE = "data_write"
ACTION_DATA_DELETE = "data_delete"


def _hash_input(data: Any) -> str:
    """Digest of ``data`` as sorted compact JSON; empty if it won't serialize."""
    try:
        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError):
        return ""
    return hashlib.sha256(canonical.encode()).hexdigest()


def _where(**filters: str | None) -> tuple[str, list[Any]]:
    """Build a WHERE clause from column filters; ``since`` bounds the timestamp."""
    clauses: list[str] = []
    params: list[Any] = []
    for column, value in filters.items():
        if not value:
            continue
        if column == "since":
            clauses.append("timestamp >= ?")
        else:
            clauses.append(f"{column} = ?")
        params.append(value)
    return (" WHERE " + " AND ".join(clauses)) if clauses else "", params


@dataclass
class AuditEvent:
    action: str
    tool_name: str = ""
    tool_input_hash: str = ""
    duration_ms: float | None = None
    status: str = "success"              # or 'failure'
    error_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class AuditLogger:
    """Appends events to ``audit_log`` and answers summary queries over it.

    Writing is best effort: if the database cannot take the row, the
    failure goes to the application log and the caller gets an empty id,
    so a broken trail never fails the stress score or a food log write.

    Usage::

        audit = AuditLogger(db)
        audit.log_tool_call("set_screen_time", {"hours": 3.0}, duration_ms=4.1)
        audit.log_data_write(tool_name="set_screen_time", record_type="manual_usage")
        audit.summarize(since="2026-03-01T00:00:00+00:00")
    """

    def __init__(self, database: WellPlateDatabase) -> None:
        self._db = database

    # ---------------------------------------------------------------
    # Write
    # ---------------------------------------------------------------

    def log_event(self, event: AuditEvent) -> str:
        """Store ``event``; return its id, or ``""`` if the write failed."""
        event_id = str(uuid.uuid4())
        row = (
            event_id,
            datetime.now(timezone.utc).isoformat(),
            event.action,
            event.tool_name or None,
            event.tool_input_hash or None,
            event.duration_ms,
            event.status,
            event.error_type,
            json.dumps(event.metadata, separators=(",", ":")) if event.metadata else None,
        )
        try:
            conn = self._db.connection
            conn.execute(
                """INSERT INTO audit_log
                   (id, timestamp, action, tool_name, tool_input_hash,
                    duration_ms, status, error_type, metadata_json)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                row,
            )
            conn.commit()
        except (sqlite3.Error, DatabaseError):
            logger.exception("Audit event %s for %r not recorded", event.action, event.tool_name)
            return ""
        return event_id

    def log_tool_call(
        self,
        tool_name: str,
        tool_input: Any = None,
        *,
        duration_ms: float | None = None,
        status: str = "success",
        error_type: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Record one MCP tool call.

        Args:
            tool_name: Registered tool name, e.g. ``stress_score``.
            tool_input: Arguments the tool received; only their digest is kept.
            duration_ms: Wall time spent in the tool.
            status: ``success`` or ``failure``.
            error_type: Exception class name when the call failed.
            metadata: Counts and source labels; never raw values.
        """
        return self.log_event(AuditEvent(
            action=ACTION_TOOL_CALL,
            tool_name=tool_name,
            tool_input_hash=_hash_input(tool_input) if tool_input else "",
            duration_ms=duration_ms,
            status=status,
            error_type=error_type,
            metadata=metadata or {},
        ))

    def log_data_write(
        self,
        *,
        tool_name: str = "",
        record_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Record a food log insert or a shared-store write (manual usage, monitor record)."""
        return self.log_event(AuditEvent(
            action=ACTION_DATA_WRITE,
            tool_name=tool_name,
            metadata={**(metadata or {}), "record_type": record_type},
        ))

    def log_data_delete(
        self,
        *,
        tool_name: str = "",
        record_type: str,
        count: int = 0,
    ) -> str:
        return self.log_event(AuditEvent(
            action=ACTION_DATA_DELETE,
            tool_name=tool_name,
            metadata={"record_type": record_type, "records_deleted": count},
        ))

    # ---------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------

    def get_events(
        self,
        *,
        action: str | None = None,
        tool_name: str | None = None,
        since: str | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Matching rows as dicts, newest first.

        ``since`` is an ISO 8601 lower bound on the event timestamp.
        """
        where, params = _where(action=action, tool_name=tool_name, since=since)
        rows = self._db.connection.execute(
            f"SELECT * FROM audit_log{where} ORDER BY timestamp DESC LIMIT ?",
            [*params, limit],
        ).fetchall()
        return [dict(row) for row in rows]

    def count_events(self, *, action: str | None = None, since: str | None = None) -> int:
        where, params = _where(action=action, since=since)
        row = self._db.connection.execute(
            f"SELECT COUNT(*) FROM audit_log{where}", params
        ).fetchone()
        return row[0]

    def summarize(self, *, since: str | None = None, recent: int = 20) -> dict[str, Any]:
        """Event counts since ``since`` plus the most recent events, display-ready."""
        return {
            "total_events": self.count_events(since=since),
            "data_writes": self.count_events(action=ACTION_DATA_WRITE, since=since),
            "data_deletes": self.count_events(action=ACTION_DATA_DELETE, since=since),
            "recent_events": [
                {
                    "timestamp": event["timestamp"],
                    "action": event["action"],
                    "tool_name": event["tool_name"],
                    "status": event["status"],
                    "duration_ms": event["duration_ms"],
                }
                for event in self.get_events(since=since, limit=recent)
            ],
        }
