"""Tests for WellPlateDatabase — schema creation, versioning, lifecycle."""

from __future__ import annotations

import pytest

from wellplate.core.storage.database import SCHEMA_VERSION, DatabaseError, WellPlateDatabase


class TestInitialization:
    def test_in_memory_initialize(self):
        db = WellPlateDatabase(":memory:")
        db.initialize()
        assert db.connection is not None
        db.close()

    def test_double_initialize_is_idempotent(self):
        db = WellPlateDatabase(":memory:")
        db.initialize()
        conn1 = db.connection
        db.initialize()
        assert db.connection is conn1
        db.close()

    def test_connection_before_init_raises(self):
        db = WellPlateDatabase(":memory:")
        with pytest.raises(DatabaseError, match="not initialized"):
            _ = db.connection

    def test_context_manager(self):
        with WellPlateDatabase(":memory:") as db:
            assert db.connection is not None
        with pytest.raises(DatabaseError):
            _ = db.connection


class TestSchema:
    def test_schema_version_recorded(self):
        with WellPlateDatabase(":memory:") as db:
            assert db.get_schema_version() == SCHEMA_VERSION

    def test_tables_created(self):
        with WellPlateDatabase(":memory:") as db:
            cursor = db.connection.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            tables = {row[0] for row in cursor.fetchall()}
        assert {"food_log_entries", "shared_store", "schema_version", "audit_log"} <= tables

    def test_indexes_created(self):
        with WellPlateDatabase(":memory:") as db:
            cursor = db.connection.execute("SELECT name FROM sqlite_master WHERE type='index'")
            indexes = {row[0] for row in cursor.fetchall()}
        for idx in ("idx_food_log_day", "idx_audit_timestamp", "idx_audit_action", "idx_audit_tool"):
            assert idx in indexes, f"Missing index: {idx}"

    def test_wal_mode_enabled(self):
        with WellPlateDatabase(":memory:") as db:
            mode = db.connection.execute("PRAGMA journal_mode").fetchone()[0].lower()
            # In-memory databases report 'memory' instead of 'wal'
            assert mode in ("wal", "memory")


class TestFileDatabase:
    def test_creates_parent_directories(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "wellplate.db"
        db = WellPlateDatabase(str(db_path))
        db.initialize()
        assert db_path.exists()
        assert db.get_schema_version() == SCHEMA_VERSION
        db.close()

    def test_reopen_keeps_single_version_row(self, tmp_path):
        db_path = str(tmp_path / "wellplate.db")
        with WellPlateDatabase(db_path):
            pass
        with WellPlateDatabase(db_path) as db:
            count = db.connection.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
            assert count == 1


class TestClose:
    def test_double_close_is_safe(self):
        db = WellPlateDatabase(":memory:")
        db.initialize()
        db.close()
        db.close()
