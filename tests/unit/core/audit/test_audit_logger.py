"""Tests for the AuditLogger and related utilities."""

from __future__ import annotations

import json
import time

from wellplate.core.audit.logger import AuditEvent, _hash_input, _where


# ---------------------------------------------------------------------------
# _hash_input tests
# ---------------------------------------------------------------------------

class TestHashInput:
    def test_hashes_dict(self):
        h = _hash_input({"hours": 2.5})
        assert isinstance(h, str)
        assert len(h) == 64  # SHA-256 hex

    def test_order_independent(self):
        """Canonical JSON sorts keys, so order doesn't matter."""
        assert _hash_input({"z": 1, "a": 2}) == _hash_input({"a": 2, "z": 1})

    def test_different_inputs_differ(self):
        assert _hash_input({"hours": 1}) != _hash_input({"hours": 2})

    def test_non_serializable_returns_empty(self):
        assert _hash_input(object()) == ""


# ---------------------------------------------------------------------------
# AuditLogger writes
# ---------------------------------------------------------------------------

class TestLogEvent:
    def test_log_event_returns_uuid(self, audit_logger):
        eid = audit_logger.log_event(AuditEvent(action="tool_invocation", tool_name="stress_score"))
        assert len(eid) == 36

    def test_logged_tool_call_retrievable(self, audit_logger):
        audit_logger.log_tool_call("stress_score", duration_ms=12.5)
        (event,) = audit_logger.get_events()
        assert event["tool_name"] == "stress_score"
        assert event["action"] == "tool_invocation"
        assert event["status"] == "success"
        assert event["duration_ms"] == 12.5

    def test_tool_input_hashed_not_stored(self, audit_logger):
        audit_logger.log_tool_call("set_screen_time", tool_input={"hours": 3.5})
        (event,) = audit_logger.get_events()
        assert len(event["tool_input_hash"]) == 64
        assert "3.5" not in json.dumps(event)

    def test_failure_recorded(self, audit_logger):
        audit_logger.log_tool_call("set_screen_time", status="failure", error_type="ValueError")
        (event,) = audit_logger.get_events()
        assert event["status"] == "failure"
        assert event["error_type"] == "ValueError"

    def test_metadata_json_stored(self, audit_logger):
        audit_logger.log_tool_call("stress_score", metadata={"usage_source": "auto"})
        (event,) = audit_logger.get_events()
        assert json.loads(event["metadata_json"]) == {"usage_source": "auto"}

    def test_write_failure_returns_empty(self, audit_logger, wp_db):
        wp_db.close()
        assert audit_logger.log_tool_call("stress_score") == ""


class TestDataChanges:
    def test_log_data_write(self, audit_logger):
        audit_logger.log_data_write(tool_name="log_food", record_type="food_log_entry")
        (event,) = audit_logger.get_events(action="data_write")
        assert json.loads(event["metadata_json"])["record_type"] == "food_log_entry"

    def test_log_data_delete(self, audit_logger):
        audit_logger.log_data_delete(tool_name="delete_food_log", record_type="food_log_entry", count=1)
        (event,) = audit_logger.get_events(action="data_delete")
        meta = json.loads(event["metadata_json"])
        assert meta["records_deleted"] == 1


# ---------------------------------------------------------------------------
# AuditLogger reads
# ---------------------------------------------------------------------------

class TestGetEvents:
    def test_filter_by_action(self, audit_logger):
        audit_logger.log_tool_call("stress_score")
        audit_logger.log_data_delete(tool_name="delete_food_log", record_type="food_log_entry")
        audit_logger.log_tool_call("sleep_history")
        assert len(audit_logger.get_events(action="tool_invocation")) == 2
        assert len(audit_logger.get_events(action="data_delete")) == 1

    def test_filter_by_tool_name(self, audit_logger):
        audit_logger.log_tool_call("alpha")
        audit_logger.log_tool_call("beta")
        audit_logger.log_tool_call("alpha")
        assert len(audit_logger.get_events(tool_name="alpha")) == 2

    def test_limit_respected(self, audit_logger):
        for i in range(10):
            audit_logger.log_tool_call(f"tool_{i}")
        assert len(audit_logger.get_events(limit=3)) == 3

    def test_newest_first(self, audit_logger):
        audit_logger.log_tool_call("first")
        time.sleep(0.01)
        audit_logger.log_tool_call("second")
        events = audit_logger.get_events()
        assert [e["tool_name"] for e in events] == ["second", "first"]

    def test_since_filter(self, audit_logger):
        audit_logger.log_tool_call("old")
        assert audit_logger.get_events(since="2999-01-01T00:00:00") == []


class TestCounts:
    def test_count_events_empty(self, audit_logger):
        assert audit_logger.count_events() == 0

    def test_count_by_action(self, audit_logger):
        audit_logger.log_tool_call("a")
        audit_logger.log_data_write(record_type="manual_usage")
        assert audit_logger.count_events() == 2
        assert audit_logger.count_events(action="data_write") == 1

    def test_where_clause(self):
        assert _where(action=None, since=None) == ("", [])
        clause, params = _where(action="data_write", since="2026-03-01")
        assert clause == " WHERE action = ? AND timestamp >= ?"
        assert params == ["data_write", "2026-03-01"]


class TestSummarize:
    def test_counts_and_recent(self, audit_logger):
        audit_logger.log_tool_call("stress_score", duration_ms=3.0)
        audit_logger.log_data_write(tool_name="log_food", record_type="food_log_entry")
        audit_logger.log_data_delete(tool_name="delete_food_log", record_type="food_log_entry", count=1)
        summary = audit_logger.summarize(recent=2)
        assert summary["total_events"] == 3
        assert summary["data_writes"] == 1
        assert summary["data_deletes"] == 1
        assert len(summary["recent_events"]) == 2
        assert set(summary["recent_events"][0]) == {
            "timestamp", "action", "tool_name", "status", "duration_ms",
        }

    def test_no_inputs_or_metadata_exposed(self, audit_logger):
        audit_logger.log_tool_call("log_food", {"food_name": "Lentil soup"}, metadata={"entry_count": 1})
        summary = audit_logger.summarize()
        assert "Lentil" not in json.dumps(summary)
        assert "metadata_json" not in summary["recent_events"][0]
