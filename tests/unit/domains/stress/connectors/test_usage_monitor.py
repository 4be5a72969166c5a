"""Tests for the usage monitor record and the engine-side bridge."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

import pytest

from wellplate.domains.stress.connectors.usage_bridge import (
    UsageMonitorBridge,
    manual_usage_key,
)
from wellplate.domains.stress.connectors.usage_monitor import (
    THRESHOLD_RECORD_KEY,
    UsageMonitor,
    parse_threshold_event,
)
from wellplate.domains.stress.domain_logic.stress_models import UsageSource


@pytest.fixture
def monitor(keyed_store, clock):
    return UsageMonitor(keyed_store, clock)


@pytest.fixture
def bridge(keyed_store, clock):
    return UsageMonitorBridge(keyed_store, clock)


class TestParseThresholdEvent:
    @pytest.mark.parametrize("name,hours", [
        ("threshold_1h", 1.0),
        ("threshold_12h", 12.0),
        ("threshold_3", 3.0),
    ])
    def test_valid(self, name, hours):
        assert parse_threshold_event(name) == hours

    @pytest.mark.parametrize("name", ["", "threshold_", "limit_3h", "threshold_xh", "threshold_2.5h"])
    def test_invalid(self, name):
        assert parse_threshold_event(name) is None

    @pytest.mark.parametrize("name", ["threshold_0h", "threshold_13h", "threshold_99h"])
    def test_outside_schedule_rejected(self, name):
        assert parse_threshold_event(name) is None


class TestMonitoringSchedule:
    def test_daily_interval_with_hourly_events(self):
        schedule = UsageMonitor.monitoring_schedule()
        data = schedule.to_dict()
        assert data["interval_start"] == "00:00"
        assert data["interval_end"] == "23:59"
        assert data["repeats"] is True
        assert len(schedule.events) == 12
        assert schedule.events["threshold_1h"] == 1
        assert schedule.events["threshold_12h"] == 12


class TestUsageMonitor:
    def test_interval_start_resets_to_zero(self, monitor, keyed_store):
        keyed_store.put(THRESHOLD_RECORD_KEY, {"day": "2026-03-13", "max_hours_crossed_today": 9.0})
        record = monitor.interval_did_start()
        assert record.day == "2026-03-14"
        assert record.max_hours_crossed_today == 0.0
        assert keyed_store.get(THRESHOLD_RECORD_KEY) == {
            "day": "2026-03-14",
            "max_hours_crossed_today": 0.0,
        }

    def test_threshold_ratchets_up(self, monitor):
        monitor.interval_did_start()
        monitor.event_did_reach_threshold("threshold_1h")
        record = monitor.event_did_reach_threshold("threshold_3h")
        assert record.max_hours_crossed_today == 3.0

    def test_never_decreases_within_day(self, monitor):
        monitor.interval_did_start()
        monitor.event_did_reach_threshold("threshold_4h")
        record = monitor.event_did_reach_threshold("threshold_2h")
        assert record.max_hours_crossed_today == 4.0
        assert monitor.current_record().max_hours_crossed_today == 4.0

    def test_stale_record_counts_as_zero(self, monitor, keyed_store):
        keyed_store.put(THRESHOLD_RECORD_KEY, {"day": "2026-03-13", "max_hours_crossed_today": 9.0})
        record = monitor.event_did_reach_threshold("threshold_1h")
        assert record.day == "2026-03-14"
        assert record.max_hours_crossed_today == 1.0

    def test_unrecognized_event_ignored(self, monitor, keyed_store):
        monitor.interval_did_start()
        assert monitor.event_did_reach_threshold("bogus") is None
        assert keyed_store.get(THRESHOLD_RECORD_KEY)["max_hours_crossed_today"] == 0.0

    def test_unscheduled_hour_does_not_move_record(self, monitor, keyed_store):
        monitor.interval_did_start()
        monitor.event_did_reach_threshold("threshold_2h")
        assert monitor.event_did_reach_threshold("threshold_99h") is None
        assert keyed_store.get(THRESHOLD_RECORD_KEY)["max_hours_crossed_today"] == 2.0

    def test_malformed_record_replaced(self, monitor, keyed_store):
        keyed_store.put(THRESHOLD_RECORD_KEY, {"unexpected": True})
        assert monitor.current_record() is None
        record = monitor.event_did_reach_threshold("threshold_2h")
        assert record.max_hours_crossed_today == 2.0

    def test_interval_end_keeps_record(self, monitor):
        monitor.interval_did_start()
        monitor.event_did_reach_threshold("threshold_5h")
        monitor.interval_did_end()
        assert monitor.current_record().max_hours_crossed_today == 5.0


class TestUsageMonitorBridge:
    def test_fresh_record_is_auto(self, monitor, bridge):
        monitor.interval_did_start()
        monitor.event_did_reach_threshold("threshold_3h")
        resolved = bridge.resolve()
        assert resolved.hours == 3.0
        assert resolved.source is UsageSource.AUTO

    def test_stale_record_is_absent(self, bridge, keyed_store):
        keyed_store.put(THRESHOLD_RECORD_KEY, {"day": "2026-03-13", "max_hours_crossed_today": 6.0})
        assert bridge.read_auto_detected_hours() is None
        resolved = bridge.resolve()
        assert resolved.hours is None
        assert resolved.source is UsageSource.NONE

    def test_record_goes_stale_at_midnight(self, monitor, bridge, clock):
        monitor.event_did_reach_threshold("threshold_2h")
        clock.now = datetime(2026, 3, 15, 0, 5, tzinfo=timezone.utc)
        assert bridge.read_auto_detected_hours() is None

    def test_malformed_record_is_absent(self, bridge, keyed_store):
        keyed_store.put(THRESHOLD_RECORD_KEY, "not a record")
        assert bridge.read_auto_detected_hours() is None

    def test_auto_beats_manual(self, monitor, bridge):
        bridge.save_manual_hours(1.5)
        monitor.event_did_reach_threshold("threshold_4h")
        resolved = bridge.resolve()
        assert resolved.source is UsageSource.AUTO
        assert resolved.hours == 4.0

    def test_fresh_zero_record_beats_manual(self, monitor, bridge):
        bridge.save_manual_hours(5.0)
        monitor.interval_did_start()
        resolved = bridge.resolve()
        assert resolved.source is UsageSource.AUTO
        assert resolved.hours == 0.0

    def test_manual_used_when_no_record(self, bridge):
        bridge.save_manual_hours(2.5)
        resolved = bridge.resolve()
        assert resolved.source is UsageSource.MANUAL
        assert resolved.hours == 2.5

    def test_saved_zero_distinct_from_absent(self, bridge, keyed_store):
        assert bridge.read_manual_hours() is None
        bridge.save_manual_hours(0.0)
        assert keyed_store.contains(manual_usage_key("2026-03-14"))
        assert bridge.read_manual_hours() == 0.0
        resolved = bridge.resolve()
        assert resolved.source is UsageSource.MANUAL
        assert resolved.hours == 0.0

    def test_manual_saved_under_todays_key_only(self, bridge, keyed_store, clock):
        bridge.save_manual_hours(3.0)
        clock.now = clock.now + timedelta(days=1)
        bridge.save_manual_hours(1.0)
        assert keyed_store.get("manual_usage_hours:2026-03-14") == 3.0
        assert keyed_store.get("manual_usage_hours:2026-03-15") == 1.0

    def test_yesterdays_manual_not_used_today(self, bridge, clock):
        bridge.save_manual_hours(3.0)
        clock.now = clock.now + timedelta(days=1)
        assert bridge.resolve().source is UsageSource.NONE

    @pytest.mark.parametrize("hours", [-0.5, 24.5, math.nan, math.inf])
    def test_rejects_out_of_range(self, bridge, keyed_store, hours):
        with pytest.raises(ValueError):
            bridge.save_manual_hours(hours)
        assert not keyed_store.contains(manual_usage_key("2026-03-14"))

    def test_read_manual_for_other_day(self, bridge, keyed_store):
        keyed_store.put("manual_usage_hours:2026-03-10", 4.0)
        assert bridge.read_manual_hours("2026-03-10") == 4.0
