"""Shared test fixtures for WellPlate stress tests."""

from __future__ import annotations

import sys
from datetime import date, datetime, time, timezone
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_PATH", ":memory:")
    monkeypatch.setenv("ENCRYPTION_KEY", "")
    monkeypatch.setenv("APPLE_HEALTH_EXPORT_PATH", "")
    monkeypatch.setenv("LOCAL_TIMEZONE", "UTC")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from wellplate.domains.stress.connectors import (  # noqa: E402
    DateRange,
    MetricKind,
    SensorUnavailableError,
)
from wellplate.domains.stress.domain_logic.stress_models import (  # noqa: E402
    RawSample,
    SleepStageInterval,
)

# Mid-afternoon on a fixed day, UTC
FIXED_NOW = datetime(2026, 3, 14, 15, 30, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock for code that takes a ``now_fn``."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeSignalProvider:
    """In-memory SignalProvider with per-metric values and canned sleep.

    A metric mapped to ``None`` yields no samples; a metric listed in
    ``failing`` raises SensorUnavailableError. A metric in ``history`` yields
    one UTC-midnight sample per listed day inside the range instead of its
    ``daily`` value. Every call is recorded.
    """

    def __init__(
        self,
        daily: dict[MetricKind, float | None] | None = None,
        sleep: list[SleepStageInterval] | None = None,
        *,
        authorized: bool = True,
        failing: set[MetricKind] | None = None,
        sleep_fails: bool = False,
        grant_on_request: bool = True,
        history: dict[MetricKind, dict[date, float]] | None = None,
    ) -> None:
        self.daily = daily or {}
        self.history = history or {}
        self.sleep = sleep or []
        self.authorized = authorized
        self.failing = failing or set()
        self.sleep_fails = sleep_fails
        self.grant_on_request = grant_on_request
        self.calls: list[tuple[str, object]] = []

    async def fetch_cumulative(self, metric: MetricKind, date_range: DateRange) -> list[RawSample]:
        self.calls.append(("fetch_cumulative", metric))
        if metric in self.failing:
            raise SensorUnavailableError(f"{metric.value} unavailable")
        if metric in self.history:
            samples = []
            for day, value in sorted(self.history[metric].items()):
                midnight = datetime.combine(day, time.min, tzinfo=timezone.utc)
                if date_range.contains(midnight):
                    samples.append(RawSample(timestamp=midnight, value=value))
            return samples
        value = self.daily.get(metric)
        if value is None:
            return []
        return [RawSample(timestamp=date_range.start, value=value)]

    async def fetch_sleep_intervals(self, date_range: DateRange) -> list[SleepStageInterval]:
        self.calls.append(("fetch_sleep_intervals", date_range))
        if self.sleep_fails:
            raise SensorUnavailableError("sleep unavailable")
        return [s for s in self.sleep if date_range.contains(s.start)]

    def is_authorized(self) -> bool:
        return self.authorized

    async def request_authorization(self) -> bool:
        self.calls.append(("request_authorization", None))
        if self.grant_on_request:
            self.authorized = True
        return self.authorized

    @property
    def data_source(self) -> str:
        return "fake"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_provider() -> FakeSignalProvider:
    return FakeSignalProvider()


@pytest.fixture
def make_provider():
    """Factory for FakeSignalProviders with custom data."""
    return FakeSignalProvider


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def wp_db():
    """Create an in-memory WellPlateDatabase for testing."""
    from wellplate.core.storage.database import WellPlateDatabase

    db = WellPlateDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def field_encryptor():
    """Create a FieldEncryptor with a test key."""
    from cryptography.fernet import Fernet

    from wellplate.core.storage.encryption import FieldEncryptor

    return FieldEncryptor(Fernet.generate_key().decode())


@pytest.fixture
def food_log_repository(wp_db, field_encryptor):
    """Create a FoodLogRepository backed by in-memory SQLite."""
    from wellplate.core.storage.food_log import FoodLogRepository

    return FoodLogRepository(wp_db, field_encryptor)


@pytest.fixture
def keyed_store():
    from wellplate.core.storage.keyed_store import InMemoryKeyedStore

    return InMemoryKeyedStore()


@pytest.fixture
def audit_logger(wp_db):
    """Create an AuditLogger backed by in-memory SQLite."""
    from wellplate.core.audit.logger import AuditLogger

    return AuditLogger(wp_db)
