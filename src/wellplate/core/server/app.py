"""WellPlate Stress MCP Server — application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from wellplate.core.audit.logger import AuditLogger
from wellplate.core.config.settings import get_settings
from wellplate.core.storage.database import WellPlateDatabase
from wellplate.core.storage.encryption import EncryptionError, FieldEncryptor
from wellplate.core.storage.food_log import FoodLogRepository
from wellplate.core.storage.keyed_store import SQLiteKeyedStore
from wellplate.domains.stress.connectors import SignalProvider
from wellplate.domains.stress.connectors.apple_health import AppleHealthSignalProvider
from wellplate.domains.stress.connectors.providers import MockSignalProvider
from wellplate.domains.stress.connectors.usage_bridge import UsageMonitorBridge
from wellplate.domains.stress.connectors.usage_monitor import UsageMonitor
from wellplate.domains.stress.domain_logic.calendar_days import NowFn, local_now_fn
from wellplate.domains.stress.domain_logic.engine import StressEngine
from wellplate.domains.stress.tools.audit_tools import register_audit_tools
from wellplate.domains.stress.tools.stress_tools import register_stress_tools
from wellplate.domains.stress.tools.usage_monitor_tools import register_usage_monitor_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "WellPlate Stress"
SERVER_VERSION = "0.1.0"


def create_app(
    *,
    signal_provider_override: SignalProvider | None = None,
    database_override: WellPlateDatabase | None = None,
    now_fn_override: NowFn | None = None,
) -> FastMCP:
    """Create and configure the WellPlate stress MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Opens the local database (shared keyed store, food log, audit trail)
    3. Selects the sensor provider (Apple Health export if configured, else mock)
    4. Builds the stress engine and the usage monitor
    5. Registers all tools
    """
    settings = get_settings()
    tz = settings.resolve_timezone()
    now_fn = now_fn_override or local_now_fn(tz)

    # --- Server instance ---
    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "WellPlate daily stress indicator. Combines exercise, sleep, diet and "
            "screen time into an explainable 0-100 score with per-factor cards."
        ),
    )

    # --- Local storage ---
    if database_override is not None:
        database = database_override
    else:
        database = WellPlateDatabase(settings.db_path)
        database.initialize()
        logger.info(
            "Database initialized: %s (schema v%d)",
            settings.db_path,
            database.get_schema_version(),
        )

    keyed_store = SQLiteKeyedStore(database)
    audit_logger = AuditLogger(database)

    # --- Food log (requires an encryption key) ---
    food_log: FoodLogRepository | None = None
    if settings.encryption_key:
        try:
            food_log = FoodLogRepository(database, FieldEncryptor(settings.encryption_key))
        except EncryptionError as exc:
            logger.error("Failed to initialize food log: %s", exc)
            logger.warning("Continuing without a food log; diet will use a neutral estimate")
    else:
        logger.info(
            "No ENCRYPTION_KEY configured; food log disabled. "
            "Set ENCRYPTION_KEY to enable diet scoring."
        )

    # --- Sensor provider ---
    if signal_provider_override is not None:
        signal_provider = signal_provider_override
    elif settings.apple_health_export_path:
        signal_provider = AppleHealthSignalProvider(settings.apple_health_export_path, tz=tz)
        logger.info("Using Apple Health export at %s", settings.apple_health_export_path)
    else:
        signal_provider = MockSignalProvider(tz=tz)
        logger.info("Using mock signal provider")

    # --- Engine and usage monitor ---
    engine = StressEngine(
        signal_provider,
        UsageMonitorBridge(keyed_store, now_fn),
        food_log=food_log,
        now_fn=now_fn,
    )
    monitor = UsageMonitor(keyed_store, now_fn)

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        status = {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "data_source": signal_provider.data_source,
            "sensor_authorized": signal_provider.is_authorized(),
            "food_log_enabled": food_log is not None,
        }
        if food_log is not None:
            status["food_entries_stored"] = food_log.count_entries()
        return status

    register_stress_tools(server, engine, audit_logger)
    register_usage_monitor_tools(server, monitor, audit_logger)
    register_audit_tools(server, audit_logger)
    logger.info("Stress, usage monitor and audit tools registered")

    if food_log is not None:
        from wellplate.domains.stress.tools.food_log_tools import register_food_log_tools

        register_food_log_tools(server, food_log, now_fn, audit_logger)
        logger.info("Food log tools registered")

    return server


# Module-level instance for FastMCP discovery (fastmcp.json: "server": "...app.py:mcp").
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
