"""MCP tools for the device usage monitor.

These are the callbacks a host-side usage monitor invokes: once when the
daily monitoring interval starts and once per hourly threshold crossed. They
write only the shared threshold record; the stress score reads it on its
next recompute.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from wellplate.core.audit.logger import AuditLogger
    from wellplate.domains.stress.connectors.usage_monitor import UsageMonitor

logger = logging.getLogger(__name__)


def register_usage_monitor_tools(
    mcp: FastMCP,
    monitor: UsageMonitor,
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register usage monitor callback tools on the MCP server."""

    @mcp.tool
    async def usage_monitor_schedule(ctx: Context) -> str:
        """Return the daily monitoring interval and hourly threshold events to register."""
        return json.dumps(monitor.monitoring_schedule().to_dict(), indent=2)

    @mcp.tool
    async def usage_interval_started(ctx: Context) -> str:
        """Reset today's usage record to zero. Call at the start of each local day."""
        record = monitor.interval_did_start()
        if audit_logger is not None:
            audit_logger.log_data_write(
                tool_name="usage_interval_started", record_type="usage_threshold_record"
            )
        return json.dumps({"status": "ok", "record": record.to_dict()})

    @mcp.tool
    async def usage_threshold_reached(ctx: Context, event_name: str) -> str:
        """Record that an hourly usage threshold was crossed.

        The stored value only ever increases within a day; an event for a
        lower threshold than the one already recorded leaves it unchanged.

        Args:
            event_name: Threshold event name, e.g. 'threshold_3h'.
        """
        record = monitor.event_did_reach_threshold(event_name)
        if record is None:
            return json.dumps({
                "status": "ignored",
                "message": f"Unrecognized usage event: {event_name}",
            })
        if audit_logger is not None:
            audit_logger.log_data_write(
                tool_name="usage_threshold_reached",
                record_type="usage_threshold_record",
                metadata={"hours": record.max_hours_crossed_today},
            )
        return json.dumps({"status": "ok", "record": record.to_dict()})
