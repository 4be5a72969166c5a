"""MCP tools for the daily stress score.

The score combines four factors (exercise, sleep, diet, screen time), each
0-25 where higher means more stress-contributing. Missing data for a factor
yields a neutral 12.5 rather than an error.
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from wellplate.core.audit.logger import AuditLogger
    from wellplate.domains.stress.domain_logic.engine import StressEngine

logger = logging.getLogger(__name__)


def register_stress_tools(
    mcp: FastMCP,
    engine: StressEngine,
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register stress score tools on the MCP server."""

    def _audit(tool_name: str, start_time: float, tool_input=None, **kwargs) -> None:
        if audit_logger is None:
            return
        audit_logger.log_tool_call(
            tool_name=tool_name,
            tool_input=tool_input,
            duration_ms=(time.monotonic() - start_time) * 1000,
            **kwargs,
        )

    @mcp.tool
    async def stress_score(ctx: Context) -> str:
        """Compute today's stress score from activity, sleep, diet and screen time.

        Returns the total (0-100), its level (Excellent to Very High), the
        four factor cards and the two biggest stressors. If sensor access
        has not been granted, ``status`` is ``needs_permission``.
        """
        start_time = time.monotonic()
        report = await engine.recompute()
        _audit(
            "stress_score",
            start_time,
            metadata={
                "status": report.status,
                "usage_source": report.usage_source.value,
                "data_source": engine.data_source,
            },
        )
        return json.dumps(report.to_dict(), indent=2)

    @mcp.tool
    async def request_health_authorization(ctx: Context) -> str:
        """Request read access to health sensor data, then recompute the score."""
        start_time = time.monotonic()
        report = await engine.request_authorization()
        _audit("request_health_authorization", start_time, metadata={"status": report.status})
        return json.dumps(report.to_dict(), indent=2)

    @mcp.tool
    async def set_screen_time(ctx: Context, hours: float) -> str:
        """Save today's screen time manually and rescore.

        An auto-detected value from the usage monitor still takes priority
        over a manual entry for the same day.

        Args:
            hours: Hours of device usage today (0-24). 0 is a valid answer.
        """
        start_time = time.monotonic()
        try:
            report = engine.set_manual_usage(hours)
        except ValueError as exc:
            _audit(
                "set_screen_time",
                start_time,
                {"hours": hours},
                status="failure",
                error_type=type(exc).__name__,
            )
            return json.dumps({"status": "error", "message": str(exc)})

        if audit_logger is not None:
            audit_logger.log_data_write(tool_name="set_screen_time", record_type="manual_usage")
        _audit(
            "set_screen_time",
            start_time,
            {"hours": hours},
            metadata={"usage_source": report.usage_source.value},
        )
        return json.dumps(report.to_dict(), indent=2)

    @mcp.tool
    async def sleep_history(ctx: Context) -> str:
        """Summarize the last 30 nights of sleep.

        Includes last night with a quality label, progress toward an 8-hour
        goal, the 7-day average, the best night and the 30-day range.
        """
        start_time = time.monotonic()
        history = await engine.sleep_history()
        _audit("sleep_history", start_time, metadata={"status": history.get("status")})
        return json.dumps(history, indent=2)

    @mcp.tool
    async def activity_history(ctx: Context) -> str:
        """Summarize the last 30 days of active energy and steps.

        Includes today's values, progress toward a 500 kcal active-energy
        goal, 7-day averages and best days, and the 30-day ranges.
        """
        start_time = time.monotonic()
        history = await engine.activity_history()
        _audit("activity_history", start_time, metadata={"status": history.get("status")})
        return json.dumps(history, indent=2)
