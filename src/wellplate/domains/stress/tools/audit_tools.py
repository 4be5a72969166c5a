"""MCP tools for viewing the audit trail.

The audit trail records which tools ran, when, and how long they took, with
hashed input references only. No food names, sleep data or usage hours are
stored in it.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from wellplate.core.audit.logger import AuditLogger

logger = logging.getLogger(__name__)


def register_audit_tools(
    mcp: FastMCP,
    audit_logger: AuditLogger,
) -> None:
    """Register audit trail tools on the MCP server."""

    @mcp.tool
    async def audit_summary(
        ctx: Context,
        days: int = 30,
    ) -> str:
        """View recent tool usage and data change events.

        Args:
            days: Number of days to look back (default: 30).
        """
        since = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()

        return json.dumps({
            "status": "ok",
            "period_days": days,
            **audit_logger.summarize(since=since),
        }, indent=2)
