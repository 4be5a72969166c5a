"""MCP tools for the food log that feeds the diet factor.

Nutrition values are supplied by the caller and snapshotted at log time.
Food names and serving sizes are encrypted at rest.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import date
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from wellplate.core.storage.encryption import EncryptionError
from wellplate.core.storage.food_log import RepositoryError
from wellplate.core.storage.models import FoodLogEntry
from wellplate.domains.stress.domain_logic.calendar_days import NowFn, day_key
from wellplate.domains.stress.domain_logic.nutrition_aggregator import aggregate_daily_nutrition

if TYPE_CHECKING:
    from wellplate.core.audit.logger import AuditLogger
    from wellplate.core.storage.food_log import FoodLogRepository

logger = logging.getLogger(__name__)


def register_food_log_tools(
    mcp: FastMCP,
    repository: FoodLogRepository,
    now_fn: NowFn,
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register food log tools on the MCP server."""

    @mcp.tool
    async def log_food(
        ctx: Context,
        food_name: str,
        calories: int = 0,
        protein: float = 0.0,
        carbs: float = 0.0,
        fat: float = 0.0,
        fiber: float = 0.0,
        serving_size: str = "",
        day: str = "",
    ) -> str:
        """Add a food to your log.

        Args:
            food_name: What you ate (e.g., 'Greek yogurt').
            calories: Calories for the serving.
            protein: Protein in grams.
            carbs: Carbohydrates in grams.
            fat: Fat in grams.
            fiber: Fiber in grams.
            serving_size: Optional serving description (e.g., '1 cup').
            day: Local calendar day (YYYY-MM-DD). Defaults to today.
        """
        start_time = time.monotonic()
        entry = FoodLogEntry(
            id="",
            day=day or day_key(now_fn()),
            food_name=food_name,
            calories=calories,
            protein=protein,
            carbs=carbs,
            fat=fat,
            fiber=fiber,
            serving_size=serving_size or None,
        )
        try:
            entry_id = repository.add_entry(entry)
        except RepositoryError as exc:
            if audit_logger is not None:
                audit_logger.log_tool_call(
                    tool_name="log_food",
                    duration_ms=(time.monotonic() - start_time) * 1000,
                    status="failure",
                    error_type=type(exc).__name__,
                )
            return json.dumps({"status": "error", "message": str(exc)})

        if audit_logger is not None:
            audit_logger.log_data_write(tool_name="log_food", record_type="food_log_entry")
            audit_logger.log_tool_call(
                tool_name="log_food",
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
        return json.dumps({"status": "saved", "entry_id": entry_id, "day": entry.day})

    @mcp.tool
    async def list_food_logs(ctx: Context, day: str = "") -> str:
        """List the foods logged for one day with the day's macro totals.

        Args:
            day: Local calendar day (YYYY-MM-DD). Defaults to today.
        """
        start_time = time.monotonic()
        day = day or day_key(now_fn())
        try:
            entries = repository.query_entries_for_day(day)
        except RepositoryError as exc:
            return json.dumps({"status": "error", "message": str(exc)})
        except EncryptionError:
            logger.warning("Food log entries for %s could not be decrypted", day)
            if audit_logger is not None:
                audit_logger.log_tool_call(
                    tool_name="list_food_logs",
                    duration_ms=(time.monotonic() - start_time) * 1000,
                    status="failure",
                    error_type="EncryptionError",
                )
            return json.dumps({
                "status": "error",
                "message": "Stored entries cannot be decrypted with the configured key.",
            })

        totals = aggregate_daily_nutrition(entries, date.fromisoformat(day))

        if audit_logger is not None:
            audit_logger.log_tool_call(
                tool_name="list_food_logs",
                duration_ms=(time.monotonic() - start_time) * 1000,
                metadata={"entry_count": totals.entry_count},
            )
        return json.dumps({
            "status": "ok",
            "day": day,
            "entries": [e.to_dict() for e in entries],
            "totals": {
                "calories": totals.calories,
                "protein": round(totals.protein, 1),
                "carbs": round(totals.carbs, 1),
                "fat": round(totals.fat, 1),
                "fiber": round(totals.fiber, 1),
                "entry_count": totals.entry_count,
            },
            "logged_days": repository.list_days(),
        }, indent=2)

    @mcp.tool
    async def delete_food_log(ctx: Context, entry_id: str) -> str:
        """Delete one food log entry by ID.

        Args:
            entry_id: The ID returned by log_food or list_food_logs.
        """
        deleted = repository.delete_entry(entry_id)
        if deleted and audit_logger is not None:
            audit_logger.log_data_delete(
                tool_name="delete_food_log", record_type="food_log_entry", count=1
            )
        return json.dumps({"status": "deleted" if deleted else "not_found", "entry_id": entry_id})
