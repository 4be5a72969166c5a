"""Data models for the persistence layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FoodLogEntry:
    """A single logged food item.

    Nutrition is snapshotted at log time so earlier days never change when
    the food cache is updated. ``day`` is the local calendar day the entry
    belongs to, rendered ``YYYY-MM-DD``.
    """

    id: str
    day: str
    food_name: str
    calories: int = 0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    serving_size: str | None = None
    confidence: float | None = None
    created_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "day": self.day,
            "food_name": self.food_name,
            "serving_size": self.serving_size,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "fiber": self.fiber,
            "confidence": self.confidence,
            "created_at": self.created_at,
        }
