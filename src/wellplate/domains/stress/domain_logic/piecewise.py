"""Parameterized piecewise-linear evaluator shared by the factor scorers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    """Clamp a value to [lo, hi]."""
    return max(lo, min(hi, value))


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation from ``a`` to ``b`` with ``t`` clamped to [0, 1]."""
    return a + (b - a) * clamp(t)


@dataclass(frozen=True)
class Segment:
    """Half-open interval ``[start, end)`` interpolating ``from_value`` to ``to_value``."""

    start: float
    end: float
    from_value: float
    to_value: float

    def evaluate(self, x: float) -> float:
        return lerp(self.from_value, self.to_value, (x - self.start) / (self.end - self.start))


class PiecewiseLinear:
    """Piecewise-linear function over contiguous half-open segments.

    Inputs below the first segment map to ``below``; inputs at or past the
    last segment's end map to ``above``. Values need not be continuous
    across segment boundaries.

    Usage::

        usage_curve = PiecewiseLinear(
            [Segment(1, 2, 2, 6), Segment(2, 4, 6, 14)],
            below=2,
            above=14,
        )
        usage_curve(3.0)  # 10.0
    """

    def __init__(self, segments: Sequence[Segment], *, below: float, above: float) -> None:
        if not segments:
            raise ValueError("At least one segment is required")
        for seg in segments:
            if seg.end <= seg.start:
                raise ValueError(f"Segment end must exceed start: {seg}")
        for prev, nxt in zip(segments, segments[1:]):
            if prev.end != nxt.start:
                raise ValueError(
                    f"Segments must be contiguous: {prev.end} != {nxt.start}"
                )
        self._segments = tuple(segments)
        self._below = below
        self._above = above

    @classmethod
    def from_breakpoints(
        cls,
        breakpoints: Sequence[tuple[float, float]],
        *,
        below: float,
        above: float,
    ) -> PiecewiseLinear:
        """Build from ordered ``(x, value)`` pairs joined by straight lines."""
        if len(breakpoints) < 2:
            raise ValueError("At least two breakpoints are required")
        segments = [
            Segment(x0, x1, v0, v1)
            for (x0, v0), (x1, v1) in zip(breakpoints, breakpoints[1:])
        ]
        return cls(segments, below=below, above=above)

    @property
    def segments(self) -> tuple[Segment, ...]:
        return self._segments

    def __call__(self, x: float) -> float:
        if x < self._segments[0].start:
            return self._below
        for seg in self._segments:
            if x < seg.end:
                return seg.evaluate(x)
        return self._above
