"""Tests for the piecewise-linear evaluator."""

from __future__ import annotations

import pytest

from wellplate.domains.stress.domain_logic.piecewise import (
    PiecewiseLinear,
    Segment,
    clamp,
    lerp,
)


class TestHelpers:
    def test_clamp(self):
        assert clamp(-0.5) == 0.0
        assert clamp(0.4) == 0.4
        assert clamp(3.0) == 1.0
        assert clamp(30.0, 0.0, 25.0) == 25.0

    def test_lerp_clamps_t(self):
        assert lerp(5, 0, 0.5) == 2.5
        assert lerp(5, 0, -1.0) == 5
        assert lerp(5, 0, 2.0) == 0


class TestPiecewiseLinear:
    @pytest.fixture
    def curve(self):
        return PiecewiseLinear(
            [Segment(1, 2, 2, 6), Segment(2, 4, 6, 14)],
            below=2,
            above=20,
        )

    def test_below_first_segment(self, curve):
        assert curve(0.0) == 2
        assert curve(0.99) == 2

    def test_interpolates_within_segment(self, curve):
        assert curve(1.5) == pytest.approx(4.0)
        assert curve(3.0) == pytest.approx(10.0)

    def test_segment_start_is_inclusive(self, curve):
        assert curve(1.0) == 2
        assert curve(2.0) == 6

    def test_past_last_segment(self, curve):
        assert curve(4.0) == 20
        assert curve(100.0) == 20

    def test_from_breakpoints(self):
        curve = PiecewiseLinear.from_breakpoints([(0, 0), (10, 10), (20, 0)], below=0, above=0)
        assert len(curve.segments) == 2
        assert curve(5) == pytest.approx(5.0)
        assert curve(15) == pytest.approx(5.0)

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            PiecewiseLinear([], below=0, above=0)

    def test_rejects_gap(self):
        with pytest.raises(ValueError, match="contiguous"):
            PiecewiseLinear([Segment(0, 1, 0, 1), Segment(2, 3, 1, 2)], below=0, above=0)

    def test_rejects_zero_width(self):
        with pytest.raises(ValueError):
            PiecewiseLinear([Segment(1, 1, 0, 1)], below=0, above=0)
