"""Tests for the rounded-corner display helpers.

These tests directly verify the invariants that are easy to accidentally
break when modifying the corner code:

1. Every arc point lies on the circle tangent to both adjacent segments.
2. The radius never exceeds half of either adjacent segment.
3. Straight runs and degenerate segments pass through unchanged.
"""

from __future__ import annotations

import math

import pytest

from entity_metro.layout.routing.corners import corner_radius_for, round_polyline


class TestCornerRadius:
    def test_scales_with_row_height(self):
        assert corner_radius_for(18.0) == pytest.approx(4.5)

    def test_clamped(self):
        assert corner_radius_for(4.0) == 3.0
        assert corner_radius_for(100.0) == 8.0


class TestRoundPolyline:
    def test_short_polylines_unchanged(self):
        assert round_polyline([(0.0, 0.0), (10.0, 0.0)], 4.0) == [(0.0, 0.0), (10.0, 0.0)]
        assert round_polyline([], 4.0) == []

    def test_zero_radius_unchanged(self):
        pts = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]
        assert round_polyline(pts, 0.0) == pts

    def test_right_angle(self):
        pts = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]
        out = round_polyline(pts, 4.0, segments=4)
        assert len(out) == 7
        assert out[0] == (0.0, 0.0)
        assert out[1] == pytest.approx((6.0, 0.0))
        assert out[-2] == pytest.approx((10.0, 4.0))
        assert out[-1] == (10.0, 10.0)
        for x, y in out[1:-1]:
            assert math.hypot(x - 6.0, y - 4.0) == pytest.approx(4.0)

    def test_left_turn(self):
        pts = [(0.0, 10.0), (10.0, 10.0), (10.0, 0.0)]
        out = round_polyline(pts, 4.0, segments=4)
        assert out[1] == pytest.approx((6.0, 10.0))
        assert out[-2] == pytest.approx((10.0, 6.0))
        for x, y in out[1:-1]:
            assert math.hypot(x - 6.0, y - 6.0) == pytest.approx(4.0)

    def test_radius_limited_by_short_segment(self):
        pts = [(0.0, 0.0), (2.0, 0.0), (2.0, 10.0)]
        out = round_polyline(pts, 4.0, segments=2)
        assert out[1] == pytest.approx((1.0, 0.0))
        assert out[-2] == pytest.approx((2.0, 1.0))

    def test_two_corners_keep_both_arcs(self):
        pts = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]
        out = round_polyline(pts, 2.0, segments=4)
        assert len(out) == 12
        assert (10.0, 2.0) == pytest.approx(out[5])
        assert (10.0, 8.0) == pytest.approx(out[6])
        assert out[-2] == pytest.approx((8.0, 10.0))

    def test_collinear_vertex_kept(self):
        pts = [(0.0, 0.0), (5.0, 0.0), (10.0, 0.0)]
        assert round_polyline(pts, 4.0) == pts

    def test_degenerate_segment_kept(self):
        pts = [(0.0, 0.0), (5.0, 0.0), (5.0, 0.0), (5.0, 5.0)]
        out = round_polyline(pts, 2.0)
        assert out[0] == (0.0, 0.0)
        assert out[-1] == (5.0, 5.0)
        assert (5.0, 0.0) in out

    def test_endpoints_preserved(self):
        pts = [(3.0, 4.0), (30.0, 4.0), (30.0, 40.0), (60.0, 40.0)]
        out = round_polyline(pts, 8.0)
        assert out[0] == pts[0]
        assert out[-1] == pts[-1]
