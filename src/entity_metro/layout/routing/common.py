"""Shared types and helper functions for edge routing."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from entity_metro.layout.constants import MERGE_DISTANCE_SQ
from entity_metro.layout.engine import Point, Rect
from entity_metro.parser.model import Edge

BundleKey = tuple[str, int]
"""Edges sharing an attribute tag and a target travel as one bundle lane."""


@dataclass
class RoutedEdge:
    """An edge routed as orthogonal ``(x, y)`` waypoints."""

    points: list[Point]
    length: float
    turns: int
    span_cols: int
    go_left: bool
    used_fallback_track: bool
    attr: str
    source: int
    target: int
    bundle_key: BundleKey
    start_underline: tuple[Point, Point] | None = None
    color_index: int = 0


@dataclass
class EdgeDraft:
    """Side and gutter choice of an edge before bundle lanes are assigned."""

    edge: Edge
    source_rect: Rect
    go_left: bool
    start: Point
    end: Point
    min_col: int
    max_col: int
    start_boundary: int
    end_boundary: int
    start_gutter_x: float
    end_gutter_x: float

    @property
    def bundle_key(self) -> BundleKey:
        return (self.edge.attr, self.edge.target)

    @property
    def span_cols(self) -> int:
        return self.max_col - self.min_col


def merge_points(points: Sequence[Point]) -> list[Point]:
    """Drop waypoints that coincide with their predecessor."""
    merged: list[Point] = []
    for p in points:
        if merged:
            last = merged[-1]
            if (p[0] - last[0]) ** 2 + (p[1] - last[1]) ** 2 < MERGE_DISTANCE_SQ:
                continue
        merged.append(p)
    return merged


def manhattan_length(points: Sequence[Point]) -> float:
    return sum(
        abs(a[0] - b[0]) + abs(a[1] - b[1]) for a, b in zip(points, points[1:])
    )


def count_turns(points: Sequence[Point]) -> int:
    """Number of horizontal/vertical direction changes along ``points``."""
    turns = 0
    last_horizontal: bool | None = None
    for a, b in zip(points, points[1:]):
        horizontal = abs(a[1] - b[1]) <= abs(a[0] - b[0])
        if last_horizontal is not None and horizontal != last_horizontal:
            turns += 1
        last_horizontal = horizontal
    return turns


def closest_corner_on_side(target: Rect, origin: Point, left: bool) -> Point:
    """Top or bottom corner of ``target`` on the given side nearest ``origin``."""
    x = target.left if left else target.right
    top = (x, target.top)
    bottom = (x, target.bottom)
    d_top = (origin[0] - top[0]) ** 2 + (origin[1] - top[1]) ** 2
    d_bottom = (origin[0] - bottom[0]) ** 2 + (origin[1] - bottom[1]) ** 2
    return top if d_top <= d_bottom else bottom
