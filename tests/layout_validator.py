"""Layout validator: programmatic checks for layout and routing defects.

Runs a suite of checks against a computed GraphLayout and its routed
edges and returns a list of Violation objects describing any problems
found.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from entity_metro.layout.engine import GraphLayout
from entity_metro.layout.routing import RoutedEdge
from entity_metro.layout.routing.tracks import in_corridors
from entity_metro.parser.model import EntityGraph


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Violation:
    check: str
    severity: Severity
    message: str
    context: dict = field(default_factory=dict)


def validate_layout(
    graph: EntityGraph,
    layout: GraphLayout,
    routes: list[RoutedEdge] | None = None,
) -> list[Violation]:
    """Run all layout checks and return violations."""
    violations: list[Violation] = []
    violations.extend(check_order_bijection(graph, layout))
    violations.extend(check_tile_overlap(layout))
    violations.extend(check_tile_columns(layout))
    violations.extend(check_canvas_bounds(layout))
    if routes is not None:
        violations.extend(check_orthogonal_routes(routes))
        violations.extend(check_track_corridors(layout, routes))
    return violations


def check_order_bijection(graph: EntityGraph, layout: GraphLayout) -> list[Violation]:
    """The layout order must visit every node exactly once."""
    if sorted(layout.order) == list(range(graph.node_count)):
        return []
    return [
        Violation(
            check="order_bijection",
            severity=Severity.ERROR,
            message=f"Layout order {list(layout.order)} is not a permutation "
            f"of 0..{graph.node_count - 1}",
        )
    ]


def check_tile_overlap(layout: GraphLayout) -> list[Violation]:
    """No two tiles may overlap (touching edges are allowed)."""
    violations: list[Violation] = []
    rects = layout.tile_rects
    for a in range(len(rects)):
        for b in range(a + 1, len(rects)):
            if rects[a].overlaps(rects[b]):
                ra, rb = rects[a], rects[b]
                violations.append(
                    Violation(
                        check="tile_overlap",
                        severity=Severity.ERROR,
                        message=(
                            f"Tiles {a} and {b} overlap: "
                            f"A=({ra.left:.0f},{ra.top:.0f},{ra.right:.0f},{ra.bottom:.0f}) "
                            f"B=({rb.left:.0f},{rb.top:.0f},{rb.right:.0f},{rb.bottom:.0f})"
                        ),
                        context={"tile_a": a, "tile_b": b},
                    )
                )
    return violations


def check_tile_columns(layout: GraphLayout) -> list[Violation]:
    """Every tile sits at its column's x and has the column width."""
    violations: list[Violation] = []
    for node, rect in enumerate(layout.tile_rects):
        col = layout.node_column[node]
        expected_x = layout.column_x(col)
        if abs(rect.x - expected_x) > 1e-6 or abs(rect.width - layout.tile_width) > 1e-6:
            violations.append(
                Violation(
                    check="tile_columns",
                    severity=Severity.ERROR,
                    message=(
                        f"Tile {node} at x={rect.x:.1f} w={rect.width:.1f} does not match "
                        f"column {col} (x={expected_x:.1f} w={layout.tile_width:.1f})"
                    ),
                    context={"node": node, "column": col},
                )
            )
    return violations


def check_canvas_bounds(layout: GraphLayout) -> list[Violation]:
    """Tiles must lie inside the canvas."""
    violations: list[Violation] = []
    for node, rect in enumerate(layout.tile_rects):
        if (
            rect.left < 0
            or rect.top < 0
            or rect.right > layout.canvas_width + 1e-6
            or rect.bottom > layout.canvas_height + 1e-6
        ):
            violations.append(
                Violation(
                    check="canvas_bounds",
                    severity=Severity.ERROR,
                    message=f"Tile {node} extends outside the "
                    f"{layout.canvas_width:.0f}x{layout.canvas_height:.0f} canvas",
                    context={"node": node},
                )
            )
    return violations


def check_orthogonal_routes(routes: list[RoutedEdge]) -> list[Violation]:
    """Consecutive waypoints must differ in x or y only."""
    violations: list[Violation] = []
    for idx, route in enumerate(routes):
        for a, b in zip(route.points, route.points[1:]):
            if abs(a[0] - b[0]) > 1e-6 and abs(a[1] - b[1]) > 1e-6:
                violations.append(
                    Violation(
                        check="orthogonal_routes",
                        severity=Severity.ERROR,
                        message=f"Edge {idx} ({route.source}->{route.target}) has a "
                        f"diagonal segment {a} -> {b}",
                        context={"edge": idx},
                    )
                )
                break
    return violations


def check_track_corridors(
    layout: GraphLayout,
    routes: list[RoutedEdge],
) -> list[Violation]:
    """Horizontal runs crossing a column must stay in its free intervals.

    A run outside every corridor is an error unless the edge is flagged
    as using a fallback track, in which case it is only a warning.
    """
    violations: list[Violation] = []
    for idx, route in enumerate(routes):
        for a, b in zip(route.points, route.points[1:]):
            if abs(a[1] - b[1]) > 1e-6:
                continue
            lo, hi = sorted((a[0], b[0]))
            for col in range(layout.column_count):
                left = layout.column_x(col)
                right = left + layout.tile_width
                # Only runs that cross the whole column body are tracks.
                if lo > left + 1e-6 or hi < right - 1e-6:
                    continue
                if in_corridors(layout.column_free[col], a[1]):
                    continue
                violations.append(
                    Violation(
                        check="track_corridors",
                        severity=(
                            Severity.WARNING if route.used_fallback_track else Severity.ERROR
                        ),
                        message=(
                            f"Edge {idx} ({route.source}->{route.target}) crosses "
                            f"column {col} at y={a[1]:.1f} outside its free space"
                        ),
                        context={"edge": idx, "column": col},
                    )
                )
    return violations
