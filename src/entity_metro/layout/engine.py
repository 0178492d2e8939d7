"""Column layout: masonry packing of entity tiles into equal-width columns.

Tiles are visited in the solver's order and each one drops into the
column whose bottom is currently highest on the page (smallest y), so
neighbours in the order end up close to each other. The free vertical
intervals left in every column are the corridors horizontal edge tracks
may use when crossing it.
"""

from __future__ import annotations

import heapq
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from entity_metro.layout.constants import (
    BOTTOM_PAD,
    COLUMN_GAP,
    DEFAULT_CANVAS_WIDTH,
    DESIRED_TILE_WIDTH,
    HEADER_HEIGHT,
    KEY_WIDTH_FRACTION,
    KEY_WIDTH_MAX,
    KEY_WIDTH_MIN,
    MAX_TILE_WIDTH,
    MIN_TILE_WIDTH,
    ROW_GAP,
    ROW_HEIGHT,
    SINGLE_COLUMN_MAX_WIDTH,
    SINGLE_COLUMN_MIN_WIDTH,
    TILE_PADDING,
    TOP_PAD,
    TRACK_CLEARANCE,
)
from entity_metro.ordering.problem import validate_order
from entity_metro.parser.model import EntityGraph, Node

logger = logging.getLogger(__name__)

Interval = tuple[float, float]
Point = tuple[float, float]


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in canvas coordinates (y grows downward)."""

    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width * 0.5

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def is_positive(self) -> bool:
        return self.width > 0 and self.height > 0

    def shrink(self, amount: float) -> Rect:
        return Rect(
            self.x + amount,
            self.y + amount,
            self.width - 2 * amount,
            self.height - 2 * amount,
        )

    def overlaps(self, other: Rect) -> bool:
        return (
            self.left < other.right
            and other.left < self.right
            and self.top < other.bottom
            and other.top < self.bottom
        )


@dataclass(frozen=True)
class TileMetrics:
    """Spacing and text metrics of the column layout."""

    column_gap: float = COLUMN_GAP
    min_tile_width: float = MIN_TILE_WIDTH
    desired_tile_width: float = DESIRED_TILE_WIDTH
    max_tile_width: float = MAX_TILE_WIDTH
    tile_padding: float = TILE_PADDING
    header_height: float = HEADER_HEIGHT
    row_height: float = ROW_HEIGHT
    row_gap: float = ROW_GAP
    top_pad: float = TOP_PAD
    bottom_pad: float = BOTTOM_PAD
    clearance: float = TRACK_CLEARANCE

    @property
    def outer_pad(self) -> float:
        return self.column_gap

    def tile_height(self, node: Node) -> float:
        rows = max(node.row_count, 1)
        return self.tile_padding * 2 + self.header_height + self.row_height * rows


@dataclass
class GraphLayout:
    """Tile rectangles and column corridors for one (graph, order, width)."""

    canvas_width: float
    canvas_height: float
    column_count: int
    tile_width: float
    metrics: TileMetrics = field(default_factory=TileMetrics)
    order: tuple[int, ...] = ()
    tile_rects: list[Rect] = field(default_factory=list)
    node_column: list[int] = field(default_factory=list)
    column_nodes: list[list[int]] = field(default_factory=list)
    column_free: list[list[Interval]] = field(default_factory=list)

    @property
    def column_gap(self) -> float:
        return self.metrics.column_gap

    @property
    def node_count(self) -> int:
        return len(self.tile_rects)

    def column_x(self, column: int) -> float:
        return self.metrics.outer_pad + column * (self.tile_width + self.metrics.column_gap)


def _column_count(node_count: int, usable_width: float, metrics: TileMetrics, forced: int) -> int:
    gap = metrics.column_gap
    if forced > 0:
        count = forced
    else:
        count = math.floor((usable_width + gap) / (metrics.desired_tile_width + gap))
    return min(max(count, 1), max(node_count, 1))


def _fit_tile_width(
    available_width: float,
    usable_width: float,
    column_count: int,
    metrics: TileMetrics,
    forced: bool,
) -> tuple[int, float]:
    """Return ``(columns, tile_width)``, dropping columns until tiles fit."""
    gap = metrics.column_gap
    while True:
        if column_count == 1:
            width = min(max(available_width, SINGLE_COLUMN_MIN_WIDTH), SINGLE_COLUMN_MAX_WIDTH)
            return 1, width
        raw = (usable_width - gap * (column_count - 1)) / column_count
        if raw >= metrics.min_tile_width:
            return column_count, min(raw, metrics.max_tile_width)
        if forced:
            return column_count, max(raw, 1.0)
        column_count -= 1


def free_intervals(
    tiles: Sequence[Rect],
    canvas_height: float,
    clearance: float = TRACK_CLEARANCE,
) -> list[Interval]:
    """Vertical intervals of a column not covered by any (widened) tile.

    ``tiles`` must be sorted top to bottom. The result is sorted and
    never empty.
    """
    intervals: list[Interval] = []
    cursor = 0.0
    for rect in tiles:
        top = max(rect.top - clearance, 0.0)
        if top > cursor:
            intervals.append((cursor, top))
        cursor = max(rect.bottom + clearance, cursor)
    if cursor < canvas_height:
        intervals.append((cursor, canvas_height))
    if not intervals:
        intervals.append((0.0, canvas_height))
    return intervals


def compute_layout(
    graph: EntityGraph,
    order: Sequence[int] | None = None,
    available_width: float = DEFAULT_CANVAS_WIDTH,
    columns: int = 0,
    metrics: TileMetrics | None = None,
) -> GraphLayout:
    """Pack the tiles of ``graph`` into columns, visiting nodes in ``order``.

    ``columns`` forces the column count when positive; the tile width is
    then allowed to drop below the minimum. ``order`` defaults to the
    declaration order and must be a permutation of the node indices.
    """
    metrics = metrics or TileMetrics()
    node_count = graph.node_count
    order = list(range(node_count)) if order is None else [int(n) for n in order]
    validate_order(order, node_count)

    gap = metrics.column_gap
    outer = metrics.outer_pad
    usable_width = max(available_width - outer * 2, metrics.min_tile_width)
    column_count = _column_count(node_count, usable_width, metrics, columns)
    column_count, tile_width = _fit_tile_width(
        available_width, usable_width, column_count, metrics, forced=columns > 0
    )

    tile_rects = [Rect(0.0, 0.0, 0.0, 0.0)] * node_count
    node_column = [-1] * node_count
    column_nodes: list[list[int]] = [[] for _ in range(column_count)]
    bottoms = [metrics.top_pad] * column_count
    # (bottom, column): shortest column first, ties go to the lowest index.
    heap = [(metrics.top_pad, c) for c in range(column_count)]

    for node in order:
        top, col = heapq.heappop(heap)
        height = metrics.tile_height(graph.nodes[node])
        x = outer + col * (tile_width + gap)
        tile_rects[node] = Rect(x, top, tile_width, height)
        node_column[node] = col
        column_nodes[col].append(node)
        bottoms[col] = top + height + metrics.row_gap
        heapq.heappush(heap, (bottoms[col], col))

    bottoms = [b - metrics.row_gap if b > metrics.top_pad else b for b in bottoms]
    content_height = max([metrics.top_pad, *bottoms])
    canvas_height = max(
        content_height + metrics.bottom_pad, metrics.top_pad + metrics.bottom_pad
    )
    canvas_width = outer * 2 + tile_width * column_count + gap * (column_count - 1)

    column_free = [
        free_intervals([tile_rects[n] for n in nodes], canvas_height, metrics.clearance)
        for nodes in column_nodes
    ]

    logger.debug(
        "layout: %d nodes in %d column(s) of width %.1f, canvas %.0fx%.0f",
        node_count,
        column_count,
        tile_width,
        canvas_width,
        canvas_height,
    )
    return GraphLayout(
        canvas_width=canvas_width,
        canvas_height=canvas_height,
        column_count=column_count,
        tile_width=tile_width,
        metrics=metrics,
        order=tuple(order),
        tile_rects=tile_rects,
        node_column=node_column,
        column_nodes=column_nodes,
        column_free=column_free,
    )


# ---------------------------------------------------------------------------
# Row geometry
# ---------------------------------------------------------------------------


def row_top(layout: GraphLayout, tile: Rect, row: int) -> float:
    m = layout.metrics
    return tile.top + m.tile_padding + m.header_height + row * m.row_height


def row_line_y(layout: GraphLayout, tile: Rect, row: int) -> float:
    """Y of the underline drawn under ``row``, where edges leave the tile."""
    top = row_top(layout, tile, row)
    return max(top + layout.metrics.row_height - 3.0, top + 2.0)


def row_anchor(layout: GraphLayout, tile: Rect, row: int, on_left: bool) -> Point:
    x = tile.left if on_left else tile.right
    return (x, row_line_y(layout, tile, row))


def key_divider_x(layout: GraphLayout, tile: Rect) -> float:
    """X of the divider between the attribute-name and value columns."""
    inner = tile.shrink(layout.metrics.tile_padding)
    key_width = min(max(inner.width * KEY_WIDTH_FRACTION, KEY_WIDTH_MIN), KEY_WIDTH_MAX)
    return min(inner.left + key_width, inner.right)
