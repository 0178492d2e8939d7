"""Core edge routing: the main route_edges() dispatcher.

Every edge leaves its source tile on the underline of the row that holds
the reference and runs horizontally into a column gutter. Edges whose
target sits next to the same gutter take a 4-point route (out, down or
up the gutter, into the target's corner). Longer edges walk gutter by
gutter toward the target, crossing each intermediate column on a
horizontal track placed in that column's free space. Bundles of edges
sharing an attribute and a target share one lane in every gutter.
"""

from __future__ import annotations

import logging

from entity_metro.layout.constants import UNDERLINE_INSET, UNDERLINE_MIN_LENGTH
from entity_metro.layout.engine import (
    GraphLayout,
    Point,
    Rect,
    key_divider_x,
    row_anchor,
    row_line_y,
)
from entity_metro.layout.routing.common import (
    EdgeDraft,
    RoutedEdge,
    closest_corner_on_side,
    count_turns,
    manhattan_length,
    merge_points,
)
from entity_metro.layout.routing.offsets import attribute_hash, bundle_offsets, palette_index
from entity_metro.layout.routing.tracks import choose_track_y_monotonic
from entity_metro.parser.model import Edge, EntityGraph

logger = logging.getLogger(__name__)

DEFAULT_PALETTE_SIZE = 7


def row_underline_segment(
    layout: GraphLayout,
    tile: Rect,
    row: int,
    go_left: bool,
) -> tuple[Point, Point] | None:
    """Underline under the source row, from the tile side the edge leaves on.

    Leaving left it spans the attribute-name column; leaving right it spans
    the value column. None when the tile is too small to hold one.
    """
    inner = tile.shrink(layout.metrics.tile_padding)
    if not inner.is_positive:
        return None

    y = row_line_y(layout, tile, row)
    divider = key_divider_x(layout, tile)
    if go_left:
        start_x = tile.left
        end_x = divider - UNDERLINE_INSET
        if end_x < start_x + UNDERLINE_MIN_LENGTH:
            end_x = min(start_x + UNDERLINE_MIN_LENGTH, inner.right)
    else:
        end_x = tile.right
        start_x = divider + UNDERLINE_INSET
        if start_x > end_x - UNDERLINE_MIN_LENGTH:
            start_x = max(end_x - UNDERLINE_MIN_LENGTH, inner.left)

    if end_x - start_x <= 0.5:
        return None
    return (start_x, y), (end_x, y)


def _exits_left(edge: Edge, from_col: int, to_col: int, last_col: int) -> bool:
    if from_col != to_col:
        return to_col < from_col
    if last_col > 0 and from_col == 0:
        return True
    if last_col > 0 and from_col == last_col:
        return False
    # Interior (or only) column: spread edges over both gutters by attribute.
    return attribute_hash(edge.attr) & 1 == 0


def _draft(layout: GraphLayout, edge: Edge) -> EdgeDraft | None:
    source_rect = layout.tile_rects[edge.source]
    target_rect = layout.tile_rects[edge.target]
    if not source_rect.is_positive or not target_rect.is_positive:
        return None

    from_col = layout.node_column[edge.source]
    to_col = layout.node_column[edge.target]
    half_gap = layout.column_gap * 0.5
    go_left = _exits_left(edge, from_col, to_col, layout.column_count - 1)
    start = row_anchor(layout, source_rect, edge.row, go_left)
    end_on_left = go_left if from_col == to_col else not go_left
    end = closest_corner_on_side(target_rect, start, end_on_left)

    return EdgeDraft(
        edge=edge,
        source_rect=source_rect,
        go_left=go_left,
        start=start,
        end=end,
        min_col=min(from_col, to_col),
        max_col=max(from_col, to_col),
        start_boundary=from_col - 1 if go_left else from_col,
        end_boundary=to_col - 1 if end_on_left else to_col,
        start_gutter_x=source_rect.left - half_gap if go_left else source_rect.right + half_gap,
        end_gutter_x=target_rect.left - half_gap if end_on_left else target_rect.right + half_gap,
    )


def _walk_gutters(
    layout: GraphLayout,
    draft: EdgeDraft,
    start_x: float,
    offsets: dict,
) -> tuple[list[Point], bool]:
    """Route across intermediate columns, one gutter boundary at a time."""
    key = draft.bundle_key
    step = 1 if draft.end_boundary > draft.start_boundary else -1
    step_x = draft.source_rect.width + layout.column_gap
    end_y = draft.end[1]

    points: list[Point] = [draft.start, (start_x, draft.start[1])]
    used_fallback = False
    boundary = draft.start_boundary
    current_x, current_y = start_x, draft.start[1]
    while boundary != draft.end_boundary:
        next_boundary = boundary + step
        column = next_boundary if step > 0 else boundary
        if 0 <= column < len(layout.column_free):
            track_y, fallback = choose_track_y_monotonic(
                layout.column_free[column], current_y, end_y
            )
        else:
            track_y, fallback = current_y, True
        used_fallback |= fallback

        next_center = draft.start_gutter_x + (next_boundary - draft.start_boundary) * step_x
        next_x = next_center + offsets.get((next_boundary, key), 0.0)
        # Lanes never walk back against the direction of travel.
        if (step > 0 and next_x < current_x) or (step < 0 and next_x > current_x):
            next_x = current_x

        points.append((current_x, track_y))
        points.append((next_x, track_y))
        boundary = next_boundary
        current_x, current_y = next_x, track_y

    points.append((current_x, end_y))
    points.append(draft.end)
    return points, used_fallback


def route_edges(
    layout: GraphLayout,
    graph: EntityGraph,
    palette_size: int = DEFAULT_PALETTE_SIZE,
) -> list[RoutedEdge]:
    """Route all edges of ``graph`` over ``layout``, in edge order."""
    drafts = [d for d in (_draft(layout, e) for e in graph.edges) if d is not None]
    offsets = bundle_offsets(drafts, layout.column_gap)

    routed: list[RoutedEdge] = []
    for draft in drafts:
        key = draft.bundle_key
        start_x = draft.start_gutter_x + offsets.get((draft.start_boundary, key), 0.0)

        if draft.start_boundary == draft.end_boundary:
            points = [
                draft.start,
                (start_x, draft.start[1]),
                (start_x, draft.end[1]),
                draft.end,
            ]
            used_fallback = False
        else:
            lo, hi = sorted((draft.start_gutter_x, draft.end_gutter_x))
            start_x = min(max(start_x, lo), hi)
            points, used_fallback = _walk_gutters(layout, draft, start_x, offsets)
        points = merge_points(points)

        routed.append(
            RoutedEdge(
                points=points,
                length=manhattan_length(points),
                turns=count_turns(points),
                span_cols=draft.span_cols,
                go_left=draft.go_left,
                used_fallback_track=used_fallback,
                attr=draft.edge.attr,
                source=draft.edge.source,
                target=draft.edge.target,
                bundle_key=key,
                start_underline=row_underline_segment(
                    layout, draft.source_rect, draft.edge.row, draft.go_left
                ),
                color_index=palette_index(draft.edge.attr, palette_size),
            )
        )

    fallbacks = sum(r.used_fallback_track for r in routed)
    if fallbacks:
        logger.debug("%d of %d edge(s) used a fallback track", fallbacks, len(routed))
    return routed
