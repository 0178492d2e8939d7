"""SVG generation for entity diagrams using drawsvg."""

from __future__ import annotations

import drawsvg as draw

from entity_metro.layout.constants import CHAR_WIDTH
from entity_metro.layout.engine import GraphLayout, Rect, key_divider_x, row_top
from entity_metro.layout.routing import RoutedEdge, corner_radius_for, round_polyline
from entity_metro.parser.model import EntityGraph, Node
from entity_metro.render.style import Theme

TITLE_BAND = 40.0
"""Height reserved above the canvas for the diagram title."""


def render_svg(
    graph: EntityGraph,
    layout: GraphLayout,
    routes: list[RoutedEdge],
    theme: Theme,
    show_title: bool = True,
) -> str:
    """Render a laid-out entity graph to an SVG string."""
    band = TITLE_BAND if show_title and graph.title else 0.0
    width = max(layout.canvas_width, 1.0)
    height = max(layout.canvas_height + band, 1.0)

    d = draw.Drawing(width, height)
    d.append(draw.Rectangle(0, 0, width, height, fill=theme.background_color))

    if band:
        d.append(draw.Text(
            graph.title,
            theme.title_font_size,
            layout.metrics.outer_pad, band * 0.5,
            fill=theme.title_color,
            font_family=theme.font_family,
            font_weight="bold",
            dominant_baseline="central",
        ))

    canvas = draw.Group(transform=f"translate(0,{band})") if band else draw.Group()
    radius = corner_radius_for(layout.metrics.row_height)
    _render_edges(canvas, routes, theme, radius)
    for node_idx, node in enumerate(graph.nodes):
        rect = layout.tile_rects[node_idx]
        if rect.is_positive:
            _render_tile(canvas, layout, rect, node, theme)
    _render_edge_ends(canvas, routes, theme)
    d.append(canvas)
    return d.as_svg()


def _render_edges(
    d: draw.Group,
    routes: list[RoutedEdge],
    theme: Theme,
    radius: float,
) -> None:
    """Render routed edges as polylines with rounded corners."""
    for route in routes:
        pts = round_polyline(route.points, radius)
        if len(pts) < 2:
            continue
        path = draw.Path(
            stroke=theme.line_color(route.color_index),
            stroke_width=theme.line_width,
            fill="none",
            stroke_linecap="round",
            stroke_linejoin="round",
        )
        path.M(*pts[0])
        for p in pts[1:]:
            path.L(*p)
        d.append(path)


def _render_edge_ends(d: draw.Group, routes: list[RoutedEdge], theme: Theme) -> None:
    """Start underlines on the source rows and dots at the target corners."""
    for route in routes:
        color = theme.line_color(route.color_index)
        if route.start_underline is not None:
            (x1, y1), (x2, y2) = route.start_underline
            d.append(draw.Line(
                x1, y1, x2, y2,
                stroke=color,
                stroke_width=theme.line_width,
                stroke_linecap="round",
            ))
        if route.points:
            x, y = route.points[-1]
            d.append(draw.Circle(x, y, theme.line_width * theme.end_dot_scale, fill=color))


def _fit_text(text: str, width: float) -> str:
    max_chars = max(int(width // CHAR_WIDTH), 1)
    if len(text) <= max_chars:
        return text
    return text[: max(max_chars - 1, 0)] + "…"


def _render_tile(
    d: draw.Group,
    layout: GraphLayout,
    rect: Rect,
    node: Node,
    theme: Theme,
) -> None:
    """Render one entity tile: header, attribute/value grid and hatched rows."""
    m = layout.metrics
    d.append(draw.Rectangle(
        rect.x, rect.y, rect.width, rect.height,
        fill=theme.tile_fill,
        stroke=theme.tile_stroke,
        stroke_width=1.0,
    ))
    inner = rect.shrink(m.tile_padding)
    if not inner.is_positive:
        return

    d.append(draw.Text(
        _fit_text(node.title, inner.width),
        theme.tile_title_font_size,
        inner.left, inner.top,
        fill=theme.text_color,
        font_family=theme.font_family,
        font_weight="bold",
        dominant_baseline="hanging",
    ))

    first_row = inner.top + m.header_height
    divider = key_divider_x(layout, rect)
    if inner.bottom > first_row:
        d.append(draw.Line(
            divider, first_row, divider, inner.bottom,
            stroke=theme.grid_stroke, stroke_width=1.0,
        ))

    value_x = min(divider + 8.0, inner.right)
    for i, row in enumerate(node.rows):
        top = row_top(layout, rect, i)
        bottom = min(top + m.row_height, inner.bottom)
        if i > 0:
            d.append(draw.Line(
                inner.left, top, inner.right, top,
                stroke=theme.grid_stroke, stroke_width=1.0,
            ))
        d.append(draw.Text(
            _fit_text(row.attr, divider - inner.left - 4.0),
            theme.row_font_size,
            inner.left, top + 1.0,
            fill=theme.text_color,
            font_family=theme.font_family,
            dominant_baseline="hanging",
        ))
        if row.hatched:
            value_rect = Rect(value_x, top, inner.right - value_x, bottom - top)
            _render_hatching(d, value_rect.shrink(1.0), theme)
        else:
            d.append(draw.Text(
                _fit_text(row.value, inner.right - value_x),
                theme.row_font_size,
                value_x, top + 1.0,
                fill=theme.text_color,
                font_family=theme.font_family,
                dominant_baseline="hanging",
            ))


def _render_hatching(d: draw.Group, rect: Rect, theme: Theme) -> None:
    """Diagonal hatch lines clipped to ``rect`` (opaque values)."""
    if not rect.is_positive:
        return
    h = rect.height
    x = rect.left - h
    while x < rect.right + h:
        x1 = max(x, rect.left)
        x2 = min(x + h, rect.right)
        if x2 > x1:
            d.append(draw.Line(
                x1, rect.top + (x1 - x), x2, rect.top + (x2 - x),
                stroke=theme.hatch_color, stroke_width=1.0,
            ))
        x += theme.hatch_spacing
