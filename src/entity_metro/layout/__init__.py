"""Column layout and edge routing for entity graphs."""

from entity_metro.layout.cache import LayoutCache
from entity_metro.layout.engine import (
    GraphLayout,
    Rect,
    TileMetrics,
    compute_layout,
    free_intervals,
    row_anchor,
    row_line_y,
)

__all__ = [
    "GraphLayout",
    "LayoutCache",
    "Rect",
    "TileMetrics",
    "compute_layout",
    "free_intervals",
    "row_anchor",
    "row_line_y",
]
