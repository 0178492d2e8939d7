"""One-call pipeline: order -> layout -> routes -> statistics."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from entity_metro.layout.cache import LayoutCache
from entity_metro.layout.constants import DEFAULT_CANVAS_WIDTH
from entity_metro.layout.engine import GraphLayout, TileMetrics
from entity_metro.layout.routing import RoutedEdge
from entity_metro.parser.model import EntityGraph
from entity_metro.stats import InspectorStats, compute_graph_stats


@dataclass(frozen=True)
class InspectorResult:
    layout: GraphLayout
    routes: list[RoutedEdge]
    stats: InspectorStats


def compute_inspector(
    graph: EntityGraph,
    order: Sequence[int] | None = None,
    width: float = DEFAULT_CANVAS_WIDTH,
    columns: int = 0,
    cache: LayoutCache | None = None,
    metrics: TileMetrics | None = None,
) -> InspectorResult:
    """Lay out and route ``graph`` in ``order`` and summarise the result.

    With a ``cache`` repeated calls for the same graph, order, width and
    column count reuse the stored layout and routes.
    """
    cache = cache if cache is not None else LayoutCache(maxsize=1)
    layout, routes = cache.get(graph, order, width, columns, metrics)
    return InspectorResult(layout, routes, compute_graph_stats(graph, layout, routes))
