"""Summary statistics of a laid-out and routed entity graph."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass

import networkx as nx

from entity_metro.layout.engine import GraphLayout
from entity_metro.layout.routing import RoutedEdge
from entity_metro.ordering.problem import order_cost
from entity_metro.parser.model import EntityGraph


@dataclass(frozen=True)
class InspectorStats:
    nodes: int = 0
    edges: int = 0
    connected_components: int = 0
    columns: int = 0
    canvas_width: float = 0.0
    canvas_height: float = 0.0
    tile_coverage: float = 0.0
    total_edge_len: float = 0.0
    avg_edge_len: float = 0.0
    max_edge_len: float = 0.0
    avg_turns: float = 0.0
    max_turns: int = 0
    avg_span_cols: float = 0.0
    max_span_cols: int = 0
    left_edges: int = 0
    fallback_tracks: int = 0
    linear_total: int = 0
    linear_avg: float = 0.0

    def as_dict(self) -> dict[str, float | int]:
        return asdict(self)


def to_networkx(graph: EntityGraph) -> nx.MultiGraph:
    """Undirected multigraph over node indices, one edge per reference."""
    g = nx.MultiGraph()
    g.add_nodes_from(range(graph.node_count))
    g.add_edges_from((e.source, e.target) for e in graph.edges)
    return g


def linear_cost(graph: EntityGraph, order: Sequence[int]) -> tuple[int, float]:
    """Total and mean edge span of ``order`` (the MinLA objective)."""
    total = order_cost(graph, order)
    avg = total / graph.edge_count if graph.edge_count else 0.0
    return total, avg


def compute_graph_stats(
    graph: EntityGraph,
    layout: GraphLayout,
    routes: Sequence[RoutedEdge],
) -> InspectorStats:
    components = (
        nx.number_connected_components(to_networkx(graph)) if graph.node_count else 0
    )
    tile_area = sum(r.area for r in layout.tile_rects if r.is_positive)
    canvas_area = layout.canvas_width * layout.canvas_height
    linear_total, linear_avg = linear_cost(graph, layout.order)

    count = len(routes)
    total_len = sum(r.length for r in routes)
    total_turns = sum(r.turns for r in routes)
    total_span = sum(r.span_cols for r in routes)
    return InspectorStats(
        nodes=graph.node_count,
        edges=count,
        connected_components=components,
        columns=layout.column_count,
        canvas_width=layout.canvas_width,
        canvas_height=layout.canvas_height,
        tile_coverage=tile_area / canvas_area if canvas_area > 0 else 0.0,
        total_edge_len=total_len,
        avg_edge_len=total_len / count if count else 0.0,
        max_edge_len=max((r.length for r in routes), default=0.0),
        avg_turns=total_turns / count if count else 0.0,
        max_turns=max((r.turns for r in routes), default=0),
        avg_span_cols=total_span / count if count else 0.0,
        max_span_cols=max((r.span_cols for r in routes), default=0),
        left_edges=sum(1 for r in routes if r.go_left),
        fallback_tracks=sum(1 for r in routes if r.used_fallback_track),
        linear_total=linear_total,
        linear_avg=linear_avg,
    )
