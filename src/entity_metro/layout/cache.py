"""Memoisation of layout + routing per (graph, order, width, columns)."""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Sequence

from entity_metro.layout.engine import GraphLayout, TileMetrics, compute_layout
from entity_metro.layout.routing import RoutedEdge, route_edges
from entity_metro.parser.model import EntityGraph

logger = logging.getLogger(__name__)

CacheKey = tuple[str, tuple[int, ...], float, int, TileMetrics]


class LayoutCache:
    """Small LRU of computed layouts and their routes.

    Layout and routing are pure functions of the key, so a hit returns the
    stored objects unchanged; callers must not mutate them.
    """

    def __init__(self, maxsize: int = 16) -> None:
        self.maxsize = max(maxsize, 1)
        self.hits = 0
        self.misses = 0
        self._entries: OrderedDict[CacheKey, tuple[GraphLayout, list[RoutedEdge]]] = (
            OrderedDict()
        )

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def get(
        self,
        graph: EntityGraph,
        order: Sequence[int] | None,
        available_width: float,
        columns: int = 0,
        metrics: TileMetrics | None = None,
    ) -> tuple[GraphLayout, list[RoutedEdge]]:
        metrics = metrics or TileMetrics()
        if order is None:
            order = range(graph.node_count)
        order_key = tuple(int(n) for n in order)
        key = (graph.fingerprint, order_key, float(available_width), columns, metrics)

        entry = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
            self.hits += 1
            return entry

        self.misses += 1
        layout = compute_layout(graph, order_key, available_width, columns, metrics)
        entry = (layout, route_edges(layout, graph))
        self._entries[key] = entry
        if len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)
        logger.debug("layout cache miss (%d entries)", len(self._entries))
        return entry
