"""MinLA problem representation and full-cost evaluation."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Sequence

import numpy as np

from entity_metro.errors import OrderError, SolverError
from entity_metro.parser.model import EntityGraph

logger = logging.getLogger(__name__)


class SolverProblem:
    """Edge list plus adjacency views of a graph for the annealer.

    ``adj_offsets``/``adj_list`` hold the CSR adjacency (both directions,
    duplicates kept) and ``degrees`` the length of each node's slice. The
    annealer gathers only the slices of the two swapped nodes per lane, so
    memory stays O(N + E) and a swap costs O(degree).
    """

    def __init__(self, node_count: int, edges: Sequence[tuple[int, int]]) -> None:
        if node_count <= 0:
            raise SolverError("graph must have at least one node")

        kept: list[tuple[int, int]] = []
        loops = 0
        for u, v in edges:
            if not (0 <= u < node_count and 0 <= v < node_count):
                raise SolverError(f"edge ({u}, {v}) references a node outside 0..{node_count - 1}")
            if u == v:
                loops += 1
                continue
            kept.append((int(u), int(v)))
        if loops:
            logger.debug("dropped %d self-loop edge(s)", loops)

        self.node_count = node_count
        self.edges = kept

        degrees = np.zeros(node_count, dtype=np.int64)
        for u, v in kept:
            degrees[u] += 1
            degrees[v] += 1
        self.adj_offsets = np.zeros(node_count + 1, dtype=np.int64)
        np.cumsum(degrees, out=self.adj_offsets[1:])

        self.adj_list = np.zeros(int(self.adj_offsets[-1]), dtype=np.int64)
        cursor = self.adj_offsets[:-1].copy()
        for u, v in kept:
            self.adj_list[cursor[u]] = v
            cursor[u] += 1
            self.adj_list[cursor[v]] = u
            cursor[v] += 1

        self.degrees = degrees
        self.max_degree = int(degrees.max())

        if kept:
            self._edge_u = np.fromiter((u for u, _ in kept), dtype=np.int64, count=len(kept))
            self._edge_v = np.fromiter((v for _, v in kept), dtype=np.int64, count=len(kept))
        else:
            self._edge_u = np.zeros(0, dtype=np.int64)
            self._edge_v = np.zeros(0, dtype=np.int64)

    @classmethod
    def from_graph(cls, graph: EntityGraph) -> SolverProblem:
        return cls(graph.node_count, graph.edge_pairs())

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    @property
    def max_cost(self) -> int:
        """Upper bound on any arrangement's cost."""
        return self.node_count * self.edge_count

    def neighbours_of(self, node: int) -> np.ndarray:
        return self.adj_list[self.adj_offsets[node] : self.adj_offsets[node + 1]]

    def seed(self) -> int:
        """Stable 64-bit seed derived from the graph's shape."""
        h = hashlib.blake2b(digest_size=8)
        h.update(f"{self.node_count}:{self.edge_count}".encode("ascii"))
        for u, v in self.edges[:1024]:
            h.update(f";{u},{v}".encode("ascii"))
        return int.from_bytes(h.digest(), "little")

    def cost(self, order: Sequence[int]) -> int:
        """Total edge span of ``order`` (full O(E) recompute)."""
        positions = np.empty(self.node_count, dtype=np.int64)
        positions[np.asarray(order, dtype=np.int64)] = np.arange(self.node_count)
        return self.cost_from_positions(positions)

    def cost_from_positions(self, positions: np.ndarray) -> int:
        if not self.edges:
            return 0
        spans = np.abs(positions[self._edge_u] - positions[self._edge_v])
        return min(int(spans.sum()), self.max_cost)

    def cost_checked(self, order: Sequence[int]) -> int | None:
        """Cost of ``order``, or None when it is not a permutation."""
        try:
            validate_order(order, self.node_count)
        except OrderError:
            return None
        return self.cost(order)


def validate_order(order: Sequence[int], node_count: int) -> None:
    """Raise :class:`OrderError` unless ``order`` is a bijection on range(node_count)."""
    if len(order) != node_count:
        raise OrderError(f"order has {len(order)} entries, expected {node_count}")
    seen = [False] * node_count
    for node in order:
        node = int(node)
        if not 0 <= node < node_count:
            raise OrderError(f"order contains {node}, outside 0..{node_count - 1}")
        if seen[node]:
            raise OrderError(f"order contains {node} more than once")
        seen[node] = True


def order_cost(graph: EntityGraph, order: Sequence[int]) -> int:
    """Total edge span of ``order`` over ``graph``; zero for an empty graph."""
    if graph.node_count == 0:
        return 0
    validate_order(order, graph.node_count)
    positions = [0] * graph.node_count
    for pos, node in enumerate(order):
        positions[node] = pos
    return sum(abs(positions[e.source] - positions[e.target]) for e in graph.edges)


def order_cost_checked(graph: EntityGraph, order: Sequence[int]) -> int | None:
    """Like :func:`order_cost` but returns None when ``order`` is not a bijection."""
    try:
        return order_cost(graph, order)
    except OrderError:
        return None
