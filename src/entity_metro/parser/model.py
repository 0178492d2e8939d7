"""Data model for entity graphs."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field

from entity_metro.errors import ParseError

HEX_PREFIX_BYTES = 6
"""Number of bytes shown when an opaque value is displayed as hex."""


@dataclass(frozen=True)
class Row:
    """One attribute row of an entity tile.

    ``hatched`` rows hold values that could not be decoded; renderers
    draw them as a hatched block instead of showing the raw text.
    """

    attr: str
    value: str
    target: str | None = None
    hatched: bool = False

    def sort_key(self) -> tuple[str, bool, str]:
        return (self.attr, self.hatched, self.value)


@dataclass(frozen=True)
class Node:
    """An entity: opaque id, display title and alphabetically sorted rows."""

    id: str
    title: str
    rows: tuple[Row, ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class Edge:
    """A reference from row ``row`` of node ``source`` to node ``target``."""

    source: int
    target: int
    attr: str
    row: int = 0


@dataclass(frozen=True)
class EntityGraph:
    """Immutable entity-relationship graph.

    Rebuilt whenever the source data changes; ``fingerprint`` identifies
    the content so caches and solver sessions can tell graphs apart.
    """

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    title: str = ""
    fingerprint: str = ""
    id_to_index: dict[str, int] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        # Graphs built directly (not via GraphBuilder) still get identity.
        if not self.fingerprint:
            object.__setattr__(
                self,
                "fingerprint",
                graph_fingerprint(self.title, list(self.nodes), list(self.edges)),
            )
        if not self.id_to_index and self.nodes:
            object.__setattr__(
                self, "id_to_index", {node.id: idx for idx, node in enumerate(self.nodes)}
            )

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def edge_pairs(self) -> list[tuple[int, int]]:
        return [(e.source, e.target) for e in self.edges]

    @classmethod
    def from_edges(
        cls,
        node_count: int,
        edges: list[tuple[int, int]] | list[tuple[int, int, str]],
        attr: str = "ref",
    ) -> EntityGraph:
        """Build a graph of ``node_count`` bare nodes from index pairs.

        Each edge becomes a reference row on its source node. Tags may be
        given per edge as a third tuple element. Self-loops are dropped.
        """
        builder = GraphBuilder()
        for i in range(node_count):
            builder.add_node(f"n{i}")
        for item in edges:
            u, v = item[0], item[1]
            tag = item[2] if len(item) > 2 else attr
            if not (0 <= u < node_count and 0 <= v < node_count):
                raise ParseError(f"Edge ({u}, {v}) is outside 0..{node_count - 1}")
            builder.add_reference(f"n{u}", tag, f"n{v}")
        return builder.build()


def hex_prefix(raw: str | bytes, prefix_len: int = HEX_PREFIX_BYTES) -> str:
    """Return the first ``prefix_len`` bytes of ``raw`` as lowercase hex."""
    if isinstance(raw, str):
        try:
            data = bytes.fromhex(raw)
        except ValueError:
            data = raw.encode("utf-8")
    else:
        data = raw
    return data[:prefix_len].hex()


class GraphBuilder:
    """Mutable accumulator that produces an :class:`EntityGraph`.

    Nodes keep their declaration order; rows are sorted per node by
    ``(attr, hatched, value)`` at build time and edges are derived from
    rows whose target resolves to a known node.
    """

    def __init__(self, title: str = "") -> None:
        self.title = title
        self._titles: dict[str, str | None] = {}
        self._rows: dict[str, list[Row]] = {}

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._titles

    def add_node(self, node_id: str, title: str | None = None) -> None:
        if node_id not in self._titles:
            self._titles[node_id] = title
            self._rows[node_id] = []
        elif title is not None:
            self._titles[node_id] = title

    def add_row(self, node_id: str, attr: str, value: str) -> None:
        self.add_node(node_id)
        self._rows[node_id].append(Row(attr=attr, value=value))

    def add_opaque_row(self, node_id: str, attr: str, raw: str | bytes) -> None:
        self.add_node(node_id)
        self._rows[node_id].append(
            Row(attr=attr, value=f"0x{hex_prefix(raw)}", hatched=True)
        )

    def add_reference(self, node_id: str, attr: str, target_id: str) -> None:
        self.add_node(node_id)
        self.add_node(target_id)
        self._rows[node_id].append(
            Row(attr=attr, value=f"id:{target_id}", target=target_id)
        )

    def build(self) -> EntityGraph:
        ids = list(self._titles)
        id_to_index = {node_id: idx for idx, node_id in enumerate(ids)}

        nodes: list[Node] = []
        for node_id in ids:
            rows = tuple(sorted(self._rows[node_id], key=Row.sort_key))
            title = self._titles[node_id]
            if title is None:
                title = next(
                    (r.value for r in rows if r.attr == "name" and not r.hatched),
                    node_id,
                )
            nodes.append(Node(id=node_id, title=title, rows=rows))

        edges: list[Edge] = []
        for source, node in enumerate(nodes):
            for row_idx, row in enumerate(node.rows):
                if row.target is None:
                    continue
                target = id_to_index.get(row.target)
                # Self-references stay visible as rows but are not edges.
                if target is None or target == source:
                    continue
                edges.append(Edge(source=source, target=target, attr=row.attr, row=row_idx))

        return EntityGraph(
            nodes=tuple(nodes),
            edges=tuple(edges),
            title=self.title,
            fingerprint=graph_fingerprint(self.title, nodes, edges),
            id_to_index=id_to_index,
        )


def graph_fingerprint(title: str, nodes: list[Node], edges: list[Edge]) -> str:
    """Content hash of a graph (title, nodes with rows, edges)."""
    h = hashlib.blake2b(digest_size=16)
    h.update(title.encode("utf-8"))
    for node in nodes:
        h.update(b"\x00N")
        h.update(node.id.encode("utf-8"))
        h.update(b"\x00")
        h.update(node.title.encode("utf-8"))
        for row in node.rows:
            h.update(b"\x00R")
            h.update(row.attr.encode("utf-8"))
            h.update(b"\x00")
            h.update(row.value.encode("utf-8"))
            h.update(b"\x01" if row.hatched else b"\x02")
    for edge in edges:
        h.update(f"\x00E{edge.source},{edge.target},{edge.row},".encode("utf-8"))
        h.update(edge.attr.encode("utf-8"))
    return h.hexdigest()
