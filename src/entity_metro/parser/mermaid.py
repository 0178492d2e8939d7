"""Parser for Mermaid graph definitions with %%entity directives.

Uses a simple line-by-line approach rather than a full grammar parser,
since the Mermaid subset we need is straightforward.

Edges become reference rows on their source entity; attribute rows that
are not references are declared with ``%%entity row:`` and undecodable
values with ``%%entity opaque:``.
"""

from __future__ import annotations

import logging
import re

from entity_metro.errors import ParseError
from entity_metro.parser.model import EntityGraph, GraphBuilder

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_ATTR = "ref"


def _check_unsupported_input(text: str) -> None:
    """Detect common unsupported input formats and raise helpful errors."""
    lines = text.strip().split("\n")
    has_flowchart = any(line.strip().startswith("flowchart ") for line in lines)
    has_er_diagram = any(line.strip().startswith("erDiagram") for line in lines)

    if has_flowchart:
        raise ParseError(
            "Mermaid 'flowchart' syntax is not supported. "
            "Use 'graph LR' with %%entity directives instead."
        )
    if has_er_diagram:
        raise ParseError(
            "Mermaid 'erDiagram' blocks are not supported. Declare entities as "
            "graph nodes and references as labelled edges (a -->|attr| b)."
        )


def parse_entity_mermaid(text: str) -> EntityGraph:
    """Parse a Mermaid graph definition with %%entity directives."""
    _check_unsupported_input(text)

    builder = GraphBuilder()
    lines = text.strip().split("\n")

    for lineno, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped:
            continue

        if stripped.startswith("%%entity"):
            _parse_directive(stripped, builder, lineno)
            continue

        # Skip regular comments and graph declaration
        if stripped.startswith("%%") or stripped.startswith("graph "):
            continue

        # Try edge first (contains arrow)
        if "-->" in stripped or "---" in stripped or "==>" in stripped:
            _parse_edge(stripped, builder, lineno)
            continue

        _parse_node(stripped, builder)

    return builder.build()


def _parse_directive(line: str, builder: GraphBuilder, lineno: int) -> None:
    """Parse a %%entity directive line."""
    content = line[len("%%entity") :].strip()

    if content.startswith("title:"):
        builder.title = content[len("title:") :].strip()
    elif content.startswith("row:"):
        node_id, attr, value = _split_row(content[len("row:") :], lineno)
        builder.add_row(node_id, attr, value)
    elif content.startswith("opaque:"):
        node_id, attr, value = _split_row(content[len("opaque:") :], lineno)
        builder.add_opaque_row(node_id, attr, value)


def _split_row(rest: str, lineno: int) -> tuple[str, str, str]:
    parts = rest.split("|", 2)
    if len(parts) < 3:
        raise ParseError(
            f"line {lineno}: expected 'node | attribute | value', got '{rest.strip()}'"
        )
    node_id = parts[0].strip()
    if not _ID_PATTERN.match(node_id):
        raise ParseError(f"line {lineno}: invalid node id '{node_id}'")
    return node_id, parts[1].strip(), parts[2].strip()


_ID_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

# Regex patterns for node shapes
_NODE_PATTERNS = [
    # square bracket: node_id[label]
    re.compile(r"^([a-zA-Z_][a-zA-Z0-9_]*)\[(.+?)\]$"),
    # round bracket: node_id(label)
    re.compile(r"^([a-zA-Z_][a-zA-Z0-9_]*)\((.+?)\)$"),
    # rhombus: node_id{label}
    re.compile(r"^([a-zA-Z_][a-zA-Z0-9_]*)\{(.+?)\}$"),
    # bare id
    re.compile(r"^([a-zA-Z_][a-zA-Z0-9_]*)$"),
]


def _node_ref(name: str) -> str:
    """Node id with an optional inline shape label, as named groups."""
    return (
        rf"(?P<{name}>[a-zA-Z_][a-zA-Z0-9_]*)"
        rf"(?:\[(?P<{name}_square>[^\]]+)\]"
        rf"|\((?P<{name}_round>[^)]+)\)"
        rf"|\{{(?P<{name}_rhombus>[^}}]+)\}})?"
    )


# Edge pattern: source -->|attr| target, either end may carry a label: a[A] --> b(B)
_EDGE_PATTERN = re.compile(
    rf"^{_node_ref('source')}\s*"
    r"(-->|---|==>)"  # arrow
    r"(?:\|(?P<attr>[^|]*)\|)?\s*"  # optional |attr|
    rf"{_node_ref('target')}$"
)


def _parse_node(line: str, builder: GraphBuilder) -> None:
    """Parse a node definition line."""
    for pattern in _NODE_PATTERNS:
        m = pattern.match(line)
        if m:
            node_id = m.group(1)
            title = m.group(2).strip() if m.lastindex >= 2 else None
            builder.add_node(node_id, title)
            return


def _inline_title(m: re.Match[str], name: str) -> str | None:
    for shape in ("square", "round", "rhombus"):
        label = m.group(f"{name}_{shape}")
        if label is not None:
            return label.strip()
    return None


def _parse_edge(line: str, builder: GraphBuilder, lineno: int) -> None:
    """Parse an edge definition line.

    Supports comma-separated attributes: a -->|owner,author| b
    Creates a separate reference row for each attribute. Inline labels
    (``a --> b[Book]``) also declare or retitle the node.
    """
    m = _EDGE_PATTERN.match(line)
    if not m:
        logger.warning("line %d: skipping unrecognised edge '%s'", lineno, line)
        return

    source = m.group("source")
    target = m.group("target")
    builder.add_node(source, _inline_title(m, "source"))
    builder.add_node(target, _inline_title(m, "target"))
    label = m.group("attr").strip() if m.group("attr") else DEFAULT_REFERENCE_ATTR

    for attr in (a.strip() for a in label.split(",")):
        builder.add_reference(source, attr or DEFAULT_REFERENCE_ATTR, target)
