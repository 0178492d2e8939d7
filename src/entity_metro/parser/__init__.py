"""Entity graph model and Mermaid-style text parser."""

from entity_metro.parser.mermaid import parse_entity_mermaid
from entity_metro.parser.model import Edge, EntityGraph, GraphBuilder, Node, Row

__all__ = ["Edge", "EntityGraph", "GraphBuilder", "Node", "Row", "parse_entity_mermaid"]
