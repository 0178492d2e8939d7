"""Exception types raised at the validation seams of entity-metro."""

from __future__ import annotations


class EntityMetroError(ValueError):
    """Base class for all entity-metro errors."""


class ParseError(EntityMetroError):
    """Raised when diagram text cannot be turned into an entity graph."""


class SolverError(EntityMetroError):
    """Raised for degenerate solver input (no nodes, empty batch, bad edges)."""


class OrderError(EntityMetroError):
    """Raised when an order is not a permutation of the graph's nodes."""


class WorkerError(EntityMetroError):
    """Raised when a background solver worker cannot be used."""
