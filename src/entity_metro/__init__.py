"""entity-metro: subway-style entity-relationship diagrams with MinLA ordering."""

__version__ = "0.3.0"
