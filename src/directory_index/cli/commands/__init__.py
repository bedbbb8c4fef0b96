"""CLI commands for directory-index."""

from . import db, index, search

__all__ = ["db", "index", "search"]
