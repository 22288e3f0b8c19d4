"""CLI command modules."""

from .journal import get, put

__all__ = ["put", "get"]
