"""Embedded quad store: typed facts on SQLite with path queries."""

from .path import CompareOp, Path
from .quad import IRI, Quad, ValueKind
from .store import (
    QuadStore,
    QuadStoreError,
    QuadWriter,
    StoreExistsError,
    StoreLockedError,
    StoreNotInitialized,
    init_quad_store,
)

__all__ = [
    "CompareOp",
    "IRI",
    "Path",
    "Quad",
    "QuadStore",
    "QuadStoreError",
    "QuadWriter",
    "StoreExistsError",
    "StoreLockedError",
    "StoreNotInitialized",
    "ValueKind",
    "init_quad_store",
]
