"""Synchronization package for the shared document.

This package mirrors in-memory domain state to and from one shared
document held by a pluggable backend (in-memory, DuckDB file, or S3).
"""

from defense_index.sync.backends import (
    DocumentBackend,
    DuckDBDocumentBackend,
    InMemoryDocumentBackend,
    S3DocumentBackend,
)
from defense_index.sync.channel import SyncChannel

__all__ = [
    "DocumentBackend",
    "DuckDBDocumentBackend",
    "InMemoryDocumentBackend",
    "S3DocumentBackend",
    "SyncChannel",
]
