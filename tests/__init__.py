"""Test suite for the Global Defense Index.

This package contains tests for the ranking store including:
- Unit tests for the registry, store, ranking, validation and sync channel
- Integration tests against the DuckDB and S3 document backends
"""

__version__ = "0.1.0"
