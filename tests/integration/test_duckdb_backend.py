"""Integration tests for the DuckDB document backend.

Tests cover:
- Creating and reading the shared document on disk
- Partial merges and revision counting
- Persistence across connections
- Error translation for reads and writes
- The sync channel on top of DuckDB
"""

import pytest

from defense_index.defaults import default_document
from defense_index.exceptions import PersistenceError, TransportInterruptedError
from defense_index.sync.backends import DuckDBDocumentBackend
from defense_index.sync.channel import SyncChannel


@pytest.fixture
def db_path(temp_dir):
    return str(temp_dir / "store" / "defense_index.duckdb")


@pytest.fixture
def backend(db_path):
    backend = DuckDBDocumentBackend(db_path, "system/global_data")
    yield backend
    backend.close()


@pytest.mark.integration
class TestDuckDBDocumentBackend:
    """Test the on-disk document store."""

    def test_missing_document_reads_none(self, backend):
        assert backend.read() is None

    def test_database_directory_created(self, backend, temp_dir):
        assert (temp_dir / "store").is_dir()

    def test_create_if_absent(self, backend):
        assert backend.create_if_absent({"categories": ["Air"]}) is True
        assert backend.create_if_absent({"categories": ["Land"]}) is False

        document, revision = backend.read()
        assert document == {"categories": ["Air"]}
        assert revision == 1

    def test_merge_replaces_only_given_fields(self, backend):
        backend.create_if_absent(default_document())

        revision = backend.merge({"aircraftCats": ["Bombers"]})

        document, stored_revision = backend.read()
        assert revision == stored_revision == 2
        assert document["aircraftCats"] == ["Bombers"]
        assert document["countries"] == default_document()["countries"]

    def test_merge_creates_missing_document(self, backend):
        assert backend.merge({"categories": ["Air"]}) == 1
        assert backend.read() == ({"categories": ["Air"]}, 1)

    def test_documents_are_keyed_by_path(self, db_path, backend):
        backend.create_if_absent({"categories": ["Air"]})
        backend.close()

        other = DuckDBDocumentBackend(db_path, "system/other_data")
        try:
            assert other.read() is None
        finally:
            other.close()

    def test_document_survives_reopen(self, db_path, backend):
        backend.create_if_absent({"categories": ["Air"]})
        backend.merge({"categories": ["Air", "Land"]})
        backend.close()

        reopened = DuckDBDocumentBackend(db_path, "system/global_data")
        try:
            assert reopened.read() == ({"categories": ["Air", "Land"]}, 2)
        finally:
            reopened.close()

    def test_in_memory_database(self):
        backend = DuckDBDocumentBackend(":memory:", "system/global_data")
        try:
            assert backend.create_if_absent({"categories": []}) is True
            assert backend.read()[0] == {"categories": []}
        finally:
            backend.close()

    def test_read_on_closed_connection(self, backend):
        backend.close()

        with pytest.raises(TransportInterruptedError, match="Failed to read document"):
            backend.read()

    def test_merge_on_closed_connection(self, backend):
        backend.close()

        with pytest.raises(PersistenceError, match="Failed to save document"):
            backend.merge({"categories": []})


@pytest.mark.integration
class TestChannelOverDuckDB:
    """Test the sync channel with the DuckDB backend."""

    def test_bootstrap_then_save_echoes(self, backend):
        channel = SyncChannel(backend)
        documents = []
        channel.subscribe(documents.append)

        channel.bootstrap(default_document())
        channel.save({"categories": ["Air"]})

        assert documents[0] is None
        assert documents[1] == default_document()
        assert documents[2]["categories"] == ["Air"]
        assert documents[2]["aircrafts"] == default_document()["aircrafts"]
