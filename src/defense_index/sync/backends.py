"""Persistence backends for the shared document.

Each backend stores exactly one JSON document per path and exposes the
same small contract:

- ``read()`` returns ``(document, revision)`` or ``None`` when the document
  does not exist yet
- ``merge(partial)`` replaces the given top-level fields and returns the
  new revision; fields not in ``partial`` are untouched
- ``create_if_absent(document)`` writes the document only if none exists
  and reports whether it did
- ``close()`` releases connections

Backends raise PersistenceError for failed writes and
TransportInterruptedError for failed reads.
"""

import copy
import json
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import boto3
import duckdb
from botocore.exceptions import BotoCoreError, ClientError

from defense_index.exceptions import PersistenceError, TransportInterruptedError
from defense_index.logging_config import create_logger

logger = create_logger(__name__)

Document = Dict[str, Any]
Revision = Any


class DocumentBackend(ABC):
    """Storage for one shared JSON document."""

    @abstractmethod
    def read(self) -> Optional[Tuple[Document, Revision]]:
        """Return the document and its revision, or None if absent."""

    @abstractmethod
    def merge(self, partial: Document) -> Revision:
        """Replace the top-level fields in ``partial`` and return the new revision."""

    @abstractmethod
    def create_if_absent(self, document: Document) -> bool:
        """Write ``document`` only if no document exists yet."""

    def close(self) -> None:
        """Release any held resources."""


class InMemoryDocumentBackend(DocumentBackend):
    """Process-local backend for development and tests."""

    def __init__(self, document: Optional[Document] = None):
        self._document: Optional[Document] = copy.deepcopy(document) if document is not None else None
        self._revision = 0 if document is None else 1

    def read(self) -> Optional[Tuple[Document, Revision]]:
        if self._document is None:
            return None
        return copy.deepcopy(self._document), self._revision

    def merge(self, partial: Document) -> Revision:
        document = self._document or {}
        document.update(copy.deepcopy(partial))
        self._document = document
        self._revision += 1
        return self._revision

    def create_if_absent(self, document: Document) -> bool:
        if self._document is not None:
            return False
        self._document = copy.deepcopy(document)
        self._revision += 1
        return True


class DuckDBDocumentBackend(DocumentBackend):
    """Local DuckDB file holding one row per document path."""

    def __init__(self, db_path: str, document_path: str):
        """Initialize the backend.

        Args:
            db_path: Path to the DuckDB database file (``:memory:`` allowed)
            document_path: Well-known path of the shared document
        """
        self.db_path = db_path
        self.document_path = document_path

        if db_path != ":memory:":
            db_dir = os.path.dirname(db_path)
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)

        logger.info(f"Opening document store at {self.db_path}")
        self.con = duckdb.connect(self.db_path)
        self._initialize_tables()

    def _initialize_tables(self) -> None:
        self.con.execute("""
            CREATE TABLE IF NOT EXISTS documents (
                path VARCHAR PRIMARY KEY,
                body VARCHAR NOT NULL,
                revision INTEGER NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def _fetch(self) -> Optional[Tuple[Document, int]]:
        row = self.con.execute(
            "SELECT body, revision FROM documents WHERE path = ?",
            [self.document_path],
        ).fetchone()
        if row is None:
            return None
        return json.loads(row[0]), int(row[1])

    def read(self) -> Optional[Tuple[Document, Revision]]:
        try:
            return self._fetch()
        except duckdb.Error as e:
            raise TransportInterruptedError(f"Failed to read document {self.document_path}: {e}")

    def merge(self, partial: Document) -> Revision:
        try:
            self.con.execute("BEGIN TRANSACTION")
            current = self._fetch()
            if current is None:
                document, revision = dict(partial), 1
                self.con.execute(
                    "INSERT INTO documents (path, body, revision) VALUES (?, ?, ?)",
                    [self.document_path, json.dumps(document), revision],
                )
            else:
                document, revision = current
                document.update(partial)
                revision += 1
                self.con.execute(
                    "UPDATE documents SET body = ?, revision = ?, updated_at = CURRENT_TIMESTAMP "
                    "WHERE path = ?",
                    [json.dumps(document), revision, self.document_path],
                )
            self.con.execute("COMMIT")
            return revision
        except duckdb.Error as e:
            self._rollback()
            raise PersistenceError(f"Failed to save document {self.document_path}: {e}")

    def create_if_absent(self, document: Document) -> bool:
        try:
            self.con.execute("BEGIN TRANSACTION")
            if self._fetch() is not None:
                self.con.execute("COMMIT")
                return False
            self.con.execute(
                "INSERT INTO documents (path, body, revision) VALUES (?, ?, 1)",
                [self.document_path, json.dumps(document)],
            )
            self.con.execute("COMMIT")
            return True
        except duckdb.Error as e:
            self._rollback()
            raise PersistenceError(f"Failed to create document {self.document_path}: {e}")

    def _rollback(self) -> None:
        try:
            self.con.execute("ROLLBACK")
        except duckdb.Error:
            logger.debug("No open transaction to roll back")

    def close(self) -> None:
        self.con.close()


class S3DocumentBackend(DocumentBackend):
    """One JSON object in S3; the ETag is the revision.

    Merges are read-modify-write guarded by ``IfMatch`` on the ETag that was
    read, so a concurrent writer makes the save fail rather than be lost.
    """

    def __init__(self, bucket_name: str, key: str, s3_client=None):
        self.bucket_name = bucket_name
        self.key = key
        self.s3_client = s3_client or boto3.client("s3")

    def _get(self) -> Optional[Tuple[Document, str]]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=self.key)
        except ClientError as e:
            if e.response["Error"]["Code"] in ("NoSuchKey", "404"):
                return None
            raise
        body = response["Body"].read()
        return json.loads(body), response["ETag"]

    def read(self) -> Optional[Tuple[Document, Revision]]:
        try:
            return self._get()
        except (ClientError, BotoCoreError, ValueError) as e:
            raise TransportInterruptedError(
                f"Failed to read s3://{self.bucket_name}/{self.key}: {e}"
            )

    def merge(self, partial: Document) -> Revision:
        try:
            current = self._get()
            extra_args: Dict[str, Any] = {}
            if current is None:
                document: Document = {}
                extra_args["IfNoneMatch"] = "*"
            else:
                document, etag = current
                extra_args["IfMatch"] = etag
            document.update(partial)
            response = self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=self.key,
                Body=json.dumps(document).encode("utf-8"),
                ContentType="application/json",
                **extra_args,
            )
            return response["ETag"]
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            if error_code in ("PreconditionFailed", "ConditionalRequestConflict"):
                raise PersistenceError(
                    f"Document s3://{self.bucket_name}/{self.key} changed during save, "
                    "reload and try again"
                )
            raise PersistenceError(f"S3 save failed ({error_code}): {e}")
        except (BotoCoreError, ValueError) as e:
            raise PersistenceError(f"S3 save failed: {e}")

    def create_if_absent(self, document: Document) -> bool:
        try:
            try:
                self.s3_client.head_object(Bucket=self.bucket_name, Key=self.key)
                return False
            except ClientError as e:
                if e.response["Error"]["Code"] not in ("404", "NoSuchKey", "NotFound"):
                    raise

            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=self.key,
                Body=json.dumps(document).encode("utf-8"),
                ContentType="application/json",
                IfNoneMatch="*",
            )
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] in ("PreconditionFailed", "ConditionalRequestConflict"):
                logger.info("Document was created concurrently, keeping existing content")
                return False
            raise PersistenceError(f"S3 bootstrap failed: {e}")
        except BotoCoreError as e:
            raise PersistenceError(f"S3 bootstrap failed: {e}")
