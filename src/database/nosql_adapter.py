"""
sqlite-backed document adapter.
Stores each document as a JSON string, with the same interface as MongoAdapter.
"""

import json
import logging
import sqlite3
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import jsonschema

from . import DocumentStoreError, DocumentValidationError
from .schemas import DOCUMENT_SCHEMAS, DOCUMENT_VALIDATORS

logger = logging.getLogger(__name__)


def _contains_casefold(haystack: Optional[str], needle: str) -> bool:
    """Literal, case-insensitive substring test registered as a sqlite function."""
    if haystack is None:
        return False
    return needle.casefold() in str(haystack).casefold()


class NoSQLAdapter:
    """Adapter for document-based database operations on a sqlite file"""

    def __init__(self, db_path: str = "uploads.db"):
        self.db_path = db_path

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with JSON support"""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            logger.error(f"Failed to open sqlite database {self.db_path}: {e}")
            raise DocumentStoreError(f"Cannot open {self.db_path}") from e
        conn.row_factory = sqlite3.Row
        conn.create_function("contains_casefold", 2, _contains_casefold, deterministic=True)
        return conn

    def _table(self, collection: str) -> str:
        # table names are interpolated, so only known collections are allowed
        if collection not in DOCUMENT_SCHEMAS:
            raise ValueError(f"Unknown collection: {collection}")
        return f"{collection}_docs"

    def _validate_document(self, collection: str, document: Dict[str, Any]) -> None:
        """Validate document against schema"""
        try:
            DOCUMENT_VALIDATORS[collection](document)
        except jsonschema.ValidationError as e:
            logger.error(f"Document validation failed for {collection}: {e}")
            raise DocumentValidationError(f"Document validation failed: {e}") from e

    def _serialize_document(self, document: Dict[str, Any]) -> str:
        """Serialize document to JSON string"""
        def json_serializer(obj):
            if isinstance(obj, datetime):
                return obj.isoformat()
            raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

        return json.dumps(document, default=json_serializer)

    def _deserialize_row(self, row: sqlite3.Row) -> Dict[str, Any]:
        document = json.loads(row["document"])
        document["id"] = row["doc_id"]
        return document

    def _where(
        self,
        filters: Optional[Dict[str, Any]],
        search: Optional[Tuple[str, str]],
    ) -> Tuple[str, List[Any]]:
        clauses = []
        params: List[Any] = []
        for key, value in (filters or {}).items():
            clauses.append("json_extract(document, ?) = ?")
            params.extend([f"$.{key}", value])
        if search is not None:
            field, term = search
            clauses.append("contains_casefold(json_extract(document, ?), ?)")
            params.extend([f"$.{field}", term])
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    def init_collections(self) -> None:
        """Initialize document collections (tables)"""
        conn = self._get_connection()
        try:
            with conn:
                for collection in DOCUMENT_SCHEMAS:
                    table = self._table(collection)
                    conn.execute(f'''
                        CREATE TABLE IF NOT EXISTS {table} (
                            seq INTEGER PRIMARY KEY AUTOINCREMENT,
                            doc_id TEXT UNIQUE NOT NULL,
                            document TEXT NOT NULL,
                            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                        )
                    ''')
                conn.execute('''
                    CREATE INDEX IF NOT EXISTS idx_data_type
                    ON data_docs(json_extract(document, '$.dataType'))
                ''')
            logger.info("Document collections initialized successfully")
        except sqlite3.Error as e:
            logger.error(f"Error initializing collections: {e}")
            raise DocumentStoreError("Failed to initialize collections") from e
        finally:
            conn.close()

    def insert_document(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new document and return it with its assigned `id`"""
        table = self._table(collection)
        self._validate_document(collection, document)
        doc_id = uuid.uuid4().hex
        conn = self._get_connection()
        try:
            with conn:
                conn.execute(
                    f"INSERT INTO {table} (doc_id, document) VALUES (?, ?)",
                    (doc_id, self._serialize_document(document)),
                )
        except sqlite3.Error as e:
            logger.error(f"Error creating document in {collection}: {e}")
            raise DocumentStoreError(f"Failed to insert into {collection}") from e
        finally:
            conn.close()

        logger.info(f"Created document in {collection} with ID: {doc_id}")
        return {"id": doc_id, **document}

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by ID"""
        table = self._table(collection)
        conn = self._get_connection()
        try:
            row = conn.execute(
                f"SELECT doc_id, document FROM {table} WHERE doc_id = ?", (doc_id,)
            ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error getting document from {collection}: {e}")
            raise DocumentStoreError(f"Failed to read from {collection}") from e
        finally:
            conn.close()
        return self._deserialize_row(row) if row else None

    def delete_document(self, collection: str, doc_id: str) -> bool:
        """Delete a document by ID"""
        table = self._table(collection)
        conn = self._get_connection()
        try:
            with conn:
                cursor = conn.execute(f"DELETE FROM {table} WHERE doc_id = ?", (doc_id,))
        except sqlite3.Error as e:
            logger.error(f"Error deleting document from {collection}: {e}")
            raise DocumentStoreError(f"Failed to delete from {collection}") from e
        finally:
            conn.close()

        success = cursor.rowcount > 0
        if success:
            logger.info(f"Deleted document from {collection} with ID: {doc_id}")
        else:
            logger.warning(f"No document found to delete in {collection} with ID: {doc_id}")
        return success

    def find_documents(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        search: Optional[Tuple[str, str]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Query documents newest first, with equality filters and an optional substring search"""
        table = self._table(collection)
        where, params = self._where(filters, search)
        sql = f"SELECT doc_id, document FROM {table}{where} ORDER BY seq DESC LIMIT ? OFFSET ?"
        params.extend([limit if limit is not None else -1, skip])

        conn = self._get_connection()
        try:
            rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error querying documents from {collection}: {e}")
            raise DocumentStoreError(f"Failed to query {collection}") from e
        finally:
            conn.close()
        return [self._deserialize_row(row) for row in rows]

    def count_documents(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count documents matching filters"""
        table = self._table(collection)
        where, params = self._where(filters, None)
        conn = self._get_connection()
        try:
            row = conn.execute(f"SELECT COUNT(*) AS count FROM {table}{where}", params).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error counting documents in {collection}: {e}")
            raise DocumentStoreError(f"Failed to count {collection}") from e
        finally:
            conn.close()
        return row["count"]

    def ping(self) -> None:
        conn = self._get_connection()
        try:
            conn.execute("SELECT 1")
        except sqlite3.Error as e:
            raise DocumentStoreError(f"sqlite database {self.db_path} is unusable") from e
        finally:
            conn.close()

    def close(self) -> None:
        """Connections are opened per operation; nothing to release."""
