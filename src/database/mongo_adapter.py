"""
MongoDB adapter for document-based operations.
Provides identical interface to NoSQLAdapter but uses native MongoDB collections.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import jsonschema
from bson import ObjectId
from pymongo import DESCENDING, MongoClient
from pymongo.errors import PyMongoError

from . import DocumentStoreError, DocumentValidationError
from .schemas import DATA_COLLECTION, DOCUMENT_VALIDATORS, FILES_COLLECTION

logger = logging.getLogger(__name__)


class MongoAdapter:
    """MongoDB adapter for document-based database operations"""

    def __init__(
        self,
        connection_string: Optional[str] = None,
        database_name: str = "uploads",
        client: Optional[MongoClient] = None,
    ):
        if client is None and not connection_string:
            raise ValueError("MongoDB connection string required. Set MONGODB_URI or pass connection_string")

        self.connection_string = connection_string
        self.database_name = database_name
        self.client = client
        self.db = None
        self._connect()

    def _connect(self) -> None:
        """Establish MongoDB connection"""
        try:
            if self.client is None:
                self.client = MongoClient(self.connection_string)
            self.db = self.client[self.database_name]

            # Test connection
            self.client.admin.command('ping')
            logger.info(f"Connected to MongoDB database: {self.database_name}")

        except PyMongoError as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise DocumentStoreError("Failed to connect to MongoDB") from e

    def _validate_document(self, collection: str, document: Dict[str, Any]) -> None:
        """Validate document against schema"""
        if collection not in DOCUMENT_VALIDATORS:
            raise ValueError(f"Unknown collection: {collection}")
        try:
            DOCUMENT_VALIDATORS[collection](document)
        except jsonschema.ValidationError as e:
            logger.error(f"Document validation failed for {collection}: {e}")
            raise DocumentValidationError(f"Document validation failed: {e}") from e

    @staticmethod
    def _to_record(document: Dict[str, Any]) -> Dict[str, Any]:
        # Expose MongoDB's _id as a string `id`, like NoSQLAdapter
        record = dict(document)
        record["id"] = str(record.pop("_id"))
        return record

    @staticmethod
    def _object_id(doc_id: str) -> Optional[ObjectId]:
        if not ObjectId.is_valid(doc_id):
            return None
        return ObjectId(doc_id)

    @staticmethod
    def _build_query(
        filters: Optional[Dict[str, Any]],
        search: Optional[Tuple[str, str]],
    ) -> Dict[str, Any]:
        query = dict(filters or {})
        if search is not None:
            field, term = search
            # the term is matched literally, never as a pattern
            query[field] = {"$regex": re.escape(term), "$options": "i"}
        return query

    def init_collections(self) -> None:
        """Initialize MongoDB collections and indexes"""
        try:
            self.db[FILES_COLLECTION].create_index([("uploadedDate", DESCENDING)])
            self.db[DATA_COLLECTION].create_index([("dataType", 1), ("_id", DESCENDING)])
            logger.info("MongoDB collections and indexes initialized successfully")
        except PyMongoError as e:
            logger.error(f"Error initializing MongoDB collections: {e}")
            raise DocumentStoreError("Failed to initialize collections") from e

    def insert_document(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new document and return it with its assigned `id`"""
        self._validate_document(collection, document)
        to_insert = dict(document)
        try:
            result = self.db[collection].insert_one(to_insert)
        except PyMongoError as e:
            logger.error(f"Error creating document in {collection}: {e}")
            raise DocumentStoreError(f"Failed to insert into {collection}") from e

        doc_id = str(result.inserted_id)
        logger.info(f"Created document in {collection} with ID: {doc_id}")
        return {"id": doc_id, **document}

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by ID; malformed ids are simply absent"""
        object_id = self._object_id(doc_id)
        if object_id is None:
            return None
        try:
            document = self.db[collection].find_one({"_id": object_id})
        except PyMongoError as e:
            logger.error(f"Error getting document from {collection}: {e}")
            raise DocumentStoreError(f"Failed to read from {collection}") from e
        return self._to_record(document) if document else None

    def delete_document(self, collection: str, doc_id: str) -> bool:
        """Delete a document by ID"""
        object_id = self._object_id(doc_id)
        if object_id is None:
            return False
        try:
            result = self.db[collection].delete_one({"_id": object_id})
        except PyMongoError as e:
            logger.error(f"Error deleting document from {collection}: {e}")
            raise DocumentStoreError(f"Failed to delete from {collection}") from e

        success = result.deleted_count > 0
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
        query = self._build_query(filters, search)
        try:
            cursor = self.db[collection].find(query).sort("_id", DESCENDING).skip(skip)
            if limit is not None:
                cursor = cursor.limit(limit)
            return [self._to_record(document) for document in cursor]
        except PyMongoError as e:
            logger.error(f"Error querying documents from {collection}: {e}")
            raise DocumentStoreError(f"Failed to query {collection}") from e

    def count_documents(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count documents matching filters"""
        try:
            return self.db[collection].count_documents(dict(filters or {}))
        except PyMongoError as e:
            logger.error(f"Error counting documents in {collection}: {e}")
            raise DocumentStoreError(f"Failed to count {collection}") from e

    def ping(self) -> None:
        try:
            self.client.admin.command('ping')
        except PyMongoError as e:
            raise DocumentStoreError("MongoDB is unreachable") from e

    def close(self) -> None:
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")
