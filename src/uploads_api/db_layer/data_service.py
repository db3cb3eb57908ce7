"""
Data item repository.
Items live in the `data` collection and are always listed and searched within one category.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from database.local import DocumentAdapter
from database.schemas import DATA_COLLECTION
from uploads_api.db_layer.translate import repository_errors
from uploads_api.schemas import DataRecord

logger = logging.getLogger(__name__)


class DataService:
    """Service for posted data items"""

    def __init__(self, adapter: DocumentAdapter):
        self.adapter = adapter

    def create_data(
        self,
        data_type: str,
        data_content: str,
        data_name: str,
        link: Optional[str] = None,
    ) -> DataRecord:
        document = {
            "dataType": data_type,
            "dataContent": data_content,
            "dataName": data_name,
            "link": link,
            "postedAt": datetime.now(timezone.utc),
        }
        with repository_errors(f"save {data_type} item"):
            stored = self.adapter.insert_document(DATA_COLLECTION, document)
        logger.info(f"Data document saved: {stored['id']} ({data_type})")
        return DataRecord.model_validate(stored)

    def get_data(self, data_id: str) -> Optional[DataRecord]:
        with repository_errors(f"read data item {data_id}"):
            document = self.adapter.get_document(DATA_COLLECTION, data_id)
        return DataRecord.model_validate(document) if document else None

    def delete_data(self, data_id: str) -> bool:
        with repository_errors(f"delete data item {data_id}"):
            return self.adapter.delete_document(DATA_COLLECTION, data_id)

    def list_data(self, data_type: str, skip: int = 0, limit: Optional[int] = None) -> List[DataRecord]:
        """Items of one category, newest first"""
        with repository_errors(f"list {data_type} items"):
            documents = self.adapter.find_documents(
                DATA_COLLECTION, filters={"dataType": data_type}, skip=skip, limit=limit
            )
        return [DataRecord.model_validate(document) for document in documents]

    def search_data(self, data_type: str, term: str) -> List[DataRecord]:
        """Case-insensitive literal substring match on the name, within one category"""
        with repository_errors(f"search {data_type} items"):
            documents = self.adapter.find_documents(
                DATA_COLLECTION,
                filters={"dataType": data_type},
                search=("dataName", term),
            )
        return [DataRecord.model_validate(document) for document in documents]

    def list_all_data(self) -> List[DataRecord]:
        """Every item regardless of category, newest first"""
        with repository_errors("list data items"):
            documents = self.adapter.find_documents(DATA_COLLECTION)
        return [DataRecord.model_validate(document) for document in documents]

    def count_data(self, data_type: Optional[str] = None) -> int:
        filters = {"dataType": data_type} if data_type is not None else None
        with repository_errors("count data items"):
            return self.adapter.count_documents(DATA_COLLECTION, filters)
