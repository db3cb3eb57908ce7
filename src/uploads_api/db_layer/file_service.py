"""
File metadata repository.
One document per stored blob in the `files` collection.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from database.local import DocumentAdapter
from database.schemas import FILES_COLLECTION
from uploads_api.db_layer.translate import repository_errors
from uploads_api.schemas import FileRecord

logger = logging.getLogger(__name__)


class FileService:
    """Service for file metadata records"""

    def __init__(self, adapter: DocumentAdapter):
        self.adapter = adapter

    def create_file(
        self,
        file_type: str,
        file_size: int,
        file_url: str,
        file_name: str,
        file_description: Optional[str] = None,
    ) -> FileRecord:
        """Insert a record pointing at an already stored blob"""
        document = {
            "fileType": file_type,
            "fileSize": file_size,
            "fileUrl": file_url,
            "fileName": file_name,
            "fileDescription": file_description,
            "uploadedDate": datetime.now(timezone.utc),
        }
        with repository_errors(f"save file record {file_name}"):
            stored = self.adapter.insert_document(FILES_COLLECTION, document)
        logger.info(f"File document saved: {stored['id']} -> {file_name}")
        return FileRecord.model_validate(stored)

    def get_file(self, file_id: str) -> Optional[FileRecord]:
        with repository_errors(f"read file record {file_id}"):
            document = self.adapter.get_document(FILES_COLLECTION, file_id)
        return FileRecord.model_validate(document) if document else None

    def delete_file(self, file_id: str) -> bool:
        with repository_errors(f"delete file record {file_id}"):
            return self.adapter.delete_document(FILES_COLLECTION, file_id)

    def list_files(self, skip: int = 0, limit: Optional[int] = None) -> List[FileRecord]:
        """Newest first"""
        with repository_errors("list file records"):
            documents = self.adapter.find_documents(FILES_COLLECTION, skip=skip, limit=limit)
        return [FileRecord.model_validate(document) for document in documents]

    def search_files(self, term: str) -> List[FileRecord]:
        """Case-insensitive literal substring match on the description, newest first"""
        with repository_errors("search file records"):
            documents = self.adapter.find_documents(
                FILES_COLLECTION, search=("fileDescription", term)
            )
        return [FileRecord.model_validate(document) for document in documents]

    def list_all_files(self) -> List[FileRecord]:
        return self.list_files()

    def count_files(self) -> int:
        with repository_errors("count file records"):
            return self.adapter.count_documents(FILES_COLLECTION)
