"""
Ingestion coordinator.

Keeps the blob store and the metadata store consistent without any shared
transaction:

* upload: store the blob first, then insert the record. A record therefore
  never points at a blob that was not stored. If the insert fails the blob is
  left orphaned; nothing is rolled back.
* delete: remove the blob first, then the record. If the blob delete fails the
  record is left untouched.
* upload by link: stream the remote body into the blob store and return its
  URL. No metadata record is written on this path.
"""

import logging
import time
from contextlib import contextmanager
from pathlib import PurePosixPath
from typing import Callable, Iterator, Optional

import requests

from uploads_api.adapters.storage import BlobStore
from uploads_api.db_layer import DataService, FileService
from uploads_api.errors import BadInputError, NotFoundError, RepositoryError
from uploads_api.schemas import DataRecord, FileRecord
from uploads_api.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)

LINK_KEY_PREFIX = "uploadlink"
FALLBACK_FILENAME = "upload"


def now_ms(clock: Callable[[], float] = time.time) -> int:
    return int(clock() * 1000)


def make_upload_key(original_name: Optional[str], timestamp_ms: int) -> str:
    """`<millisecond-timestamp>-<original name>`.

    Only the last path component of the client's filename is kept. Two uploads
    of the same name within one millisecond get the same key.
    """
    name = PurePosixPath((original_name or "").replace("\\", "/")).name
    if name in ("", ".", ".."):
        name = FALLBACK_FILENAME
    return f"{timestamp_ms}-{name}"


def make_link_key(timestamp_ms: int) -> str:
    return f"{LINK_KEY_PREFIX}-{timestamp_ms}"


class IngestionCoordinator:
    """Every write path of the service: uploads, deletions and data items."""

    def __init__(
        self,
        blob_store: BlobStore,
        file_service: FileService,
        data_service: DataService,
        http_session: Optional[requests.Session] = None,
        fetch_timeout_seconds: float = 30.0,
        clock: Callable[[], float] = time.time,
    ):
        self.blob_store = blob_store
        self.file_service = file_service
        self.data_service = data_service
        # an injected session is shared by every request thread; without one each fetch opens its own
        self.http_session = http_session
        self.fetch_timeout_seconds = fetch_timeout_seconds
        self.clock = clock

    @contextmanager
    def _fetch_session(self) -> Iterator[requests.Session]:
        if self.http_session is not None:
            yield self.http_session
            return
        with requests.Session() as session:
            yield session

    @log_execution_time
    def upload_file(
        self,
        content: Optional[bytes],
        original_name: Optional[str],
        content_type: Optional[str],
        description: Optional[str] = None,
    ) -> FileRecord:
        """Store the payload, then record it. Returns the persisted record."""
        if content is None:
            raise BadInputError("File Upload Unsuccessful")

        key = make_upload_key(original_name, now_ms(self.clock))
        file_type = content_type or "application/octet-stream"
        file_url = self.blob_store.put(key, content, file_type)

        try:
            return self.file_service.create_file(
                file_type=file_type,
                file_size=len(content),
                file_url=file_url,
                file_name=key,
                file_description=description,
            )
        except RepositoryError:
            logger.error(f"Blob {key} was stored but its metadata record was not; the blob is orphaned")
            raise

    @log_execution_time
    def upload_link(self, link: Optional[str]) -> str:
        """Fetch `link` and stream its body into the blob store. Returns the blob URL only."""
        if not link or not link.strip():
            raise BadInputError("Download Link Missing")

        with self._fetch_session() as session:
            try:
                response = session.get(link.strip(), stream=True, timeout=self.fetch_timeout_seconds)
            except requests.RequestException as e:
                logger.warning(f"Fetching {link} failed: {e}")
                raise BadInputError("Failed to fetch the file from the download link") from e

            with response:
                if response.status_code != 200:
                    logger.warning(f"Fetching {link} returned HTTP {response.status_code}")
                    raise BadInputError("Failed to fetch the file from the download link")

                key = make_link_key(now_ms(self.clock))
                # undo any Content-Encoding so the stored bytes are the payload itself
                response.raw.decode_content = True
                return self.blob_store.put_stream(key, response.raw, response.headers.get("Content-Type"))

    @log_execution_time
    def delete_file(self, file_id: str) -> FileRecord:
        """Delete the blob, then the record. Returns the record as it was."""
        record = self.file_service.get_file(file_id)
        if record is None:
            raise NotFoundError("File not found")

        self.blob_store.delete(record.file_name)
        if not self.file_service.delete_file(file_id):
            logger.warning(f"File record {file_id} disappeared before it could be deleted")
        return record

    @log_execution_time
    def add_data(
        self,
        data_type: str,
        data_content: str,
        data_name: str,
        link: Optional[str] = None,
    ) -> DataRecord:
        """Record a data item; `link` is stored as given and never fetched."""
        if not data_type or not data_type.strip():
            raise BadInputError("Data type is required")
        return self.data_service.create_data(data_type, data_content, data_name, link)

    @log_execution_time
    def delete_data(self, data_id: str) -> DataRecord:
        """Delete a data item and return it as it was."""
        record = self.data_service.get_data(data_id)
        if record is None:
            raise NotFoundError("Data not found")
        if not self.data_service.delete_data(data_id):
            logger.warning(f"Data record {data_id} disappeared before it could be deleted")
        return record
