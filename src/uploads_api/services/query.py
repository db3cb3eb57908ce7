"""
Read-only queries over the metadata repositories.

Turns raw request parameters into repository calls. An empty page or an empty
search result is reported as NotFoundError, the same as an unknown id.
"""

import logging
from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar, Union

from uploads_api.db_layer import DataService, FileService
from uploads_api.errors import BadInputError, NotFoundError
from uploads_api.schemas import DataRecord, FileRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

RawParam = Union[str, int, None]

# sqlite and MongoDB both take skip offsets as signed 64-bit integers
MAX_OFFSET = 2**63 - 1


@dataclass
class Page(Generic[T]):
    items: List[T]
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def resolve_page(raw: RawParam) -> int:
    """1-indexed page number; anything absent, unparseable or non-positive means page 1."""
    try:
        page = int(raw)
    except (TypeError, ValueError):
        return 1
    return page if page > 0 else 1


def _require(value: Optional[str], message: str) -> str:
    if value is None or not value.strip():
        raise BadInputError(message)
    return value


class QueryFacade:
    """Listing, search and lookup for files and data items"""

    def __init__(
        self,
        file_service: FileService,
        data_service: DataService,
        default_page_size: int = 10,
        max_page_size: int = 100,
    ):
        self.file_service = file_service
        self.data_service = data_service
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def resolve_page_size(self, raw: RawParam) -> int:
        """Absent means the default; sizes above the maximum are capped."""
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return self.default_page_size
        try:
            page_size = int(raw)
        except (TypeError, ValueError):
            raise BadInputError(f"Invalid page size: {raw!r}")
        if page_size < 1:
            raise BadInputError("Page size must be a positive integer")
        return min(page_size, self.max_page_size)

    def _page_bounds(self, page: RawParam, page_size: RawParam) -> Page:
        return Page(items=[], page=resolve_page(page), page_size=self.resolve_page_size(page_size))

    # Files

    def list_files(self, page: RawParam = None, page_size: RawParam = None) -> Page[FileRecord]:
        result = self._page_bounds(page, page_size)
        if result.offset <= MAX_OFFSET:
            result.items = self.file_service.list_files(skip=result.offset, limit=result.page_size)
        if not result.items:
            raise NotFoundError("No files found")
        return result

    def list_all_files(self) -> List[FileRecord]:
        files = self.file_service.list_all_files()
        if not files:
            raise NotFoundError("No files found")
        return files

    def search_files(self, term: Optional[str]) -> List[FileRecord]:
        term = _require(term, "Search term is required")
        files = self.file_service.search_files(term)
        if not files:
            raise NotFoundError("No files found")
        return files

    def get_file(self, file_id: str) -> FileRecord:
        record = self.file_service.get_file(file_id)
        if record is None:
            raise NotFoundError("File not found")
        return record

    # Data items

    def list_data(
        self,
        data_type: Optional[str],
        page: RawParam = None,
        page_size: RawParam = None,
    ) -> Page[DataRecord]:
        data_type = _require(data_type, "Data type is required")
        result = self._page_bounds(page, page_size)
        if result.offset <= MAX_OFFSET:
            result.items = self.data_service.list_data(data_type, skip=result.offset, limit=result.page_size)
        if not result.items:
            raise NotFoundError("No data found")
        return result

    def list_all_data(self) -> List[DataRecord]:
        items = self.data_service.list_all_data()
        if not items:
            raise NotFoundError("No data found")
        return items

    def search_data(self, data_type: Optional[str], term: Optional[str]) -> List[DataRecord]:
        data_type = _require(data_type, "Data type is required")
        term = _require(term, "Search term is required")
        items = self.data_service.search_data(data_type, term)
        if not items:
            raise NotFoundError("No data found")
        return items

    def get_data(self, data_id: str) -> DataRecord:
        record = self.data_service.get_data(data_id)
        if record is None:
            raise NotFoundError("Data not found")
        return record
