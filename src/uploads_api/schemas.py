####################################
# --- Request/response schemas --- #
####################################

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Fields are snake_case in Python and camelCase on the wire and in the database."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileRecord(CamelModel):
    """Metadata of a stored blob."""
    id: str = Field(description="Identifier assigned by the metadata store.")
    file_type: str = Field(
        description="MIME type declared by the uploader.",
        json_schema_extra={"example": "application/pdf"},
    )
    file_size: int = Field(description="The size of the file in bytes.")
    file_url: str = Field(description="Resolvable URL of the blob.")
    file_name: str = Field(
        description="Blob store key, not the uploader's filename.",
        json_schema_extra={"example": "1700000000000-report.pdf"},
    )
    file_description: Optional[str] = Field(None, description="Free text matched by file search.")
    uploaded_date: datetime = Field(description="When the record was inserted.")


class DataRecord(CamelModel):
    """A posted item; pure metadata with no blob behind it."""
    id: str
    data_type: str = Field(description="Category tag used as an exact-match filter.")
    data_content: str
    data_name: str = Field(description="Label matched by data search.")
    link: Optional[str] = Field(None, description="Source URL, stored as given.")
    posted_at: datetime


class UploadLinkRequest(CamelModel):
    """Request body for `POST /v1/files/link`."""
    link: str = Field(description="Remote URL to fetch and store.")


class AddDataRequest(CamelModel):
    """Request body for `POST /v1/data`."""
    data_type: str = Field(min_length=1, json_schema_extra={"example": "article"})
    data_content: str
    data_name: str
    link: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "dataType": "article",
                "dataContent": "Notes on the quarterly report",
                "dataName": "Quarterly notes",
                "link": "https://example.com/q3",
            }
        }
    )


class StatusResponse(CamelModel):
    status: str = "ok"
    message: str


class FileResponse(StatusResponse):
    """Response model for single-file routes."""
    file_data: FileRecord


class FileListResponse(StatusResponse):
    """Response model for `GET /v1/files` and friends."""
    files: List[FileRecord]
    page: Optional[int] = None
    page_size: Optional[int] = None


class LinkUploadResponse(StatusResponse):
    """Response model for `POST /v1/files/link`; no metadata record is created."""
    file_url: str


class DataResponse(StatusResponse):
    data: DataRecord


class DataListResponse(StatusResponse):
    data: List[DataRecord]
    page: Optional[int] = None
    page_size: Optional[int] = None


class HealthResponse(StatusResponse):
    deployment_mode: str
    components: Dict[str, str]
    ready: bool
