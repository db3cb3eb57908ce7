from typing import Optional

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Path,
    Query,
    UploadFile,
    status
)

from uploads_api.dependencies import get_coordinator, get_query_facade
from uploads_api.schemas import (
    FileListResponse,
    FileResponse,
    LinkUploadResponse,
    StatusResponse,
    UploadLinkRequest,
)
from uploads_api.services import IngestionCoordinator, QueryFacade

router = APIRouter()


@router.post("/files", response_model=FileResponse, status_code=status.HTTP_201_CREATED)
def upload_file(
    file: Optional[UploadFile] = File(None, description="The file to upload"),
    description: Optional[str] = Query(None, description="Free text stored with the file and matched by search"),
    form_description: Optional[str] = Form(
        None, alias="description", description="Same as the query parameter, sent as a form field"
    ),
    coordinator: IngestionCoordinator = Depends(get_coordinator),
) -> FileResponse:
    """
    Upload a file: the bytes go to the blob store, then a metadata record is saved.

    Returns:
        FileResponse: The persisted record, including the blob URL and key
    """
    content = file.file.read() if file is not None else None
    record = coordinator.upload_file(
        content=content,
        original_name=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
        description=description if description is not None else form_description,
    )
    return FileResponse(message="File Uploaded Successfully", file_data=record)


@router.post("/files/link", response_model=LinkUploadResponse)
def upload_link(
    body: UploadLinkRequest,
    coordinator: IngestionCoordinator = Depends(get_coordinator),
) -> LinkUploadResponse:
    """
    Fetch a remote URL and stream it into the blob store.

    Only the blob URL is returned; no metadata record is created.
    """
    file_url = coordinator.upload_link(body.link)
    return LinkUploadResponse(message="File Uploaded Successfully", file_url=file_url)


@router.get("/files", response_model=FileListResponse)
def list_files(
    page: Optional[str] = Query(None, description="1-indexed page number; defaults to 1"),
    page_size: Optional[str] = Query(None, description="Records per page"),
    query: QueryFacade = Depends(get_query_facade),
) -> FileListResponse:
    """List file records, newest first. An empty page is a 404."""
    result = query.list_files(page=page, page_size=page_size)
    return FileListResponse(
        message="Files retrieved",
        files=result.items,
        page=result.page,
        page_size=result.page_size,
    )


@router.get("/files/all", response_model=FileListResponse)
def list_all_files(query: QueryFacade = Depends(get_query_facade)) -> FileListResponse:
    return FileListResponse(message="All files retrieved", files=query.list_all_files())


@router.get("/files/search", response_model=FileListResponse)
def search_files(
    q: Optional[str] = Query(None, description="Substring to look for in file descriptions"),
    query: QueryFacade = Depends(get_query_facade),
) -> FileListResponse:
    """Case-insensitive substring search over descriptions, newest first."""
    return FileListResponse(message="Files retrieved", files=query.search_files(q))


@router.get("/files/{file_id}", response_model=FileResponse)
def get_file(
    file_id: str = Path(..., description="Identifier of the file record"),
    query: QueryFacade = Depends(get_query_facade),
) -> FileResponse:
    return FileResponse(message="File details retrieved", file_data=query.get_file(file_id))


@router.delete("/files/{file_id}", response_model=StatusResponse)
def delete_file(
    file_id: str = Path(..., description="Identifier of the file record"),
    coordinator: IngestionCoordinator = Depends(get_coordinator),
) -> StatusResponse:
    """Delete the blob, then its record."""
    coordinator.delete_file(file_id)
    return StatusResponse(message="File deleted successfully")
