from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from uploads_api.dependencies import get_coordinator, get_query_facade
from uploads_api.schemas import AddDataRequest, DataListResponse, DataResponse
from uploads_api.services import IngestionCoordinator, QueryFacade

router = APIRouter()


@router.post("/data", response_model=DataResponse, status_code=status.HTTP_201_CREATED)
def add_data(
    body: AddDataRequest,
    coordinator: IngestionCoordinator = Depends(get_coordinator),
) -> DataResponse:
    record = coordinator.add_data(
        data_type=body.data_type,
        data_content=body.data_content,
        data_name=body.data_name,
        link=body.link,
    )
    return DataResponse(message="Data added successfully", data=record)


@router.get("/data", response_model=DataListResponse)
def list_data(
    data_type: Optional[str] = Query(None, alias="type", description="Category to list"),
    page: Optional[str] = Query(None, description="1-indexed page number; defaults to 1"),
    page_size: Optional[str] = Query(None, description="Records per page"),
    query: QueryFacade = Depends(get_query_facade),
) -> DataListResponse:
    """List the items of one category, newest first. An empty page is a 404."""
    result = query.list_data(data_type, page=page, page_size=page_size)
    return DataListResponse(
        message="Data retrieved",
        data=result.items,
        page=result.page,
        page_size=result.page_size,
    )


@router.get("/data/all", response_model=DataListResponse)
def list_all_data(query: QueryFacade = Depends(get_query_facade)) -> DataListResponse:
    return DataListResponse(message="All data retrieved", data=query.list_all_data())


@router.get("/data/search", response_model=DataListResponse)
def search_data(
    data_type: Optional[str] = Query(None, alias="type", description="Category to search in"),
    q: Optional[str] = Query(None, description="Substring to look for in item names"),
    query: QueryFacade = Depends(get_query_facade),
) -> DataListResponse:
    """Case-insensitive substring search over names within one category."""
    return DataListResponse(message="Data retrieved", data=query.search_data(data_type, q))


@router.get("/data/{data_id}", response_model=DataResponse)
def get_data(
    data_id: str = Path(..., description="Identifier of the data item"),
    query: QueryFacade = Depends(get_query_facade),
) -> DataResponse:
    return DataResponse(message="Data retrieved", data=query.get_data(data_id))


@router.delete("/data/{data_id}", response_model=DataResponse)
def delete_data(
    data_id: str = Path(..., description="Identifier of the data item"),
    coordinator: IngestionCoordinator = Depends(get_coordinator),
) -> DataResponse:
    """Delete an item; its `link` is left alone."""
    return DataResponse(message="Data retrieved and deleted", data=coordinator.delete_data(data_id))
