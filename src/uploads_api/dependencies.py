"""
Service construction and FastAPI dependencies.

External clients are built once in `build_services` and handed to the
coordinator and the query facade explicitly; routes reach them through
`request.app.state.services`.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests
from fastapi import Request

from database.local import DocumentAdapter, init_db
from uploads_api.adapters.storage import BlobStore, create_blob_store
from uploads_api.config.settings import Settings
from uploads_api.db_layer import DataService, FileService
from uploads_api.services import IngestionCoordinator, QueryFacade

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    blob_store: BlobStore
    document_adapter: DocumentAdapter
    coordinator: IngestionCoordinator
    query: QueryFacade


def build_services(
    settings: Settings,
    blob_store: Optional[BlobStore] = None,
    document_adapter: Optional[DocumentAdapter] = None,
    http_session: Optional[requests.Session] = None,
) -> Services:
    """Wire the blob store and metadata store into the coordinator and the query facade."""
    blob_store = blob_store or create_blob_store(settings)
    if document_adapter is None:
        logger.info("creating db")
        document_adapter = init_db(
            mongodb_uri=settings.mongodb_uri,
            mongodb_database=settings.mongodb_database,
            db_path=settings.database_path,
        )

    file_service = FileService(document_adapter)
    data_service = DataService(document_adapter)
    coordinator = IngestionCoordinator(
        blob_store=blob_store,
        file_service=file_service,
        data_service=data_service,
        http_session=http_session,
        fetch_timeout_seconds=settings.fetch_timeout_seconds,
    )
    query = QueryFacade(
        file_service=file_service,
        data_service=data_service,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )
    return Services(
        settings=settings,
        blob_store=blob_store,
        document_adapter=document_adapter,
        coordinator=coordinator,
        query=query,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_coordinator(request: Request) -> IngestionCoordinator:
    return request.app.state.services.coordinator


def get_query_facade(request: Request) -> QueryFacade:
    return request.app.state.services.query
