import logging
from textwrap import dedent
from typing import Optional

import pydantic
import requests
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from fastapi.staticfiles import StaticFiles

from database.local import DocumentAdapter
from uploads_api.adapters.storage import LOCAL_BLOB_ROUTE, BlobStore, LocalBlobStore
from uploads_api.config.settings import Settings
from uploads_api.dependencies import build_services
from uploads_api.errors import (
    UploadsApiError,
    handle_broad_exceptions,
    handle_pydantic_validation_errors,
    handle_request_validation_errors,
    handle_uploads_api_errors,
)
from uploads_api.routers.data import router as data_router
from uploads_api.routers.files import router as files_router
from uploads_api.routers.health import router as health_router

# Set up logging
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    blob_store: Optional[BlobStore] = None,
    document_adapter: Optional[DocumentAdapter] = None,
    http_session: Optional[requests.Session] = None,
) -> FastAPI:
    """Create a FastAPI application.

    The blob store, document adapter and HTTP session are built from settings
    unless passed in.
    """
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(
        title="Uploads API",
        summary="Store blobs and the metadata that describes them",
        version="v1",
        description=dedent(
            """\
        Uploaded bytes live in a blob store (S3 or a local directory); their
        metadata lives in a document store (MongoDB or sqlite).

        | Helpful Links | Notes |
        | --- | --- |
        | [FastAPI Documentation](https://fastapi.tiangolo.com/) | |
        """
        ),
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.services = build_services(
        settings,
        blob_store=blob_store,
        document_adapter=document_adapter,
        http_session=http_session,
    )

    app.include_router(files_router, prefix="/v1", tags=["files"])
    app.include_router(data_router, prefix="/v1", tags=["data"])
    app.include_router(health_router, tags=["health"])

    local_store = app.state.services.blob_store
    if isinstance(local_store, LocalBlobStore):
        app.mount(LOCAL_BLOB_ROUTE, StaticFiles(directory=local_store.storage_dir), name="blobs")

    app.add_exception_handler(UploadsApiError, handle_uploads_api_errors)
    app.add_exception_handler(RequestValidationError, handle_request_validation_errors)
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    logger.info(f"{settings.app_name} ready in {settings.deployment_mode} mode")
    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)
