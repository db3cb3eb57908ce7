import logging

from fastapi import APIRouter, Depends

from database import DocumentStoreError
from uploads_api.dependencies import Services, get_services
from uploads_api.errors import BlobStoreError
from uploads_api.schemas import HealthResponse, StatusResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=StatusResponse)
def root() -> StatusResponse:
    return StatusResponse(message="Server is Running Fine")


@router.get("/health", response_model=HealthResponse)
def health_check(services: Services = Depends(get_services)) -> HealthResponse:
    """
    Health check endpoint for monitoring API status and component readiness.

    Returns status of the API, blob store and metadata store along with deployment mode.
    """
    components = {"api": "ready", "blob_store": "ready", "metadata_store": "ready"}

    try:
        services.blob_store.ping()
    except BlobStoreError as e:
        logger.warning(f"Blob store health check failed: {e}")
        components["blob_store"] = "unavailable"

    try:
        services.document_adapter.ping()
    except DocumentStoreError as e:
        logger.warning(f"Metadata store health check failed: {e}")
        components["metadata_store"] = "unavailable"

    ready = all(state == "ready" for state in components.values())
    return HealthResponse(
        status="ok" if ready else "degraded",
        message="Server is Running Fine" if ready else "Some components are unavailable",
        deployment_mode=services.settings.deployment_mode,
        components=components,
        ready=ready,
    )
