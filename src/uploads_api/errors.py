"""Error taxonomy and the FastAPI handlers that turn it into response envelopes."""

import logging

import pydantic
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

INTERNAL_SERVER_ERROR_MESSAGE = "Internal Server Error"


class UploadsApiError(Exception):
    """Base class for every error raised by the uploads service."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = INTERNAL_SERVER_ERROR_MESSAGE):
        super().__init__(message)
        self.message = message


class BadInputError(UploadsApiError):
    """The request is missing something required or carries an unusable value."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(UploadsApiError):
    """A lookup by id, a page, or a search produced nothing."""

    status_code = status.HTTP_404_NOT_FOUND


class ExternalServiceError(UploadsApiError):
    """The blob store or the metadata store failed."""


class BlobStoreError(ExternalServiceError):
    pass


class RepositoryError(ExternalServiceError):
    pass


def error_envelope(message: str) -> dict:
    return {"status": "error", "message": message}


async def handle_uploads_api_errors(request: Request, exc: UploadsApiError) -> JSONResponse:
    """Render domain errors; external failures never leak their cause to the caller."""
    if isinstance(exc, ExternalServiceError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc.__cause__)
        message = INTERNAL_SERVER_ERROR_MESSAGE
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
        message = exc.message
    return JSONResponse(status_code=exc.status_code, content=error_envelope(message))


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or malformed request fields are bad input."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(f"Invalid request: {problems}"),
    )


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope("; ".join(error["msg"] for error in errors)),
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception as err:
        logger.exception(err)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_envelope(INTERNAL_SERVER_ERROR_MESSAGE),
        )
