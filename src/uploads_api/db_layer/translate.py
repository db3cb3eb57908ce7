import logging
from contextlib import contextmanager

from database import DocumentStoreError
from uploads_api.errors import RepositoryError

logger = logging.getLogger(__name__)


@contextmanager
def repository_errors(action: str):
    """Translate document store failures into RepositoryError."""
    try:
        yield
    except DocumentStoreError as e:
        logger.error(f"Metadata store failed to {action}: {e}")
        raise RepositoryError(f"Metadata store failed to {action}") from e
