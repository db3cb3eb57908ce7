import logging
from typing import Optional, Union

from .mongo_adapter import MongoAdapter
from .nosql_adapter import NoSQLAdapter

logger = logging.getLogger(__name__)

DocumentAdapter = Union[MongoAdapter, NoSQLAdapter]


def get_document_adapter(
    mongodb_uri: Optional[str] = None,
    mongodb_database: str = "uploads",
    db_path: str = "uploads.db",
) -> DocumentAdapter:
    """MongoDB when a connection string is given, the sqlite document store otherwise."""
    if mongodb_uri:
        return MongoAdapter(mongodb_uri, database_name=mongodb_database)
    return NoSQLAdapter(db_path)


def init_db(
    mongodb_uri: Optional[str] = None,
    mongodb_database: str = "uploads",
    db_path: str = "uploads.db",
) -> DocumentAdapter:
    """Create the adapter and make sure its collections and indexes exist."""
    adapter = get_document_adapter(mongodb_uri, mongodb_database, db_path)
    adapter.init_collections()
    logger.info(f"Initialized {type(adapter).__name__} document store")
    return adapter
