"""
Document store adapters shared by the metadata repositories.

`MongoAdapter` and `NoSQLAdapter` expose the same interface; `get_document_adapter`
picks one from settings.
"""


class DocumentStoreError(Exception):
    """A document store operation failed; the driver exception is chained."""


class DocumentValidationError(DocumentStoreError):
    """A document did not match its collection schema."""
