"""
JSON schemas for document validation.
This module defines schemas for validating documents in the `files` and `data` collections.
"""

from datetime import datetime
from typing import Any, Dict

import jsonschema

FILES_COLLECTION = "files"
DATA_COLLECTION = "data"


# One document per stored blob
FILE_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "fileType": {"type": "string"},
        "fileSize": {"type": "integer", "minimum": 0},
        "fileUrl": {"type": "string", "minLength": 1},
        "fileName": {"type": "string", "minLength": 1},
        "fileDescription": {"type": ["string", "null"]},
        "uploadedDate": {"type": "string", "format": "date-time"}
    },
    "required": ["fileType", "fileSize", "fileUrl", "fileName", "uploadedDate"],
    "additionalProperties": False
}

# One document per externally referenced item; no blob behind it
DATA_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "dataType": {"type": "string", "minLength": 1},
        "dataContent": {"type": "string"},
        "dataName": {"type": "string"},
        "link": {"type": ["string", "null"]},
        "postedAt": {"type": "string", "format": "date-time"}
    },
    "required": ["dataType", "dataContent", "dataName", "postedAt"],
    "additionalProperties": False
}


def _as_json_types(document: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in document.items()
    }


def validate_file_document(document: Dict[str, Any]) -> None:
    """Validate file metadata document"""
    jsonschema.validate(_as_json_types(document), FILE_JSON_SCHEMA)


def validate_data_document(document: Dict[str, Any]) -> None:
    """Validate data item document"""
    jsonschema.validate(_as_json_types(document), DATA_JSON_SCHEMA)


DOCUMENT_SCHEMAS = {
    FILES_COLLECTION: FILE_JSON_SCHEMA,
    DATA_COLLECTION: DATA_JSON_SCHEMA,
}

DOCUMENT_VALIDATORS = {
    FILES_COLLECTION: validate_file_document,
    DATA_COLLECTION: validate_data_document,
}
