"""
Uploads API Database Layer

Metadata repositories for stored files and posted data items, built on the
document adapters in the `database` package.
"""

from .file_service import FileService
from .data_service import DataService

__all__ = ['FileService', 'DataService']
