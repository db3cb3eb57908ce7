"""
Service layer: the ingestion coordinator (all writes) and the query facade (all reads).
"""

from .ingestion import IngestionCoordinator
from .query import Page, QueryFacade

__all__ = ['IngestionCoordinator', 'QueryFacade', 'Page']
