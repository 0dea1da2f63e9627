"""Service layer for business logic."""

from app.services.search_service import FacetedSearchService

__all__ = [
    "FacetedSearchService",
]
