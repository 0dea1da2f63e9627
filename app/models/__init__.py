"""Pydantic models for the faceted search service."""

from app.models.error import ErrorResponse
from app.models.facet import Facet, FacetConfig, FacetValue
from app.models.query import FacetedSearchRequest
from app.models.search import (
    ArticlePageItem,
    ContentMetadata,
    ContentUrl,
    ExperienceItem,
    FacetedSearchResult,
    MergedSearchResponse,
    RichText,
    SearchResultItem,
    SeoSettings,
    SourceResultBlock,
    SourceType,
)

__all__ = [
    # Result item models
    "SourceType",
    "ContentUrl",
    "ContentMetadata",
    "SeoSettings",
    "RichText",
    "ArticlePageItem",
    "ExperienceItem",
    "SearchResultItem",
    "SourceResultBlock",
    "FacetedSearchResult",
    "MergedSearchResponse",
    # Facet models
    "Facet",
    "FacetConfig",
    "FacetValue",
    # Request models
    "FacetedSearchRequest",
    # Error models
    "ErrorResponse",
]
