"""Faceted search request model and query-string parsing."""

import hashlib
import json
import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from app.config import Settings, get_settings


def _parse_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        parsed = float(value.strip())
    except ValueError:
        return default
    return default if math.isnan(parsed) else parsed


def _clean_list(values: list[str]) -> list[str]:
    return [v.strip() for v in values if v and v.strip()]


class FacetedSearchRequest(BaseModel):
    """Normalized faceted search parameters."""

    search_term: str | None = Field(default=None, description="Full-text search term")
    locale: str = Field(default="en", min_length=1)
    domain: str | None = Field(default=None, description="Site domain used for URL filtering")
    limit: int = Field(default=20, ge=1, description="Page size")
    offset: int = Field(default=0, ge=0, description="Page offset into the merged results")
    sort: str = Field(default="relevance", description="Sort order key")
    use_semantic_search: bool = False
    semantic_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    author_filters: list[str] = Field(default_factory=list)
    type_filters: list[str] = Field(default_factory=list)

    @classmethod
    def from_query_params(
        cls,
        params: Any,
        origin: str | None = None,
        settings: Settings | None = None,
    ) -> "FacetedSearchRequest":
        """Build a request from raw query parameters.

        Malformed or missing values fall back to defaults instead of being
        rejected. ``params`` may be a Starlette ``QueryParams`` (or any
        multi-dict with ``getlist``) or a plain mapping.

        Args:
            params: Raw query parameters
            origin: Request origin used when no domain is given
            settings: Settings supplying the defaults

        Returns:
            Normalized FacetedSearchRequest
        """
        settings = settings or get_settings()

        def get_list(name: str) -> list[str]:
            if hasattr(params, "getlist"):
                return list(params.getlist(name))
            value = params.get(name) if isinstance(params, Mapping) else None
            if value is None:
                return []
            return list(value) if isinstance(value, (list, tuple)) else [value]

        search_term = (params.get("q") or "").strip() or None
        locale = (params.get("locale") or "").strip() or settings.default_locale
        domain = (params.get("domain") or "").strip() or origin

        limit = _parse_int(params.get("limit"), settings.default_limit)
        if limit < 1:
            limit = settings.default_limit
        limit = min(limit, settings.max_limit)

        offset = max(_parse_int(params.get("offset"), 0), 0)

        sort = (params.get("sort") or "").strip() or settings.default_sort

        use_semantic_search = (params.get("useSemanticSearch") or "").strip().lower() == "true"

        semantic_weight = _parse_float(
            params.get("semanticWeight"), settings.default_semantic_weight
        )
        semantic_weight = min(max(semantic_weight, 0.0), 1.0)

        return cls(
            search_term=search_term,
            locale=locale,
            domain=domain,
            limit=limit,
            offset=offset,
            sort=sort,
            use_semantic_search=use_semantic_search,
            semantic_weight=semantic_weight,
            author_filters=_clean_list(get_list("authors[]")),
            type_filters=_clean_list(get_list("types[]")),
        )

    @property
    def excludes_experiences(self) -> bool:
        """Experiences have no author, so an author filter drops them."""
        return bool(self.author_filters)

    def fingerprint(self) -> str:
        """Stable cache key for this request."""
        data = self.model_dump()
        data["author_filters"] = sorted(self.author_filters)
        data["type_filters"] = sorted(self.type_filters)
        serialized = json.dumps(data, sort_keys=True)
        return f"faceted-search:{hashlib.md5(serialized.encode()).hexdigest()}"
