"""Ordering directives for the article and experience sub-queries."""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

RELEVANCE = "relevance"
SEMANTIC = "semantic"
DATE_DESC = "date_desc"
DATE_ASC = "date_asc"
TITLE_ASC = "title_asc"
TITLE_DESC = "title_desc"

SORT_KEYS = (RELEVANCE, SEMANTIC, DATE_DESC, DATE_ASC, TITLE_ASC, TITLE_DESC)
RANKED_SORT_KEYS = {RELEVANCE, SEMANTIC}

# The two content types name equivalent fields differently.
ARTICLE_ORDER_BY: dict[str, dict[str, Any]] = {
    RELEVANCE: {"_ranking": "RELEVANCE"},
    SEMANTIC: {"_ranking": "SEMANTIC"},
    DATE_DESC: {"_metadata": {"published": "DESC"}},
    DATE_ASC: {"_metadata": {"published": "ASC"}},
    TITLE_ASC: {"Heading": "ASC"},
    TITLE_DESC: {"Heading": "DESC"},
}

EXPERIENCE_ORDER_BY: dict[str, dict[str, Any]] = {
    RELEVANCE: {"_ranking": "RELEVANCE"},
    SEMANTIC: {"_ranking": "SEMANTIC"},
    DATE_DESC: {"_metadata": {"lastModified": "DESC"}},
    DATE_ASC: {"_metadata": {"lastModified": "ASC"}},
    TITLE_ASC: {"_metadata": {"displayName": "ASC"}},
    TITLE_DESC: {"_metadata": {"displayName": "DESC"}},
}


@dataclass
class SortOrder:
    """Ordering sent to the backend plus the key the merger re-sorts by.

    Attributes:
        key: Effective sort key after fallbacks
        article_order_by: orderBy directive for the ArticlePage query
        experience_order_by: orderBy directive for the Experience query
        semantic_weight: Blend weight encoded into the directives, if any
    """

    key: str
    article_order_by: dict[str, Any] = field(default_factory=dict)
    experience_order_by: dict[str, Any] = field(default_factory=dict)
    semantic_weight: float | None = None


def normalize_sort_key(sort_order_key: str | None) -> str:
    """Map a requested sort key onto a supported one, defaulting to relevance."""
    key = (sort_order_key or "").strip().lower()
    if key not in SORT_KEYS:
        if key:
            logger.warning(f"Unknown sort order '{sort_order_key}', using '{RELEVANCE}'")
        return RELEVANCE
    return key


def build_sort_order(
    sort_order_key: str | None,
    search_term: str | None,
    use_semantic_search: bool = False,
    semantic_weight: float = 0.3,
) -> SortOrder:
    """Build the per-content-type ordering directives.

    Ranking is meaningless without a search term, so relevance and semantic
    orderings fall back to newest first in that case.

    When semantic search is requested for a ranked query the weight is
    encoded as ``_semanticWeight``; the backend then scores each hit as
    ``weight * semantic + (1 - weight) * text``. Pure semantic ranking
    carries no weight.

    Args:
        sort_order_key: Requested sort key
        search_term: Search term, may be None or blank
        use_semantic_search: Whether to blend in vector similarity
        semantic_weight: Interpolation factor, clamped to [0.0, 1.0]

    Returns:
        SortOrder with one directive per content type
    """
    key = normalize_sort_key(sort_order_key)
    has_term = bool(search_term and search_term.strip())

    if key in RANKED_SORT_KEYS and not has_term:
        key = DATE_DESC

    article_order_by = copy.deepcopy(ARTICLE_ORDER_BY[key])
    experience_order_by = copy.deepcopy(EXPERIENCE_ORDER_BY[key])

    weight = None
    if use_semantic_search and has_term and key != SEMANTIC:
        weight = min(max(float(semantic_weight), 0.0), 1.0)
        article_order_by["_semanticWeight"] = weight
        experience_order_by["_semanticWeight"] = weight

    logger.debug(
        f"Sort order: requested={sort_order_key!r} effective={key} semantic_weight={weight}"
    )

    return SortOrder(
        key=key,
        article_order_by=article_order_by,
        experience_order_by=experience_order_by,
        semantic_weight=weight,
    )
