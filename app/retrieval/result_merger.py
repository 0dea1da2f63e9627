"""Merging of article and experience results into one globally sorted list."""

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any
from urllib.parse import urljoin, urlparse

from app.models.search import (
    ArticlePageItem,
    ContentItem,
    ExperienceItem,
    SearchResultItem,
    SourceType,
)
from app.retrieval.sort_order import (
    DATE_ASC,
    DATE_DESC,
    TITLE_ASC,
    TITLE_DESC,
    normalize_sort_key,
)

logger = logging.getLogger(__name__)


def parse_timestamp(value: str | None) -> float | None:
    """Parse an ISO-8601 timestamp into epoch seconds.

    Naive timestamps are read as UTC. Unparseable values return None.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.timestamp()


def normalize_url(url: str | None, domain: str | None) -> str | None:
    """Make a relative item URL absolute against ``domain``.

    Absolute URLs, and any URL when no usable domain is given, are returned
    unchanged.
    """
    if not url or not domain or urlparse(url).scheme:
        return url
    base = domain if urlparse(domain).scheme else f"https://{domain}"
    return urljoin(base.rstrip("/") + "/", url.lstrip("/"))


def tag_items(
    raw_items: Iterable[Mapping[str, Any] | ContentItem],
    source_type: SourceType,
    domain: str | None = None,
) -> list[SearchResultItem]:
    """Validate raw payloads into the variant model for ``source_type``.

    Every original field is kept; ``sourceType`` and the normalized ``url``
    are added.
    """
    model = ArticlePageItem if source_type == SourceType.ARTICLE_PAGE else ExperienceItem
    tagged: list[SearchResultItem] = []
    for raw in raw_items:
        if isinstance(raw, ContentItem):
            payload = raw.model_dump(by_alias=True, exclude={"title", "excerpt"})
        else:
            payload = dict(raw)
        payload["sourceType"] = source_type.value
        item = model.model_validate(payload)
        item.url = normalize_url(item.url or item.raw_url, domain)
        tagged.append(item)
    return tagged


def _sort_by_score(items: list[SearchResultItem]) -> list[SearchResultItem]:
    return sorted(items, key=lambda item: item.score or 0.0, reverse=True)


def _sort_by_date(items: list[SearchResultItem], descending: bool) -> list[SearchResultItem]:
    dated: list[tuple[float, SearchResultItem]] = []
    undated: list[SearchResultItem] = []
    for item in items:
        timestamp = parse_timestamp(item.sort_date)
        if timestamp is None:
            undated.append(item)
        else:
            dated.append((timestamp, item))

    # list.sort stays stable with reverse=True
    dated.sort(key=lambda pair: pair[0], reverse=descending)
    return [item for _, item in dated] + undated


def _sort_by_title(items: list[SearchResultItem], descending: bool) -> list[SearchResultItem]:
    return sorted(items, key=lambda item: item.title.casefold(), reverse=descending)


def sort_items(items: list[SearchResultItem], sort_order_key: str | None) -> list[SearchResultItem]:
    """Sort tagged items by the comparator derived from ``sort_order_key``.

    Equal keys keep their input order.
    """
    key = normalize_sort_key(sort_order_key)
    if key in (DATE_DESC, DATE_ASC):
        return _sort_by_date(items, descending=key == DATE_DESC)
    if key in (TITLE_ASC, TITLE_DESC):
        return _sort_by_title(items, descending=key == TITLE_DESC)
    return _sort_by_score(items)


def merge_and_sort(
    article_items: Iterable[Mapping[str, Any] | ContentItem] | None,
    experience_items: Iterable[Mapping[str, Any] | ContentItem] | None,
    sort_order_key: str | None,
    domain: str | None = None,
) -> list[SearchResultItem]:
    """Merge both result streams into one globally sorted list.

    The backend sorts each stream on its own, so the merged list is always
    re-sorted. Articles are placed before experiences ahead of the stable
    sort, which makes ties resolve articles-first and then by source index.

    Args:
        article_items: ArticlePage payloads in backend order
        experience_items: Experience payloads in backend order
        sort_order_key: Effective sort key
        domain: Domain used to make relative item URLs absolute

    Returns:
        All items from both inputs, tagged and sorted
    """
    articles = tag_items(article_items or [], SourceType.ARTICLE_PAGE, domain)
    experiences = tag_items(experience_items or [], SourceType.EXPERIENCE, domain)

    merged = sort_items(articles + experiences, sort_order_key)

    logger.info(
        f"Merged {len(articles)} articles + {len(experiences)} experiences "
        f"-> {len(merged)} items (sort={sort_order_key})"
    )
    return merged
