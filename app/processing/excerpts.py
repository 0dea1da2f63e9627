"""Title and excerpt resolution for search result items.

Both content variants expose their display text under different fields, so
every helper here dispatches on ``source_type`` and walks a fixed fallback
chain:

- Experience: SEO MetaTitle -> display name -> "Untitled" for the title,
  SEO MetaDescription -> joined ``_fulltext`` with tags stripped (truncated)
  -> "" for the excerpt.
- ArticlePage: Heading -> display name -> "Untitled" for the title,
  body HTML with tags stripped (truncated) -> "" for the excerpt.
"""

import re
from typing import Any

EXPERIENCE = "Experience"
UNTITLED = "Untitled"
DEFAULT_EXCERPT_LENGTH = 200

_TAG_PATTERN = re.compile(r"<[^>]*>")


def strip_html(html: str | None) -> str:
    """Remove anything that looks like a tag from ``html``."""
    if not html:
        return ""
    return _TAG_PATTERN.sub("", html)


def truncate_text(text: str, max_length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """Cut ``text`` at ``max_length`` characters and append an ellipsis.

    Text that already fits is returned unchanged.
    """
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


def get_excerpt(html: str | None, max_length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """Strip tags from ``html`` and truncate the remaining text.

    Args:
        html: HTML fragment, may be None
        max_length: Maximum number of characters kept before the ellipsis

    Returns:
        Plain-text excerpt
    """
    return truncate_text(strip_html(html), max_length)


def is_experience(item: Any) -> bool:
    """Check whether a result item is an Experience."""
    return getattr(item, "source_type", None) == EXPERIENCE


def _seo_field(item: Any, name: str) -> str | None:
    seo = getattr(item, "seo_settings", None)
    return getattr(seo, name, None) if seo else None


def get_title(item: Any) -> str:
    """Resolve the display title of a result item."""
    if is_experience(item):
        return _seo_field(item, "meta_title") or getattr(item, "display_name", None) or UNTITLED
    return getattr(item, "heading", None) or getattr(item, "display_name", None) or UNTITLED


def get_content_excerpt(item: Any, max_length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """Resolve the display excerpt of a result item."""
    if is_experience(item):
        description = _seo_field(item, "meta_description")
        if description:
            return description

        fulltext = getattr(item, "fulltext", None)
        if isinstance(fulltext, list):
            fulltext = " ".join(str(part) for part in fulltext)
        return get_excerpt(fulltext, max_length)

    body = getattr(item, "body", None)
    html = getattr(body, "html", None) if body else None
    return get_excerpt(html, max_length) if html else ""
