"""Pagination over the globally merged result list."""

from typing import TypeVar

T = TypeVar("T")


def compute_fetch_limit(limit: int, multiplier: int = 3, minimum: int = 60) -> int:
    """Number of items to request from each source.

    Over-fetching gives the merge enough material when one source dominates
    a page. Items ranked beyond this window in either source can still be
    missed on deep pages.
    """
    return max(limit * multiplier, minimum)


def paginate(items: list[T], offset: int, limit: int) -> list[T]:
    """Slice ``items[offset:offset + limit]``.

    Must only be applied to the merged, sorted list. An offset past the
    end yields an empty list.
    """
    offset = max(offset, 0)
    limit = max(limit, 0)
    return items[offset : offset + limit]
