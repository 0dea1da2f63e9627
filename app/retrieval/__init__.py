"""Sorting, merging and pagination of content graph search results."""

from app.retrieval.facet_merger import merge_facet_values, merge_facets
from app.retrieval.pagination import compute_fetch_limit, paginate
from app.retrieval.result_merger import merge_and_sort, normalize_url, sort_items, tag_items
from app.retrieval.sort_order import SortOrder, build_sort_order, normalize_sort_key

__all__ = [
    "SortOrder",
    "build_sort_order",
    "compute_fetch_limit",
    "merge_and_sort",
    "merge_facet_values",
    "merge_facets",
    "normalize_sort_key",
    "normalize_url",
    "paginate",
    "sort_items",
    "tag_items",
]
