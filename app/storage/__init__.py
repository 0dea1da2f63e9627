"""Caching components."""

from app.storage.result_cache import CacheEntry, ResultCache, TTLCache

__all__ = [
    "CacheEntry",
    "ResultCache",
    "TTLCache",
]
