"""Time-boxed cache for merged search responses."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class ResultCache(Protocol):
    """Cache backend injected into the search service."""

    def get(self, key: str) -> Any:
        """Return the cached value or None."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Store a value under ``key``."""
        ...

    def clear(self) -> None:
        """Drop every entry."""
        ...


@dataclass
class CacheEntry:
    """Cached value with its absolute expiry time."""

    value: Any
    expiry: float


class TTLCache:
    """In-process cache mapping keys to values with a fixed time-to-live.

    The clock is injectable so expiry can be driven deterministically.
    Expired entries are dropped on read and swept whenever the cache grows
    past ``max_entries``; if it is still full, the entries closest to expiry
    go first.
    """

    def __init__(
        self,
        ttl: float,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            ttl: Entry lifetime in seconds
            max_entries: Maximum number of live entries
            clock: Function returning the current time in seconds
        """
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")

        self.ttl = ttl
        self.max_entries = max_entries
        self.clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self.clock() >= entry.expiry:
            del self._entries[key]
            return None

        return entry.value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, expiry=self.clock() + self.ttl)

        if len(self._entries) > self.max_entries:
            self.evict_expired()

        if len(self._entries) > self.max_entries:
            overflow = len(self._entries) - self.max_entries
            oldest = sorted(self._entries.items(), key=lambda kv: kv[1].expiry)[:overflow]
            for stale_key, _ in oldest:
                del self._entries[stale_key]

    def evict_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expiry]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Cleared search result cache")

    def stats(self) -> dict[str, int]:
        """Count live and expired entries."""
        now = self.clock()
        active = sum(1 for entry in self._entries.values() if now < entry.expiry)
        return {
            "total": len(self._entries),
            "active": active,
            "expired": len(self._entries) - active,
        }
