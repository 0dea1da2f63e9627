"""Tests for the TTL result cache."""

import pytest

from app.storage.result_cache import TTLCache


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


class TestTTLCache:
    """Expiry and eviction driven by an injected clock."""

    def test_get_before_expiry(self, clock):
        cache = TTLCache(ttl=60, clock=clock)
        cache.set("k", "v")

        clock.advance(59.9)

        assert cache.get("k") == "v"

    def test_entry_expires_at_ttl(self, clock):
        cache = TTLCache(ttl=60, clock=clock)
        cache.set("k", "v")

        clock.advance(60)

        assert cache.get("k") is None
        assert len(cache) == 0

    def test_missing_key(self, clock):
        assert TTLCache(ttl=60, clock=clock).get("nope") is None

    def test_set_refreshes_expiry(self, clock):
        cache = TTLCache(ttl=60, clock=clock)
        cache.set("k", 1)
        clock.advance(50)
        cache.set("k", 2)
        clock.advance(50)

        assert cache.get("k") == 2

    def test_expired_entries_swept_when_full(self, clock):
        cache = TTLCache(ttl=10, max_entries=2, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        clock.advance(11)

        cache.set("c", 3)

        assert len(cache) == 1
        assert cache.get("c") == 3

    def test_soonest_expiring_evicted_when_full(self, clock):
        cache = TTLCache(ttl=10, max_entries=2, clock=clock)
        cache.set("a", 1)
        clock.advance(1)
        cache.set("b", 2)
        clock.advance(1)
        cache.set("c", 3)

        assert len(cache) == 2
        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_evict_expired_and_stats(self, clock):
        cache = TTLCache(ttl=10, clock=clock)
        cache.set("a", 1)
        clock.advance(5)
        cache.set("b", 2)
        clock.advance(6)

        assert cache.stats() == {"total": 2, "active": 1, "expired": 1}
        assert cache.evict_expired() == 1
        assert cache.stats() == {"total": 1, "active": 1, "expired": 0}

    def test_clear(self, clock):
        cache = TTLCache(ttl=10, clock=clock)
        cache.set("a", 1)

        cache.clear()

        assert len(cache) == 0

    @pytest.mark.parametrize(("ttl", "max_entries"), [(0, 10), (-1, 10), (10, 0)])
    def test_invalid_arguments(self, ttl, max_entries):
        with pytest.raises(ValueError):
            TTLCache(ttl=ttl, max_entries=max_entries)
