import pytest

from learnassist.domain.interfaces.cache import make_cache_key
from learnassist.infrastructure.cache.response_cache import InMemoryResponseCache


def test_cache_key_ignores_param_order():
    assert make_cache_key("/api/x", {"b": 2, "a": 1}) == make_cache_key("/api/x", {"a": 1, "b": 2})
    assert make_cache_key("/api/x") == make_cache_key("/api/x", {})
    assert make_cache_key("/api/x", {"a": 1}) != make_cache_key("/api/y", {"a": 1})


async def test_get_returns_stored_value_within_ttl(response_cache, clock):
    await response_cache.put("k", {"v": 1})
    clock.advance(299)
    assert await response_cache.get("k") == {"v": 1}


async def test_entry_expires_after_ttl(response_cache, clock):
    """An entry older than five minutes is treated as absent and dropped."""
    await response_cache.put("k", {"v": 1})
    clock.advance(300.5)
    assert await response_cache.get("k") is None
    assert len(response_cache) == 0


async def test_put_overwrites_and_restamps(response_cache, clock):
    await response_cache.put("k", "old")
    clock.advance(200)
    await response_cache.put("k", "new")
    clock.advance(200)
    assert await response_cache.get("k") == "new"


async def test_invalidate_and_clear(response_cache):
    await response_cache.put("a", 1)
    await response_cache.put("b", 2)
    await response_cache.invalidate("a")
    await response_cache.invalidate("missing")
    assert await response_cache.get("a") is None
    assert await response_cache.get("b") == 2
    await response_cache.clear()
    assert await response_cache.get("b") is None


async def test_oldest_entries_evicted_over_limit(clock):
    cache = InMemoryResponseCache(max_items=2, clock=clock)
    await cache.put("a", 1)
    await cache.put("b", 2)
    await cache.put("c", 3)
    assert await cache.get("a") is None
    assert await cache.get("b") == 2
    assert await cache.get("c") == 3
