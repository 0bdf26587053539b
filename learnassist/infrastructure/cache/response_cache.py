"""Concrete implementation of the ResponseCache interface.

In-memory map from request fingerprint to payload with a single TTL
applied uniformly (no per-key override) and an insertion-ordered size
bound. Expired entries are treated as absent and dropped on access.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

# Domain Layer Imports
from learnassist.domain.interfaces.cache import ResponseCache
from learnassist.domain.models.common import CacheKey

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60  # 5 minutes
DEFAULT_MAX_ITEMS = 100

@dataclass
class CacheEntry:
    """Internal representation of a cache entry with its creation time."""
    value: Any
    created_at: float # Clock reading when the entry was stored

class InMemoryResponseCache(ResponseCache):
    """TTL cache for GET payloads, shared process-wide by the API client."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_items: int = DEFAULT_MAX_ITEMS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initializes the cache.

        Args:
            ttl_seconds: Age after which an entry is considered absent.
            max_items: Upper bound on stored entries; oldest are evicted first.
            clock: Monotonic time source, injectable for tests.
        """
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self.ttl_seconds = ttl_seconds
        self.max_items = max_items
        self._clock = clock
        logger.debug(f"InMemoryResponseCache initialized (ttl={ttl_seconds}s, max={max_items})")

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at > self.ttl_seconds

    def _prune(self) -> None:
        """Removes expired items and evicts oldest entries if over the limit."""
        now = self._clock()
        expired_keys = [k for k, v in self._entries.items() if self._is_expired(v, now)]
        for k in expired_keys:
            del self._entries[k]

        while len(self._entries) > self.max_items:
            # Dicts keep insertion order, so the first key is the oldest
            oldest_key = next(iter(self._entries))
            del self._entries[oldest_key]
            logger.debug(f"Cache EVICTED key: {oldest_key}")

    # --- ResponseCache Interface Implementation ---

    async def get(self, key: CacheKey) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            logger.debug(f"Cache EXPIRED key: {key}")
            return None
        logger.debug(f"Cache hit: {key}")
        return entry.value

    async def put(self, key: CacheKey, value: Any) -> None:
        # Re-inserting moves the key to the end of the eviction order
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(value=value, created_at=self._clock())
        self._prune()
        logger.debug(f"Cache save: {key}")

    async def invalidate(self, key: CacheKey) -> None:
        if self._entries.pop(key, None) is not None:
            logger.debug(f"Invalidated cache key: {key}")

    async def clear(self) -> None:
        self._entries.clear()
        logger.debug("Cleared response cache.")
