"""Interface for the response cache.

Defines the contract for storing, retrieving and invalidating payloads of
idempotent GET requests under a uniform time-to-live.
"""

import abc
import json
from typing import Any, Optional

# Import relevant domain models
from ..models.common import CacheKey, QueryParams


def make_cache_key(path: str, params: Optional[QueryParams] = None) -> CacheKey:
    """Fingerprints a GET request as '<path>:<params as sorted JSON>'.

    Parameter order never affects the key; no parameters and an empty
    mapping produce the same key.
    """
    normalized = json.dumps(params or {}, sort_keys=True, separators=(",", ":"), default=str)
    return CacheKey(f"{path}:{normalized}")


class ResponseCache(abc.ABC):
    """Abstract Base Class for response caching operations."""

    @abc.abstractmethod
    async def get(self, key: CacheKey) -> Optional[Any]:
        """Retrieves a payload from the cache asynchronously.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached payload if present and younger than the TTL, otherwise None.
        """
        pass

    @abc.abstractmethod
    async def put(self, key: CacheKey, value: Any) -> None:
        """Stores a payload under the given key, stamped with the current time.

        Args:
            key: The cache key to store the payload under.
            value: The payload to store.
        """
        pass

    @abc.abstractmethod
    async def invalidate(self, key: CacheKey) -> None:
        """Removes a single entry. Removing a missing key is a no-op."""
        pass

    @abc.abstractmethod
    async def clear(self) -> None:
        """Removes every entry."""
        pass
