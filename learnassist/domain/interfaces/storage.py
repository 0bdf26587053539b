"""Interface for the persistent key-value store.

The store is opaque to the core: it only reads, writes and removes string
values. The credential is the one value the core persists itself.
"""

import abc
from typing import Optional

from ..models.common import StorageKey


class KeyValueStore(abc.ABC):
    """Abstract Base Class for durable string storage."""

    @abc.abstractmethod
    async def get_item(self, key: StorageKey) -> Optional[str]:
        """Returns the stored value, or None if the key is absent."""
        pass

    @abc.abstractmethod
    async def set_item(self, key: StorageKey, value: str) -> None:
        """Stores a value durably. Raises OSError-derived errors on failure."""
        pass

    @abc.abstractmethod
    async def remove_item(self, key: StorageKey) -> None:
        """Removes a key. Removing a missing key is a no-op."""
        pass
