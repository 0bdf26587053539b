"""Concrete implementation of the KeyValueStore interface on top of diskcache.

diskcache is synchronous and SQLite-backed, so every call is moved to a
worker thread to keep the event loop responsive. Backend failures surface
as OSError, which is what callers of KeyValueStore handle.
"""

import asyncio
import logging
import sqlite3
from pathlib import Path
from typing import Any, Callable, Optional, Union

import diskcache as dc

from learnassist.domain.interfaces.storage import KeyValueStore
from learnassist.domain.models.common import StorageKey

logger = logging.getLogger(__name__)


class DiskKeyValueStore(KeyValueStore):
    """Durable string storage in a local diskcache directory."""

    def __init__(self, directory: Union[str, Path], timeout: float = 1.0):
        """Opens (or creates) the store.

        Args:
            directory: Directory holding the diskcache database.
            timeout: SQLite lock timeout in seconds.
        """
        self.directory = Path(directory).expanduser()
        self.directory.mkdir(parents=True, exist_ok=True)
        # No default expire: stored items never age out on their own
        self._cache = dc.Cache(str(self.directory), timeout=timeout)
        logger.debug(f"DiskKeyValueStore opened at: {self._cache.directory}")

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(func, *args)
        except (dc.Timeout, sqlite3.Error) as e:
            raise OSError(f"Key-value store at {self.directory} failed: {e}") from e

    async def get_item(self, key: StorageKey) -> Optional[str]:
        value = await self._run(self._cache.get, key, None)
        return None if value is None else str(value)

    async def set_item(self, key: StorageKey, value: str) -> None:
        stored = await self._run(self._cache.set, key, value)
        if not stored:
            raise OSError(f"diskcache refused to store key '{key}'")

    async def remove_item(self, key: StorageKey) -> None:
        await self._run(self._cache.delete, key)

    def close(self) -> None:
        self._cache.close()
