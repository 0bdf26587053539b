"""Concrete TokenStore holding the bearer credential in memory and on disk.

Set and clear are serialized with an asyncio.Lock so that a logout racing
a fresh login (or a 401-triggered clear) can never leave the in-memory and
persisted copies disagreeing.
"""

import asyncio
import logging
from typing import Optional

from learnassist.domain.interfaces.storage import KeyValueStore
from learnassist.domain.interfaces.token_store import TokenStore
from learnassist.domain.models.common import AuthToken, StorageKey
from learnassist.domain.models.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)


class PersistentTokenStore(TokenStore):
    """TokenStore backed by a KeyValueStore."""

    def __init__(self, storage: KeyValueStore, storage_key: str = "auth_token"):
        self.storage = storage
        self.storage_key = StorageKey(storage_key)
        self._token: Optional[AuthToken] = None
        # Set when clear() could not remove the persisted copy; storage is not
        # trusted again until the next successful set().
        self._persisted_stale = False
        self._lock = asyncio.Lock()

    async def get(self) -> Optional[AuthToken]:
        """Returns the in-memory token, or lazily loads the persisted one."""
        if self._token is not None:
            return self._token
        async with self._lock:
            if self._token is None and not self._persisted_stale:
                try:
                    stored = await self.storage.get_item(self.storage_key)
                except OSError as e:
                    logger.warning(f"Could not read persisted credential: {e}")
                    return None
                if stored:
                    self._token = AuthToken(stored)
                    logger.debug("Loaded credential from persistent storage.")
            return self._token

    async def set(self, token: AuthToken) -> None:
        if not token:
            raise ValidationError("Cannot store an empty credential")
        async with self._lock:
            logger.info("Setting auth token")
            try:
                await self.storage.set_item(self.storage_key, token)
            except OSError as e:
                logger.error(f"Failed to persist credential: {e}")
                raise StorageError(f"Failed to persist credentials: {e}") from e
            # Memory is only updated once the persisted write completed
            self._token = token
            self._persisted_stale = False

    async def clear(self) -> None:
        async with self._lock:
            logger.info("Clearing auth token")
            self._token = None
            try:
                await self.storage.remove_item(self.storage_key)
            except OSError as e:
                # Best effort: the in-memory copy is already gone
                logger.warning(f"Failed to remove persisted credential, ignoring it until next login: {e}")
                self._persisted_stale = True
            else:
                self._persisted_stale = False

    async def has(self) -> bool:
        if self._persisted_stale:
            return False
        try:
            stored = await self.storage.get_item(self.storage_key)
        except OSError as e:
            logger.warning(f"Could not read persisted credential: {e}")
            return False
        return bool(stored)
