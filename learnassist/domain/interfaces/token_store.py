"""Interface for the bearer credential store."""

import abc
from typing import Optional

from ..models.common import AuthToken


class TokenStore(abc.ABC):
    """Holds at most one credential, in memory and in persistent storage."""

    @abc.abstractmethod
    async def get(self) -> Optional[AuthToken]:
        """Returns the active credential, loading it from storage if needed."""
        pass

    @abc.abstractmethod
    async def set(self, token: AuthToken) -> None:
        """Persists and holds a credential. Setting the same token twice is harmless.

        Raises:
            StorageError: If the persisted write fails (memory is left untouched).
        """
        pass

    @abc.abstractmethod
    async def clear(self) -> None:
        """Removes the credential from memory and from persistent storage."""
        pass

    @abc.abstractmethod
    async def has(self) -> bool:
        """True iff a credential is currently persisted."""
        pass
