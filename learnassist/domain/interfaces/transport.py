"""Interface for the HTTP transport.

A transport performs exactly one HTTP exchange per call and translates
failures into the error taxonomy. It never retries and never caches.
"""

import abc
from typing import Any, Dict, Optional

from ..models.common import EndpointPath, QueryParams


class Transport(abc.ABC):
    """Abstract Base Class for single-shot HTTP calls against the backend."""

    @abc.abstractmethod
    async def request(
        self,
        method: str,
        path: EndpointPath,
        params: Optional[QueryParams] = None,
        json: Optional[Any] = None,
    ) -> Any:
        """Sends a GET/POST/PUT/DELETE request and returns the normalized payload.

        Raises:
            ConnectivityError: If no response was received.
            AuthError: If the backend answered 401.
            ServerError: For any other error status or an unsuccessful envelope.
        """
        pass

    @abc.abstractmethod
    async def upload(
        self,
        path: EndpointPath,
        file_name: str,
        content: bytes,
        mime_type: str,
        extra_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Sends a multipart upload with a single 'file' part plus form fields."""
        pass

    async def aclose(self) -> None:
        """Releases pooled connections. Optional for implementations."""
        return None
