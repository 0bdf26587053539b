"""API client facade used by every application service.

Composes the transport, the retry service, the response cache and the
token store behind the four HTTP verbs plus a file upload. GET requests go
through the cache when asked to; everything goes through the retry
service.
"""

import logging
import os
from typing import Any, Callable, Dict, Optional

import aiofiles

from learnassist.domain.interfaces.cache import ResponseCache, make_cache_key
from learnassist.domain.interfaces.token_store import TokenStore
from learnassist.domain.interfaces.transport import Transport
from learnassist.domain.models.cancellation import CancellationToken, check_cancelled
from learnassist.domain.models.common import AuthToken, EndpointPath, QueryParams
from learnassist.domain.models.errors import ValidationError
from learnassist.infrastructure.resilience.api_retry import ApiRetryService

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024

class ApiClient:
    """Single entry point for backend calls."""

    def __init__(
        self,
        transport: Transport,
        retry_service: ApiRetryService,
        cache: ResponseCache,
        token_store: TokenStore,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self.transport = transport
        self.retry_service = retry_service
        self.cache = cache
        self.token_store = token_store
        self.max_upload_bytes = max_upload_bytes

    async def _call(
        self,
        method: str,
        path: EndpointPath,
        params: Optional[QueryParams] = None,
        json: Optional[Any] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Any:
        return await self.retry_service.execute_with_retry(
            self.transport.request,
            method,
            path,
            params=params,
            json=json,
            method=method,
            endpoint_name=path,
            cancel_token=cancel_token,
        )

    async def get(
        self,
        path: EndpointPath,
        params: Optional[QueryParams] = None,
        use_cache: bool = False,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Any:
        """Performs a GET, serving and filling the response cache if requested."""
        cache_key = make_cache_key(path, params)
        if use_cache:
            cached = await self._cache_lookup(cache_key)
            if cached is not None:
                logger.debug(f"Serving GET {path} from cache")
                return cached

        data = await self._call("GET", path, params=params, cancel_token=cancel_token)

        if use_cache and data is not None:
            try:
                await self.cache.put(cache_key, data)
            except Exception as e:
                logger.warning(f"Error putting into response cache (key: {cache_key}): {e}", exc_info=True)
        return data

    async def _cache_lookup(self, cache_key: str) -> Any:
        # A broken cache reads as a miss
        try:
            return await self.cache.get(cache_key)
        except Exception as e:
            logger.warning(f"Error getting from response cache (key: {cache_key}): {e}", exc_info=True)
            return None

    async def post(
        self, path: EndpointPath, data: Optional[Any] = None, cancel_token: Optional[CancellationToken] = None
    ) -> Any:
        return await self._call("POST", path, json=data, cancel_token=cancel_token)

    async def put(
        self, path: EndpointPath, data: Optional[Any] = None, cancel_token: Optional[CancellationToken] = None
    ) -> Any:
        return await self._call("PUT", path, json=data, cancel_token=cancel_token)

    async def delete(
        self, path: EndpointPath, params: Optional[QueryParams] = None, cancel_token: Optional[CancellationToken] = None
    ) -> Any:
        return await self._call("DELETE", path, params=params, cancel_token=cancel_token)

    async def upload_file(
        self,
        path: EndpointPath,
        file_path: str,
        mime_type: str,
        file_name: Optional[str] = None,
        extra_data: Optional[Dict[str, Any]] = None,
        on_progress: Optional[Callable[[int], None]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Any:
        """Uploads a local file as multipart form data.

        Args:
            path: Upload endpoint.
            file_path: Local file to send.
            mime_type: Content type of the 'file' part.
            file_name: Name reported to the server (defaults to the basename).
            extra_data: Additional form fields.
            on_progress: Receives upload progress in percent (0, then 100).
            cancel_token: Checked before reading and before every attempt.

        Raises:
            ValidationError: If the file is missing or larger than the limit.
        """
        if not os.path.isfile(file_path):
            raise ValidationError(f"File not found: {file_path}")
        size = os.path.getsize(file_path)
        if size > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes / (1024 * 1024)
            raise ValidationError(f"File is too large ({size} bytes); the maximum is {limit_mb:g}MB")

        check_cancelled(cancel_token)
        async with aiofiles.open(file_path, 'rb') as f:
            content = await f.read()

        if on_progress:
            on_progress(0)
        name = file_name or os.path.basename(file_path)
        logger.info(f"Uploading {name} ({size} bytes) to {path}")
        result = await self.retry_service.execute_with_retry(
            self.transport.upload,
            path,
            name,
            content,
            mime_type,
            extra_data,
            method="POST",
            endpoint_name=path,
            cancel_token=cancel_token,
        )
        if on_progress:
            on_progress(100)
        return result

    # --- Credential and cache management ---

    async def set_auth_token(self, token: AuthToken) -> None:
        await self.token_store.set(token)

    async def clear_auth_token(self) -> None:
        await self.token_store.clear()

    async def has_auth_token(self) -> bool:
        return await self.token_store.has()

    async def clear_cache(self) -> None:
        await self.cache.clear()

    async def invalidate_cache(self, path: EndpointPath, params: Optional[QueryParams] = None) -> None:
        """Drops one cached GET. Failures are logged; the caller's request already succeeded."""
        cache_key = make_cache_key(path, params)
        try:
            await self.cache.invalidate(cache_key)
        except Exception as e:
            logger.warning(f"Failed to invalidate response cache entry '{cache_key}': {e}", exc_info=True)
