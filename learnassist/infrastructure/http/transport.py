"""Concrete implementation of the Transport interface using httpx.

Performs one HTTP exchange per call against the configured base URL,
attaches the bearer credential, and translates every failure into the
error taxonomy. Responses are normalized from the backend envelope
``{success, data, error, message}`` or taken verbatim when the body is
not an envelope.
"""

import logging
import platform
import time
from typing import Any, Dict, Optional

import httpx

from learnassist.domain.interfaces.token_store import TokenStore
from learnassist.domain.interfaces.transport import Transport
from learnassist.domain.models.common import EndpointPath, QueryParams
from learnassist.domain.models.errors import AuthError, ConnectivityError, ServerError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_ERROR_MESSAGE = "Request failed"

def platform_tag() -> str:
    """Short OS tag sent in the 'Platform' header (e.g. 'linux', 'darwin')."""
    return platform.system().lower() or "unknown"

def extract_error_message(body: Any, fallback: str = DEFAULT_ERROR_MESSAGE) -> str:
    """Picks the human-readable message out of an error body."""
    if isinstance(body, dict):
        for field_name in ("message", "error"):
            value = body.get(field_name)
            if value:
                return str(value)
    elif isinstance(body, str) and body.strip():
        return body.strip()
    return fallback

def normalize_payload(body: Any, status_code: int) -> Any:
    """Unwraps the success envelope; any other body is the payload itself.

    Raises:
        ServerError: If the envelope reports failure or has no data field.
    """
    if isinstance(body, dict) and isinstance(body.get("success"), bool):
        if body["success"] and "data" in body:
            return body["data"]
        raise ServerError(extract_error_message(body), status_code=status_code, data=body)
    return body

def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text

class HttpxTransport(Transport):
    """Transport backed by a shared httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str,
        token_store: Optional[TokenStore] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initializes the transport.

        Args:
            base_url: Backend root, e.g. 'https://api.example.com'.
            token_store: Source of the bearer credential; requests go out
                unauthenticated when None or empty.
            timeout: Per-request timeout in seconds.
            client: Pre-built client (tests pass one with an httpx.MockTransport).
        """
        self.base_url = base_url.rstrip('/')
        self.token_store = token_store
        self.timeout = timeout
        self.default_headers = {
            "Accept": "application/json",
            "Platform": platform_tag(),
        }
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=self.default_headers,
        )
        logger.debug(f"HttpxTransport initialized for {self.base_url} (timeout={timeout}s)")

    async def _auth_headers(self) -> Dict[str, str]:
        if self.token_store is None:
            return {}
        token = await self.token_store.get()
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def request(
        self,
        method: str,
        path: EndpointPath,
        params: Optional[QueryParams] = None,
        json: Optional[Any] = None,
    ) -> Any:
        headers = {**self.default_headers, "Content-Type": "application/json", **(await self._auth_headers())}
        return await self._send(method.upper(), path, headers=headers, params=params, json=json)

    async def upload(
        self,
        path: EndpointPath,
        file_name: str,
        content: bytes,
        mime_type: str,
        extra_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        # httpx writes the multipart Content-Type (with boundary) itself
        headers = {**self.default_headers, **(await self._auth_headers())}
        files = {"file": (file_name, content, mime_type)}
        data = {k: str(v) for k, v in (extra_data or {}).items()}
        return await self._send("POST", path, headers=headers, files=files, data=data or None)

    async def _send(self, method: str, path: EndpointPath, **kwargs: Any) -> Any:
        logger.debug(f"REQUEST {method} {path}" + (f" params={kwargs['params']}" if kwargs.get('params') else ""))
        start_time = time.perf_counter()
        try:
            response = await self._client.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.TransportError as e:
            # Covers connect/read/write timeouts and network errors: no response at all
            logger.warning(f"Network error on {method} {path}: {type(e).__name__}: {e}")
            raise ConnectivityError(data={"error_type": type(e).__name__, "detail": str(e)}) from e

        latency_ms = (time.perf_counter() - start_time) * 1000
        body = _decode_body(response)
        logger.debug(f"RESPONSE {response.status_code} {method} {path} in {latency_ms:.1f}ms")

        if response.status_code == 401:
            logger.warning(f"Authentication error (401) on {method} {path}")
            raise AuthError(extract_error_message(body, AuthError.default_message), data=body)
        if response.status_code >= 400:
            logger.error(f"API error {response.status_code} on {method} {path}: {body!r}")
            raise ServerError(extract_error_message(body), status_code=response.status_code, data=body)

        return normalize_payload(body, response.status_code)

    async def aclose(self) -> None:
        await self._client.aclose()
