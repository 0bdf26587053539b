import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest
from typer.testing import CliRunner

from learnassist.core.api_client import ApiClient
from learnassist.domain.interfaces.cache import ResponseCache
from learnassist.domain.interfaces.storage import KeyValueStore
from learnassist.infrastructure.auth.token_store import PersistentTokenStore
from learnassist.infrastructure.cache.response_cache import InMemoryResponseCache
from learnassist.infrastructure.config import settings
from learnassist.infrastructure.http.transport import HttpxTransport
from learnassist.infrastructure.resilience.api_retry import ApiRetryService

BASE_URL = "https://api.test"


class MemoryKeyValueStore(KeyValueStore):
    """KeyValueStore kept in a dict; flip the flags to simulate backend failures."""

    def __init__(self):
        self.items: Dict[str, str] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.fail_removes = False

    async def get_item(self, key):
        if self.fail_reads:
            raise OSError("read failed")
        return self.items.get(key)

    async def set_item(self, key, value):
        if self.fail_writes:
            raise OSError("disk full")
        self.items[key] = value

    async def remove_item(self, key):
        if self.fail_removes:
            raise OSError("remove failed")
        self.items.pop(key, None)


class RecordingSleep:
    """Awaitable stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def json_response(status_code: int, body: Any) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(body).encode(), headers={"Content-Type": "application/json"})


def envelope(data: Any) -> Dict[str, Any]:
    return {"success": True, "data": data}


class Backend:
    """Scripted httpx handler: queue responses (or exceptions) per request, record requests."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._script: List[Any] = []
        self.default: Optional[Any] = None

    def queue(self, *responses: Any) -> None:
        self._script.extend(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self._script.pop(0) if self._script else self.default
        if item is None:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(request)
        return item


@pytest.fixture
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config():
    yield
    settings.clear_test_config()


@pytest.fixture
def memory_storage():
    return MemoryKeyValueStore()


@pytest.fixture
def token_store(memory_storage):
    return PersistentTokenStore(memory_storage)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def events():
    return []


@pytest.fixture
def backend():
    return Backend()


@pytest.fixture
def transport(backend, token_store):
    client = httpx.AsyncClient(transport=httpx.MockTransport(backend))
    return HttpxTransport(BASE_URL, token_store=token_store, client=client)


@pytest.fixture
def retry_service(token_store, recording_sleep, events):
    return ApiRetryService(token_store=token_store, sleep_func=recording_sleep, event_listener=events.append)


@pytest.fixture
def response_cache(clock):
    return InMemoryResponseCache(clock=clock)


@pytest.fixture
def api_client(transport, retry_service, response_cache, token_store):
    return ApiClient(transport, retry_service, response_cache, token_store, max_upload_bytes=1024)


@pytest.fixture
def image_file(tmp_path: Path) -> Path:
    path = tmp_path / "question.png"
    path.write_bytes(b"\x89PNG fake image bytes")
    return path


class BrokenCache(ResponseCache):
    """ResponseCache whose every operation fails, as a crashed cache backend would."""

    async def get(self, key):
        raise OSError("cache backend down")

    async def put(self, key, value):
        raise OSError("cache backend down")

    async def invalidate(self, key):
        raise OSError("cache backend down")

    async def clear(self):
        raise OSError("cache backend down")
