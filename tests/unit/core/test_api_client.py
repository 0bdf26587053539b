import json

import httpx
import pytest

from conftest import BrokenCache, envelope, json_response
from learnassist.core.api_client import ApiClient
from learnassist.domain.models.errors import AuthError, ConnectivityError, ValidationError


async def test_cached_get_hits_network_once(api_client, backend):
    backend.queue(json_response(200, envelope({"user": {"id": "1"}})))
    first = await api_client.get("/api/user/profile", use_cache=True)
    second = await api_client.get("/api/user/profile", use_cache=True)
    assert first == second == {"user": {"id": "1"}}
    assert len(backend.requests) == 1


async def test_cache_keys_by_params(api_client, backend):
    backend.queue(json_response(200, {"page": 1}), json_response(200, {"page": 2}))
    assert await api_client.get("/api/list", params={"page": 1}, use_cache=True) == {"page": 1}
    assert await api_client.get("/api/list", params={"page": 2}, use_cache=True) == {"page": 2}
    assert await api_client.get("/api/list", params={"page": 1}, use_cache=True) == {"page": 1}
    assert len(backend.requests) == 2


async def test_cached_entry_expires(api_client, backend, clock):
    backend.queue(json_response(200, {"v": 1}), json_response(200, {"v": 2}))
    await api_client.get("/api/x", use_cache=True)
    clock.advance(301)
    assert await api_client.get("/api/x", use_cache=True) == {"v": 2}


async def test_uncached_get_always_hits_network(api_client, backend):
    backend.queue(json_response(200, {"v": 1}), json_response(200, {"v": 2}))
    await api_client.get("/api/x")
    assert await api_client.get("/api/x") == {"v": 2}


async def test_invalidate_cache_forces_refetch(api_client, backend):
    backend.queue(json_response(200, {"v": 1}), json_response(200, {"v": 2}))
    await api_client.get("/api/x", use_cache=True)
    await api_client.invalidate_cache("/api/x")
    assert await api_client.get("/api/x", use_cache=True) == {"v": 2}


async def test_post_put_delete_send_expected_methods(api_client, backend):
    backend.default = json_response(200, {"ok": True})
    await api_client.post("/api/a", {"x": 1})
    await api_client.put("/api/b", {"y": 2})
    await api_client.delete("/api/c")
    assert [r.method for r in backend.requests] == ["POST", "PUT", "DELETE"]
    assert json.loads(backend.requests[1].content) == {"y": 2}


async def test_connectivity_failure_is_retried_then_succeeds(api_client, backend, recording_sleep):
    backend.queue(httpx.ConnectError("down"), json_response(200, {"ok": True}))
    assert await api_client.get("/api/x") == {"ok": True}
    assert recording_sleep.delays == [1.0]


async def test_connectivity_failure_exhausts_after_three_attempts(api_client, backend, recording_sleep):
    backend.default = httpx.ConnectError("down")
    with pytest.raises(ConnectivityError):
        await api_client.post("/api/x", {})
    assert len(backend.requests) == 3
    assert recording_sleep.delays == [1.0, 2.0]


async def test_401_clears_token_and_is_not_retried(api_client, backend, token_store):
    await api_client.set_auth_token("stale")
    backend.queue(json_response(401, {"message": "expired"}))
    with pytest.raises(AuthError):
        await api_client.get("/api/user/profile")
    assert len(backend.requests) == 1
    assert await api_client.has_auth_token() is False
    assert await token_store.get() is None


async def test_upload_file_reports_progress(api_client, backend, image_file):
    backend.queue(json_response(200, envelope({"taskId": "t1", "message": "ok"})))
    progress = []
    result = await api_client.upload_file(
        "/api/image/upload", str(image_file), "image/png", file_name="photo_1.png", on_progress=progress.append
    )
    assert result == {"taskId": "t1", "message": "ok"}
    assert progress == [0, 100]
    assert b'filename="photo_1.png"' in backend.requests[0].content


async def test_upload_rejects_missing_file(api_client, backend, tmp_path):
    with pytest.raises(ValidationError, match="File not found"):
        await api_client.upload_file("/api/image/upload", str(tmp_path / "nope.png"), "image/png")
    assert backend.requests == []


async def test_upload_rejects_oversized_file(api_client, backend, tmp_path):
    big = tmp_path / "big.png"
    big.write_bytes(b"0" * 2048)
    with pytest.raises(ValidationError, match="too large"):
        await api_client.upload_file("/api/image/upload", str(big), "image/png")
    assert backend.requests == []


async def test_broken_cache_does_not_fail_cached_get(transport, retry_service, token_store, backend, caplog):
    client = ApiClient(transport, retry_service, BrokenCache(), token_store)
    backend.queue(json_response(200, envelope({"x": 1})))
    assert await client.get("/api/x", use_cache=True) == {"x": 1}
    assert "cache backend down" in caplog.text


async def test_broken_cache_invalidation_is_only_logged(transport, retry_service, token_store, caplog):
    client = ApiClient(transport, retry_service, BrokenCache(), token_store)
    await client.invalidate_cache("/api/user/profile")
    assert "Failed to invalidate response cache entry '/api/user/profile:{}'" in caplog.text
