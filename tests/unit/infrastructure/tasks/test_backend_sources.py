import pytest

from conftest import BrokenCache, envelope, json_response
from learnassist.core.api_client import ApiClient
from learnassist.domain.models.analysis import ImageUpload, QuestionFeedback
from learnassist.domain.models.errors import ServerError
from learnassist.domain.models.tasks import TaskStatus
from learnassist.infrastructure.tasks.backend_sources import BackendAnalysisSource, BackendOcrSource


async def test_ocr_upload_without_task_id_is_server_error(api_client, backend, image_file):
    backend.queue(json_response(200, envelope({"message": "stored"})))
    source = BackendOcrSource(api_client)
    with pytest.raises(ServerError, match="Image upload failed"):
        await source.upload(ImageUpload(image_path=str(image_file), file_name="photo.png", mime_type="image/png"))


async def test_fetch_with_unknown_status_is_server_error(api_client, backend):
    backend.queue(json_response(200, envelope({"taskId": "t1", "status": "queued"})))
    with pytest.raises(ServerError, match="Unknown task status"):
        await BackendOcrSource(api_client).fetch("t1")


async def test_fetch_is_never_cached(api_client, backend):
    backend.queue(
        json_response(200, envelope({"taskId": "t1", "status": "processing"})),
        json_response(200, envelope({"taskId": "t1", "status": "completed", "result": {"text": "a"}})),
    )
    source = BackendOcrSource(api_client)
    assert (await source.fetch("t1")).status is TaskStatus.PROCESSING
    assert (await source.fetch("t1")).status is TaskStatus.COMPLETED


async def test_malformed_similar_questions(api_client, backend):
    backend.queue(json_response(200, envelope({"items": []})))
    with pytest.raises(ServerError):
        await BackendAnalysisSource(api_client).similar_questions("q-1")


async def test_feedback_succeeds_when_cache_invalidation_fails(transport, retry_service, token_store, backend):
    client = ApiClient(transport, retry_service, BrokenCache(), token_store)
    backend.queue(json_response(200, envelope({"received": True})))
    await BackendAnalysisSource(client).submit_feedback("q-1", QuestionFeedback(is_helpful=True, rating=5))
    assert backend.requests[0].url.path == "/api/question/feedback/q-1"
