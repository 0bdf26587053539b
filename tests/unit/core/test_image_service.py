import httpx
import pytest

from conftest import envelope, json_response
from learnassist.core.api_client import ApiClient
from learnassist.core.services.image_service import ImageService, mime_type_for
from learnassist.core.services.task_client import AsyncTaskClient
from learnassist.domain.models.analysis import OCRResult
from learnassist.domain.models.cancellation import CancellationToken
from learnassist.domain.models.errors import OperationCancelledError, TaskFailedError, ValidationError
from learnassist.infrastructure.resilience.api_retry import ApiRetryService
from learnassist.infrastructure.tasks.backend_sources import BackendOcrSource


@pytest.fixture
def image_service(api_client, recording_sleep, clock):
    source = BackendOcrSource(api_client)
    return ImageService(source, AsyncTaskClient(source, sleep_func=recording_sleep), clock=clock)


def test_mime_type_mapping():
    assert mime_type_for("jpg") == "image/jpeg"
    assert mime_type_for("JPEG") == "image/jpeg"
    assert mime_type_for("png") == "image/png"
    assert mime_type_for("heic") == "image/heic"


def test_prepare_upload_names_file_by_timestamp(image_service, clock):
    upload = image_service.prepare_upload("/photos/Question.JPG")
    assert upload.file_name == f"photo_{int(clock.now * 1000)}.jpg"
    assert upload.mime_type == "image/jpeg"
    assert upload.image_path == "/photos/Question.JPG"


@pytest.mark.parametrize("path", ["/photos/question.gif", "/photos/question"])
def test_prepare_upload_rejects_unsupported_types(image_service, path):
    with pytest.raises(ValidationError, match="Unsupported image type"):
        image_service.prepare_upload(path)


async def test_upload_image_returns_task(image_service, backend, image_file):
    backend.queue(json_response(200, envelope({"taskId": "ocr-1", "message": "queued"})))
    response = await image_service.upload_image(str(image_file))
    assert response.task_id == "ocr-1"
    assert response.message == "queued"
    assert backend.requests[0].url.path == "/api/image/upload"


async def test_poll_ocr_result_parses_result(image_service, backend, recording_sleep):
    backend.queue(
        json_response(200, envelope({"taskId": "ocr-1", "status": "processing"})),
        json_response(200, envelope({
            "taskId": "ocr-1",
            "status": "completed",
            "result": {"text": "2x + 3 = 7", "confidence": 0.9, "latex": "2x+3=7"},
        })),
    )
    result = await image_service.poll_ocr_result("ocr-1", max_attempts=3, interval_s=2.0)
    assert result == OCRResult(text="2x + 3 = 7", confidence=0.9, latex="2x+3=7")
    assert recording_sleep.delays == [2.0]
    assert backend.requests[0].url.path == "/api/image/result/ocr-1"


async def test_poll_ocr_result_surfaces_failure(image_service, backend):
    backend.queue(json_response(200, envelope({"taskId": "ocr-1", "status": "failed", "error": "no text found"})))
    with pytest.raises(TaskFailedError, match="no text found"):
        await image_service.poll_ocr_result("ocr-1")


async def test_get_ocr_result_single_snapshot(image_service, backend):
    backend.queue(json_response(200, envelope({"taskId": "ocr-1", "status": "processing", "progress": 140})))
    snapshot = await image_service.get_ocr_result("ocr-1")
    assert snapshot.progress == 100.0
    assert snapshot.result is None


async def test_upload_cancelled_while_waiting_to_retry(transport, token_store, response_cache, backend, image_file):
    token = CancellationToken()

    async def cancel_during_backoff(delay):
        token.cancel("user left the capture screen")

    retry_service = ApiRetryService(token_store=token_store, sleep_func=cancel_during_backoff)
    source = BackendOcrSource(ApiClient(transport, retry_service, response_cache, token_store))
    service = ImageService(source, AsyncTaskClient(source))
    backend.queue(
        httpx.ConnectError("connection reset"),
        json_response(200, envelope({"taskId": "ocr-1"})),
    )

    with pytest.raises(OperationCancelledError, match="capture screen"):
        await service.upload_image(str(image_file), cancel_token=token)
    assert len(backend.requests) == 1
