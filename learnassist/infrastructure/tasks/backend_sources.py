"""Task sources that talk to the real backend through the ApiClient."""

import logging
from typing import List, Optional

from learnassist.core.api_client import ApiClient
from learnassist.domain.interfaces.task_source import AnalysisTaskSource, OcrTaskSource, ProgressCallback
from learnassist.domain.models.analysis import (
    ImageUpload,
    ImageUploadResponse,
    OCRResult,
    QuestionAnalysisRequest,
    QuestionAnalysisResult,
    QuestionFeedback,
)
from learnassist.domain.models.cancellation import CancellationToken
from learnassist.domain.models.common import EndpointPath, QuestionId, TaskId, make_task_path
from learnassist.domain.models.errors import ServerError
from learnassist.domain.models.tasks import TaskSnapshot

logger = logging.getLogger(__name__)

IMAGE_UPLOAD_PATH = EndpointPath("/api/image/upload")
IMAGE_RESULT_PATH = EndpointPath("/api/image/result")
ANALYZE_PATH = EndpointPath("/api/question/analyze")
ANALYSIS_RESULT_PATH = EndpointPath("/api/question/result")
RECOMMEND_PATH = EndpointPath("/api/learning/recommend")
FEEDBACK_PATH = EndpointPath("/api/question/feedback")


class BackendOcrSource(OcrTaskSource):
    """Uploads question images and reads OCR task status from the backend."""

    def __init__(self, api_client: ApiClient):
        self.api_client = api_client

    async def upload(
        self,
        image: ImageUpload,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ImageUploadResponse:
        data = await self.api_client.upload_file(
            IMAGE_UPLOAD_PATH,
            image.image_path,
            image.mime_type,
            file_name=image.file_name,
            on_progress=on_progress,
            cancel_token=cancel_token,
        )
        if not isinstance(data, dict) or not data.get("taskId"):
            raise ServerError("Image upload failed", data=data)
        return ImageUploadResponse.from_dict(data)

    async def fetch(self, task_id: TaskId, cancel_token: Optional[CancellationToken] = None) -> TaskSnapshot:
        data = await self.api_client.get(make_task_path(IMAGE_RESULT_PATH, task_id), cancel_token=cancel_token)
        return TaskSnapshot.from_payload(data, task_id=task_id, result_parser=OCRResult.from_dict)


class BackendAnalysisSource(AnalysisTaskSource):
    """Submits question analysis jobs and reads their status from the backend."""

    def __init__(self, api_client: ApiClient):
        self.api_client = api_client

    async def submit(
        self, payload: QuestionAnalysisRequest, cancel_token: Optional[CancellationToken] = None
    ) -> TaskId:
        logger.info(f"Sending question analysis request: {payload.ocr_result.text[:50]!r}")
        data = await self.api_client.post(ANALYZE_PATH, payload.to_payload(), cancel_token=cancel_token)
        if not isinstance(data, dict) or not data.get("taskId"):
            raise ServerError("Question analysis request failed", data=data)
        return TaskId(str(data["taskId"]))

    async def fetch(self, task_id: TaskId, cancel_token: Optional[CancellationToken] = None) -> TaskSnapshot:
        data = await self.api_client.get(make_task_path(ANALYSIS_RESULT_PATH, task_id), cancel_token=cancel_token)
        return TaskSnapshot.from_payload(data, task_id=task_id, result_parser=QuestionAnalysisResult.from_dict)

    async def similar_questions(self, question_id: QuestionId) -> List[QuestionAnalysisResult]:
        data = await self.api_client.get(make_task_path(RECOMMEND_PATH, question_id), use_cache=True)
        questions = data.get("questions") if isinstance(data, dict) else None
        if not isinstance(questions, list):
            raise ServerError("Malformed similar questions response", data=data)
        return [QuestionAnalysisResult.from_dict(q) for q in questions]

    async def submit_feedback(self, question_id: QuestionId, feedback: QuestionFeedback) -> None:
        await self.api_client.post(make_task_path(FEEDBACK_PATH, question_id), feedback.to_payload())
        # Feedback may change what the backend recommends for this question
        await self.api_client.invalidate_cache(make_task_path(RECOMMEND_PATH, question_id))
