"""
Core service for question-image OCR.

Validates local images, uploads them through the OCR task source and
waits for the recognised text via the task client.
"""

import logging
import os
import time
from typing import Callable, Iterable, Optional

from learnassist.core.services.task_client import AsyncTaskClient
from learnassist.domain.interfaces.task_source import OcrTaskSource, ProgressCallback
from learnassist.domain.models.analysis import ImageUpload, ImageUploadResponse, OCRResult
from learnassist.domain.models.cancellation import CancellationToken
from learnassist.domain.models.common import TaskId
from learnassist.domain.models.errors import ServerError, ValidationError
from learnassist.domain.models.tasks import TaskSnapshot, TaskUpdateCallback

logger = logging.getLogger(__name__)

DEFAULT_SUPPORTED_TYPES = ("jpg", "jpeg", "png", "heic")
DEFAULT_MAX_POLL_ATTEMPTS = 10
DEFAULT_POLL_INTERVAL_S = 2.0


def mime_type_for(extension: str) -> str:
    """'jpg' -> 'image/jpeg', anything else -> 'image/<ext>'."""
    extension = extension.lower()
    return f"image/{'jpeg' if extension == 'jpg' else extension}"


class ImageService:
    """Orchestrates image upload and OCR result retrieval."""

    def __init__(
        self,
        source: OcrTaskSource,
        task_client: AsyncTaskClient,
        supported_types: Iterable[str] = DEFAULT_SUPPORTED_TYPES,
        max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
        clock: Callable[[], float] = time.time,
    ):
        self.source = source
        self.task_client = task_client
        self.supported_types = [t.lower() for t in supported_types]
        self.max_poll_attempts = max_poll_attempts
        self.poll_interval_s = poll_interval_s
        self._clock = clock

    def prepare_upload(self, image_path: str) -> ImageUpload:
        """Checks the extension and derives the upload name and mime type.

        Raises:
            ValidationError: If the extension is missing or unsupported.
        """
        extension = os.path.splitext(image_path)[1].lstrip('.').lower()
        if not extension or extension not in self.supported_types:
            raise ValidationError(
                f"Unsupported image type '{extension or '(none)'}'; expected one of: {', '.join(self.supported_types)}"
            )
        file_name = f"photo_{int(self._clock() * 1000)}.{extension}"
        return ImageUpload(image_path=image_path, file_name=file_name, mime_type=mime_type_for(extension))

    async def upload_image(
        self,
        image_path: str,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ImageUploadResponse:
        """Uploads a question image and returns the OCR task created for it."""
        upload = self.prepare_upload(image_path)
        logger.info(f"Uploading image {image_path} as {upload.file_name} ({upload.mime_type})")
        return await self.source.upload(upload, on_progress=on_progress, cancel_token=cancel_token)

    async def get_ocr_result(self, task_id: TaskId) -> TaskSnapshot:
        return await self.task_client.poll(task_id)

    async def poll_ocr_result(
        self,
        task_id: TaskId,
        max_attempts: Optional[int] = None,
        interval_s: Optional[float] = None,
        on_update: Optional[TaskUpdateCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> OCRResult:
        result = await self.task_client.poll_until_done(
            task_id,
            max_attempts=max_attempts if max_attempts is not None else self.max_poll_attempts,
            interval_s=interval_s if interval_s is not None else self.poll_interval_s,
            on_update=on_update,
            cancel_token=cancel_token,
        )
        if not isinstance(result, OCRResult):
            raise ServerError("OCR task completed without a result", data=result)
        return result
