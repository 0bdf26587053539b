"""Interfaces for asynchronous task data sources.

A task source knows how to create a server-side job and how to read its
status. Two strategies exist: the real backend and local fixtures. The
composition root picks one; services never branch on it.
"""

import abc
from typing import Any, Callable, List, Optional

from ..models.analysis import (
    ImageUpload,
    ImageUploadResponse,
    QuestionAnalysisRequest,
    QuestionAnalysisResult,
    QuestionFeedback,
)
from ..models.cancellation import CancellationToken, check_cancelled
from ..models.common import QuestionId, TaskId
from ..models.tasks import TaskKind, TaskSnapshot

ProgressCallback = Callable[[int], None]


class TaskSource(abc.ABC):
    """Abstract Base Class for submitting and reading one family of tasks."""

    kind: TaskKind

    @abc.abstractmethod
    async def submit(self, payload: Any, cancel_token: Optional[CancellationToken] = None) -> TaskId:
        """Creates a task and returns its identifier.

        Raises:
            LearnAssistError: If the submission itself fails.
        """
        pass

    @abc.abstractmethod
    async def fetch(self, task_id: TaskId, cancel_token: Optional[CancellationToken] = None) -> TaskSnapshot:
        """Reads the current status of a task. Never blocks beyond one request."""
        pass


class OcrTaskSource(TaskSource):
    """Task source for question-image OCR. Submission is a file upload."""

    kind = TaskKind.OCR

    @abc.abstractmethod
    async def upload(
        self,
        image: ImageUpload,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ImageUploadResponse:
        """Uploads an image and returns the OCR task created for it."""
        pass

    async def submit(self, payload: ImageUpload, cancel_token: Optional[CancellationToken] = None) -> TaskId:
        check_cancelled(cancel_token)
        response = await self.upload(payload, cancel_token=cancel_token)
        return response.task_id


class AnalysisTaskSource(TaskSource):
    """Task source for question analysis, plus the question-level side endpoints."""

    kind = TaskKind.ANALYSIS

    @abc.abstractmethod
    async def submit(
        self, payload: QuestionAnalysisRequest, cancel_token: Optional[CancellationToken] = None
    ) -> TaskId:
        pass

    @abc.abstractmethod
    async def similar_questions(self, question_id: QuestionId) -> List[QuestionAnalysisResult]:
        """Returns questions similar to the given one."""
        pass

    @abc.abstractmethod
    async def submit_feedback(self, question_id: QuestionId, feedback: QuestionFeedback) -> None:
        """Records user feedback on an analysed question."""
        pass
