"""
Core service for question analysis.

Submits recognised questions for step-by-step analysis, waits for the
solution, and exposes the recommendation and feedback endpoints.
"""

import logging
from typing import List, Optional

from learnassist.core.services.task_client import AsyncTaskClient
from learnassist.domain.interfaces.task_source import AnalysisTaskSource
from learnassist.domain.models.analysis import (
    QuestionAnalysisRequest,
    QuestionAnalysisResult,
    QuestionFeedback,
)
from learnassist.domain.models.cancellation import CancellationToken
from learnassist.domain.models.common import QuestionId, TaskId
from learnassist.domain.models.errors import ServerError, ValidationError
from learnassist.domain.models.tasks import TaskSnapshot, TaskUpdateCallback

logger = logging.getLogger(__name__)

DEFAULT_MAX_POLL_ATTEMPTS = 15
DEFAULT_POLL_INTERVAL_S = 2.0


class AnalysisService:
    """Orchestrates the question analysis functionality."""

    def __init__(
        self,
        source: AnalysisTaskSource,
        task_client: AsyncTaskClient,
        max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    ):
        self.source = source
        self.task_client = task_client
        self.max_poll_attempts = max_poll_attempts
        self.poll_interval_s = poll_interval_s

    async def analyze_question(
        self, request: QuestionAnalysisRequest, cancel_token: Optional[CancellationToken] = None
    ) -> TaskId:
        """Submits a question for analysis and returns the task id.

        Raises:
            ValidationError: If the recognised text is empty.
        """
        if not request.ocr_result.text.strip():
            raise ValidationError("Question text must not be empty")
        return await self.task_client.submit(request, cancel_token=cancel_token)

    async def get_analysis_result(self, task_id: TaskId) -> TaskSnapshot:
        return await self.task_client.poll(task_id)

    async def poll_analysis_result(
        self,
        task_id: TaskId,
        max_attempts: Optional[int] = None,
        interval_s: Optional[float] = None,
        on_update: Optional[TaskUpdateCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> QuestionAnalysisResult:
        logger.info(f"Starting analysis result polling for task: {task_id}")
        result = await self.task_client.poll_until_done(
            task_id,
            max_attempts=max_attempts if max_attempts is not None else self.max_poll_attempts,
            interval_s=interval_s if interval_s is not None else self.poll_interval_s,
            on_update=on_update,
            cancel_token=cancel_token,
        )
        if not isinstance(result, QuestionAnalysisResult):
            raise ServerError("Analysis task completed without a result", data=result)
        return result

    async def get_similar_questions(self, question_id: QuestionId) -> List[QuestionAnalysisResult]:
        if not question_id:
            raise ValidationError("Question id must not be empty")
        logger.info(f"Fetching similar questions for: {question_id}")
        return await self.source.similar_questions(question_id)

    async def submit_feedback(self, question_id: QuestionId, feedback: QuestionFeedback) -> None:
        if not question_id:
            raise ValidationError("Question id must not be empty")
        if feedback.rating is not None and not 1 <= feedback.rating <= 5:
            raise ValidationError(f"Rating must be between 1 and 5, got {feedback.rating}")
        logger.info(f"Submitting feedback for question: {question_id}")
        await self.source.submit_feedback(question_id, feedback)
