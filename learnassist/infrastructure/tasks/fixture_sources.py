"""Local fixture task sources for offline demos and tests.

Fixture task ids embed their creation time in milliseconds
('mock_ocr_<ms>', 'mock_task_<ms>'). Progress is derived from the time
elapsed since then, so a task reports 'processing' until it is 95% of the
way through its simulated duration and 'completed' afterwards. Ids
without that prefix complete immediately.
"""

import logging
import os
import time
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from learnassist.domain.interfaces.task_source import AnalysisTaskSource, OcrTaskSource, ProgressCallback
from learnassist.domain.models.analysis import (
    ImageUpload,
    ImageUploadResponse,
    KnowledgePoint,
    OCRResult,
    QuestionAnalysisRequest,
    QuestionAnalysisResult,
    QuestionFeedback,
    RelatedResource,
    SolutionStep,
)
from learnassist.domain.models.cancellation import CancellationToken, check_cancelled
from learnassist.domain.models.common import QuestionId, TaskId
from learnassist.domain.models.errors import ValidationError
from learnassist.domain.models.tasks import TaskSnapshot, TaskStatus

logger = logging.getLogger(__name__)

OCR_TASK_PREFIX = "mock_ocr_"
ANALYSIS_TASK_PREFIX = "mock_task_"
COMPLETION_THRESHOLD = 95

MOCK_QUESTION_TEXT = "Solve the equation: x^2 - 5x + 6 = 0"
MOCK_SIMILAR_QUESTIONS = [
    "Solve the quadratic equation: 2x^2 - 7x + 3 = 0",
    "Evaluate (3x + 2)(2x - 5) for x = 3",
    "If a + b = 5 and ab = 6, find a^2 + b^2",
]

Clock = Callable[[], float]


def _now_ms(clock: Clock) -> int:
    return int(clock() * 1000)


def simulated_progress(task_id: str, prefix: str, duration_s: float, clock: Clock) -> Optional[int]:
    """Percent complete of a fixture task, or None if the id carries no timestamp."""
    if not task_id.startswith(prefix):
        return None
    try:
        started_ms = int(task_id[len(prefix):])
    except ValueError:
        return None
    if duration_s <= 0:
        return 100
    elapsed_ms = _now_ms(clock) - started_ms
    return max(0, min(100, int(elapsed_ms / (duration_s * 1000) * 100)))


def build_mock_analysis(question_text: str, clock: Clock = time.time) -> QuestionAnalysisResult:
    """Deterministic sample solution for a question text."""
    is_equation = "=" in question_text
    subject = "mathematics" if is_equation else "physics" if "force" in question_text.lower() else "language"
    topic = "Solving equations" if is_equation else "Core concepts"
    return QuestionAnalysisResult(
        question_id=QuestionId(f"mock_{_now_ms(clock)}"),
        question_text=question_text,
        question_latex=question_text.split(":", 1)[-1].strip() if is_equation else None,
        subject=subject,
        difficulty="medium",
        solution_steps=[
            SolutionStep(id="s1", step_number=1, content="Understand what the question asks"),
            SolutionStep(id="s2", step_number=2, content="Identify the given conditions"),
            SolutionStep(id="s3", step_number=3, content="Apply the relevant formula",
                         latex=question_text if is_equation else None),
            SolutionStep(id="s4", step_number=4, content="State the answer"),
        ],
        explanation=(
            "This is an algebra question; solve it with the appropriate formula."
            if is_equation else
            "This is a conceptual question; it relies on understanding the key ideas."
        ),
        knowledge_points=[
            KnowledgePoint(id="kp1", name=topic, difficulty="medium",
                           description=f"Master the principles behind {topic.lower()}"),
        ],
        related_resources=[
            RelatedResource(id="r1", title=f"{topic} explained", type="video",
                            url="https://example.com/video1", thumbnail="https://example.com/thumbnail1.jpg"),
        ],
        created_at=datetime.fromtimestamp(clock(), tz=timezone.utc).isoformat(),
    )


class FixtureOcrSource(OcrTaskSource):
    """Pretends to run OCR on any existing file."""

    def __init__(self, delay_s: float = 2.0, clock: Clock = time.time):
        self.delay_s = delay_s
        self._clock = clock

    async def upload(
        self,
        image: ImageUpload,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ImageUploadResponse:
        check_cancelled(cancel_token)
        if not os.path.isfile(image.image_path):
            raise ValidationError(f"File not found: {image.image_path}")
        if on_progress:
            on_progress(0)
        task_id = TaskId(f"{OCR_TASK_PREFIX}{_now_ms(self._clock)}")
        logger.info(f"Using mock OCR upload for {image.file_name}: {task_id}")
        if on_progress:
            on_progress(100)
        return ImageUploadResponse(task_id=task_id, message="Upload successful (mock)")

    async def fetch(self, task_id: TaskId, cancel_token: Optional[CancellationToken] = None) -> TaskSnapshot:
        check_cancelled(cancel_token)
        progress = simulated_progress(task_id, OCR_TASK_PREFIX, self.delay_s, self._clock)
        if progress is not None and progress < COMPLETION_THRESHOLD:
            return TaskSnapshot(task_id=task_id, status=TaskStatus.PROCESSING, progress=float(progress))
        return TaskSnapshot(
            task_id=task_id,
            status=TaskStatus.COMPLETED,
            progress=100.0,
            result=OCRResult(text=MOCK_QUESTION_TEXT, confidence=0.95, latex="x^2 - 5x + 6 = 0"),
        )


class FixtureAnalysisSource(AnalysisTaskSource):
    """Returns canned step-by-step solutions."""

    def __init__(self, delay_s: float = 3.0, clock: Clock = time.time):
        self.delay_s = delay_s
        self._clock = clock
        self.feedback: Dict[QuestionId, List[QuestionFeedback]] = {}

    async def submit(
        self, payload: QuestionAnalysisRequest, cancel_token: Optional[CancellationToken] = None
    ) -> TaskId:
        check_cancelled(cancel_token)
        logger.info("Using mock question analysis data")
        return TaskId(f"{ANALYSIS_TASK_PREFIX}{_now_ms(self._clock)}")

    async def fetch(self, task_id: TaskId, cancel_token: Optional[CancellationToken] = None) -> TaskSnapshot:
        check_cancelled(cancel_token)
        progress = simulated_progress(task_id, ANALYSIS_TASK_PREFIX, self.delay_s, self._clock)
        if progress is not None and progress < COMPLETION_THRESHOLD:
            return TaskSnapshot(task_id=task_id, status=TaskStatus.PROCESSING, progress=float(progress))
        return TaskSnapshot(
            task_id=task_id,
            status=TaskStatus.COMPLETED,
            progress=100.0,
            result=build_mock_analysis(MOCK_QUESTION_TEXT, self._clock),
        )

    async def similar_questions(self, question_id: QuestionId) -> List[QuestionAnalysisResult]:
        logger.info(f"Using mock similar questions data for {question_id}")
        return [build_mock_analysis(q, self._clock) for q in MOCK_SIMILAR_QUESTIONS]

    async def submit_feedback(self, question_id: QuestionId, feedback: QuestionFeedback) -> None:
        logger.info(f"Mock submitting feedback for {question_id}: helpful={feedback.is_helpful}")
        self.feedback.setdefault(question_id, []).append(feedback)
