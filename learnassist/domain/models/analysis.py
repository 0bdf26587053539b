"""Domain models for OCR results and question analysis.

Wire payloads use camelCase keys; the ``from_dict``/``to_payload`` helpers
translate between the backend format and these dataclasses.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .common import QuestionId, TaskId


@dataclass
class OCRResult:
    """Text recognised in a question image."""
    text: str
    confidence: float = 0.0
    latex: Optional[str] = None
    graph_data: Optional[Any] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OCRResult":
        return cls(
            text=str(data.get("text", "")),
            confidence=float(data.get("confidence") or 0.0),
            latex=data.get("latex"),
            graph_data=data.get("graphData"),
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"text": self.text, "confidence": self.confidence}
        if self.latex is not None:
            payload["latex"] = self.latex
        if self.graph_data is not None:
            payload["graphData"] = self.graph_data
        return payload


@dataclass
class ImageUpload:
    """A local image prepared for multipart upload."""
    image_path: str
    file_name: str
    mime_type: str


@dataclass
class ImageUploadResponse:
    task_id: TaskId
    message: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageUploadResponse":
        return cls(task_id=TaskId(str(data["taskId"])), message=str(data.get("message", "")))


@dataclass
class QuestionAnalysisRequest:
    """Body of POST /api/question/analyze."""
    ocr_result: OCRResult
    subject_hint: Optional[str] = None
    grade_hint: Optional[str] = None
    user_note: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"ocrResult": self.ocr_result.to_payload()}
        if self.subject_hint:
            payload["subjectHint"] = self.subject_hint
        if self.grade_hint:
            payload["gradeHint"] = self.grade_hint
        if self.user_note:
            payload["userNote"] = self.user_note
        return payload


@dataclass
class SolutionStep:
    step_number: int
    content: str
    id: str = ""
    latex: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SolutionStep":
        return cls(
            id=str(data.get("id", "")),
            step_number=int(data.get("stepNumber", 0)),
            content=str(data.get("content", "")),
            latex=data.get("latex"),
        )


@dataclass
class KnowledgePoint:
    name: str
    description: str = ""
    difficulty: str = "medium"
    id: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KnowledgePoint":
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            difficulty=str(data.get("difficulty", "medium")),
        )


@dataclass
class RelatedResource:
    title: str
    url: str
    type: str = "article"  # 'video' | 'article' | 'exercise'
    id: str = ""
    thumbnail: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RelatedResource":
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title", "")),
            type=str(data.get("type", "article")),
            url=str(data.get("url", "")),
            thumbnail=data.get("thumbnail"),
        )


@dataclass
class QuestionAnalysisResult:
    """Step-by-step solution produced for one question."""
    question_id: QuestionId
    question_text: str
    subject: str = ""
    difficulty: str = "medium"
    explanation: str = ""
    question_latex: Optional[str] = None
    solution_steps: List[SolutionStep] = field(default_factory=list)
    knowledge_points: List[KnowledgePoint] = field(default_factory=list)
    related_resources: List[RelatedResource] = field(default_factory=list)
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuestionAnalysisResult":
        return cls(
            question_id=QuestionId(str(data.get("questionId", ""))),
            question_text=str(data.get("questionText", "")),
            question_latex=data.get("questionLatex"),
            subject=str(data.get("subject", "")),
            difficulty=str(data.get("difficulty", "medium")),
            explanation=str(data.get("explanation", "")),
            solution_steps=[SolutionStep.from_dict(s) for s in data.get("solutionSteps") or []],
            knowledge_points=[KnowledgePoint.from_dict(k) for k in data.get("knowledgePoints") or []],
            related_resources=[RelatedResource.from_dict(r) for r in data.get("relatedResources") or []],
            created_at=data.get("createdAt"),
        )


@dataclass
class QuestionFeedback:
    """Body of POST /api/question/feedback/{questionId}."""
    is_helpful: bool
    rating: Optional[int] = None
    comment: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"isHelpful": self.is_helpful}
        if self.rating is not None:
            payload["rating"] = self.rating
        if self.comment:
            payload["comment"] = self.comment
        return payload
