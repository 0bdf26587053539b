"""Domain models for server-side asynchronous tasks.

A task is created by a submit call and afterwards only observed through
polling. The server owns every state transition; 'completed' and 'failed'
are terminal.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .common import TaskId
from .errors import ServerError


class TaskStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TaskStatus.PROCESSING


class TaskKind(str, Enum):
    """Which backend job family a task belongs to."""
    OCR = "ocr"
    ANALYSIS = "analysis"


def _clamp_progress(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        progress = float(value)
    except (TypeError, ValueError):
        return None
    return max(0.0, min(100.0, progress))


@dataclass
class TaskSnapshot:
    """Status of a task as observed by a single poll."""
    task_id: TaskId
    status: TaskStatus
    progress: Optional[float] = None
    result: Optional[Any] = None
    error: Optional[str] = None

    @classmethod
    def from_payload(
        cls,
        payload: Dict[str, Any],
        task_id: Optional[str] = None,
        result_parser: Optional[Callable[[Dict[str, Any]], Any]] = None,
    ) -> "TaskSnapshot":
        """Builds a snapshot from a '/result/{taskId}' response body.

        Raises:
            ServerError: If the payload is not an object or carries an unknown status.
        """
        if not isinstance(payload, dict):
            raise ServerError("Malformed task status response", data=payload)
        raw_status = payload.get("status")
        try:
            status = TaskStatus(raw_status)
        except ValueError:
            raise ServerError(f"Unknown task status: {raw_status!r}", data=payload)

        raw_result = payload.get("result")
        result = raw_result
        if raw_result is not None and result_parser is not None:
            result = result_parser(raw_result)

        return cls(
            task_id=TaskId(str(payload.get("taskId") or task_id or "")),
            status=status,
            progress=_clamp_progress(payload.get("progress")),
            result=result,
            error=payload.get("error"),
        )


@dataclass(frozen=True)
class TaskUpdate:
    """Progress record delivered to poll callbacks, one per poll attempt.

    ``status`` is None when the poll itself failed; ``error`` then holds the reason.
    """
    attempt: int
    max_attempts: int
    status: Optional[TaskStatus]
    progress: Optional[float] = None
    error: Optional[str] = None


# Callback signature used by poll loops.
TaskUpdateCallback = Callable[[TaskUpdate], None]
