"""Client for server-side asynchronous tasks.

Submits a job through a TaskSource and observes it by polling at a fixed
interval until it reaches a terminal state or the attempt budget runs out.
Every poll counts as one attempt, whether it succeeded or failed
transiently.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from learnassist.domain.events.api_events import EventListener, TaskPolled
from learnassist.domain.interfaces.task_source import TaskSource
from learnassist.domain.models.cancellation import CancellationToken, check_cancelled
from learnassist.domain.models.common import TaskId
from learnassist.domain.models.errors import (
    TRANSIENT_POLL_ERRORS,
    TaskFailedError,
    TaskTimeoutError,
    ValidationError,
)
from learnassist.domain.models.tasks import TaskSnapshot, TaskStatus, TaskUpdate, TaskUpdateCallback
from learnassist.infrastructure.resilience.api_retry import log_event

logger = logging.getLogger(__name__)

class AsyncTaskClient:
    """Submits and polls one family of tasks."""

    def __init__(
        self,
        source: TaskSource,
        sleep_func: Callable[[float], Awaitable[None]] = asyncio.sleep,
        event_listener: EventListener = log_event,
    ):
        self.source = source
        self._sleep = sleep_func
        self._emit = event_listener

    async def submit(self, payload: Any, cancel_token: Optional[CancellationToken] = None) -> TaskId:
        """Creates a task. Submission failures propagate unchanged."""
        check_cancelled(cancel_token)
        task_id = await self.source.submit(payload, cancel_token=cancel_token)
        logger.info(f"Submitted {self.source.kind.value} task: {task_id}")
        return task_id

    async def poll(self, task_id: TaskId, cancel_token: Optional[CancellationToken] = None) -> TaskSnapshot:
        """Reads the task status once."""
        if not task_id:
            raise ValidationError("Task id must not be empty")
        check_cancelled(cancel_token)
        return await self.source.fetch(task_id, cancel_token=cancel_token)

    async def poll_until_done(
        self,
        task_id: TaskId,
        max_attempts: int,
        interval_s: float,
        on_update: Optional[TaskUpdateCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Any:
        """Polls until the task completes, fails or the budget is exhausted.

        Args:
            task_id: Task to observe.
            max_attempts: Maximum number of polls.
            interval_s: Wait between consecutive polls (none after the last).
            on_update: Called after every poll attempt, in attempt order. A
                failed attempt reports status None and the error message.
            cancel_token: Checked before every poll and after every wait.

        Returns:
            The task result carried by the 'completed' snapshot.

        Raises:
            TaskFailedError: The task reached 'failed'.
            TaskTimeoutError: max_attempts polls ran without a terminal state.
            ConnectivityError, ServerError: A poll failure on the final attempt.
            AuthError, OperationCancelledError: Immediately.
        """
        if not task_id:
            raise ValidationError("Task id must not be empty")
        if max_attempts < 1:
            raise ValidationError(f"max_attempts must be at least 1, got {max_attempts}")
        if interval_s < 0:
            raise ValidationError(f"Poll interval must not be negative, got {interval_s}")

        for attempt in range(1, max_attempts + 1):
            check_cancelled(cancel_token)
            try:
                snapshot = await self.source.fetch(task_id, cancel_token=cancel_token)
            except TRANSIENT_POLL_ERRORS as e:
                if on_update:
                    on_update(TaskUpdate(attempt=attempt, max_attempts=max_attempts, status=None, error=str(e)))
                if attempt >= max_attempts:
                    logger.error(f"Polling task {task_id} failed on final attempt {attempt}/{max_attempts}: {e}")
                    raise
                logger.warning(f"Poll {attempt}/{max_attempts} for task {task_id} failed, will retry: {e}")
            else:
                self._emit(TaskPolled(task_id=task_id, attempt_number=attempt,
                                      status=snapshot.status.value, progress=snapshot.progress))
                if on_update:
                    on_update(TaskUpdate(attempt=attempt, max_attempts=max_attempts,
                                         status=snapshot.status, progress=snapshot.progress))

                if snapshot.status is TaskStatus.COMPLETED:
                    logger.info(f"Task {task_id} completed after {attempt} poll(s)")
                    return snapshot.result
                if snapshot.status is TaskStatus.FAILED:
                    logger.warning(f"Task {task_id} failed: {snapshot.error}")
                    raise TaskFailedError(snapshot.error or None, task_id=task_id)

            if attempt < max_attempts:
                await self._sleep(interval_s)

        raise TaskTimeoutError(task_id=task_id, attempts=max_attempts)
