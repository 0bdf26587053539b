"""Service for executing API calls with automatic retries.

Implements exponential backoff for connectivity failures only (no HTTP
response received at all). HTTP error statuses are never retried. An HTTP
401 wipes the stored credential immediately and is re-raised for the
caller to start a new login.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Coroutine, Optional

from learnassist.domain.events.api_events import (
    CredentialCleared,
    DomainEvent,
    EventListener,
    RequestFailed,
    RequestInitiated,
    RequestSucceeded,
    RetryScheduled,
)
from learnassist.domain.interfaces.token_store import TokenStore
from learnassist.domain.models.cancellation import CancellationToken, check_cancelled
from learnassist.domain.models.errors import AuthError, ConnectivityError, LearnAssistError

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 2
DEFAULT_INITIAL_BACKOFF_S = 1.0
DEFAULT_BACKOFF_FACTOR = 2.0

SleepFunc = Callable[[float], Awaitable[None]]

@dataclass
class RetryState:
    """Per-request retry bookkeeping."""
    attempt: int          # 1-based number of the attempt about to run
    next_delay_s: float   # delay to wait if this attempt fails with a connectivity error

def log_event(event: DomainEvent) -> None:
    """Default event listener."""
    logger.debug(f"EVENT: {event}")

class ApiRetryService:
    """Handles API call execution with connectivity retries and 401 handling."""

    def __init__(
        self,
        token_store: Optional[TokenStore] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        initial_backoff_s: float = DEFAULT_INITIAL_BACKOFF_S,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        sleep_func: SleepFunc = asyncio.sleep,
        event_listener: EventListener = log_event,
    ):
        """Initializes the ApiRetryService.

        Args:
            token_store: Credential store cleared on a 401; None disables clearing.
            max_retries: Maximum number of retry attempts after the first one.
            initial_backoff_s: Delay in seconds before the first retry.
            backoff_factor: Multiplier for the backoff delay (2 for exponential).
            sleep_func: Awaitable sleep, injectable for tests.
            event_listener: Receives the domain events emitted along the way.
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if initial_backoff_s < 0 or backoff_factor < 1:
            raise ValueError("backoff must be non-negative and non-decreasing")
        self.token_store = token_store
        self.max_retries = max_retries
        self.initial_backoff_s = initial_backoff_s
        self.backoff_factor = backoff_factor
        self._sleep = sleep_func
        self._emit = event_listener

        logger.debug(
            f"ApiRetryService initialized: max_retries={max_retries}, "
            f"initial_backoff={initial_backoff_s}s, factor={backoff_factor}"
        )

    def delay_before_attempt(self, attempt: int) -> float:
        """Delay before attempt n (n >= 2): initial * factor^(n-2)."""
        if attempt < 2:
            return 0.0
        return self.initial_backoff_s * (self.backoff_factor ** (attempt - 2))

    async def execute_with_retry(
        self,
        func: Callable[..., Coroutine[Any, Any, Any]],
        *args: Any,
        method: str = "GET",
        endpoint_name: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
        **kwargs: Any
    ) -> Any:
        """Executes an async transport call with connectivity retries.

        Args:
            func: The async function (single HTTP exchange) to execute.
            *args: Positional arguments for the function.
            method: HTTP verb, for logging and events.
            endpoint_name: Path of the endpoint called, for logging and events.
            cancel_token: Checked before every attempt.
            **kwargs: Keyword arguments for the function.

        Returns:
            The result of the function call.

        Raises:
            ConnectivityError: The last connectivity failure once retries are exhausted.
            AuthError: On a 401, after the credential has been cleared.
            LearnAssistError: Any other failure, unchanged and without retry.
        """
        endpoint = endpoint_name or getattr(func, "__name__", "request")
        max_attempts = self.max_retries + 1
        state = RetryState(attempt=1, next_delay_s=self.delay_before_attempt(2))

        while True:
            check_cancelled(cancel_token)
            self._emit(RequestInitiated(method=method, endpoint=endpoint, attempt_number=state.attempt))
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except ConnectivityError as e:
                if state.attempt >= max_attempts:
                    logger.error(f"Max retries ({self.max_retries}) reached for {method} {endpoint}. Last error: {e}")
                    self._emit(RequestFailed(method=method, endpoint=endpoint, error_type=type(e).__name__,
                                             error_message=str(e), status_code=e.status_code))
                    raise
                delay = state.next_delay_s
                logger.info(
                    f"Request failed, retrying ({state.attempt}/{self.max_retries}) after {delay:.2f}s: {method} {endpoint}"
                )
                self._emit(RetryScheduled(method=method, endpoint=endpoint,
                                          attempt_number=state.attempt + 1, delay_seconds=delay))
                await self._sleep(delay)
                state = RetryState(attempt=state.attempt + 1, next_delay_s=delay * self.backoff_factor)
                continue
            except AuthError as e:
                logger.warning(f"Authentication error (401) on {method} {endpoint}; clearing credential.")
                if self.token_store is not None:
                    await self.token_store.clear()
                    self._emit(CredentialCleared(endpoint=endpoint))
                self._emit(RequestFailed(method=method, endpoint=endpoint, error_type=type(e).__name__,
                                         error_message=str(e), status_code=e.status_code))
                raise
            except LearnAssistError as e:
                self._emit(RequestFailed(method=method, endpoint=endpoint, error_type=type(e).__name__,
                                         error_message=str(e), status_code=e.status_code))
                raise

            latency_ms = (time.perf_counter() - start_time) * 1000
            self._emit(RequestSucceeded(method=method, endpoint=endpoint, latency_ms=latency_ms,
                                        attempt_number=state.attempt))
            return result
