"""Error taxonomy shared by every layer.

All failures surfaced by the transport, the retry service, the task client
and the application services are instances of LearnAssistError. Each
subclass carries a fixed ErrorKind tag so callers can dispatch on
``error.kind`` exhaustively instead of probing for attributes.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Closed set of failure categories."""
    CONNECTIVITY = "connectivity"   # no HTTP response received at all
    AUTH = "auth"                   # HTTP 401, credential has been cleared
    SERVER = "server"               # HTTP error status or an unsuccessful envelope
    TASK_FAILED = "task_failed"     # task reached the 'failed' state
    TASK_TIMEOUT = "task_timeout"   # polling budget exhausted
    VALIDATION = "validation"       # malformed local input, caught before the network
    STORAGE = "storage"             # credential persistence failed
    CANCELLED = "cancelled"         # caller cancelled the operation


class LearnAssistError(Exception):
    """Base class. ``str(error)`` is always a message fit for display."""

    kind: ErrorKind = ErrorKind.SERVER
    default_message = "Request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        data: Any = None,
    ):
        self.message = message or self.default_message
        self.status_code = status_code
        self.data = data
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, status_code={self.status_code!r}, message={self.message!r})"


class ConnectivityError(LearnAssistError):
    """No response was received (DNS, refused connection, timeout...)."""
    kind = ErrorKind.CONNECTIVITY
    default_message = "Network connection failed, please check your internet connection"

    def __init__(self, message: Optional[str] = None, data: Any = None):
        super().__init__(message, status_code=0, data=data)


class AuthError(LearnAssistError):
    """The backend answered 401. The stored credential is no longer valid."""
    kind = ErrorKind.AUTH
    default_message = "Authentication required, please log in again"

    def __init__(self, message: Optional[str] = None, data: Any = None):
        super().__init__(message, status_code=401, data=data)


class ServerError(LearnAssistError):
    """HTTP error status, or an envelope with ``success: false``."""
    kind = ErrorKind.SERVER


class TaskFailedError(LearnAssistError):
    """A polled task reached the terminal 'failed' state."""
    kind = ErrorKind.TASK_FAILED
    default_message = "Task processing failed"

    def __init__(self, message: Optional[str] = None, task_id: Optional[str] = None):
        super().__init__(message)
        self.task_id = task_id


class TaskTimeoutError(LearnAssistError):
    """Polling gave up before the task reached a terminal state."""
    kind = ErrorKind.TASK_TIMEOUT
    default_message = "Processing timed out, please try again"

    def __init__(self, message: Optional[str] = None, task_id: Optional[str] = None, attempts: int = 0):
        super().__init__(message)
        self.task_id = task_id
        self.attempts = attempts


class ValidationError(LearnAssistError):
    """Local input was rejected before any network call."""
    kind = ErrorKind.VALIDATION
    default_message = "Invalid input"

    def __init__(self, message: Optional[str] = None, data: Any = None):
        super().__init__(message, status_code=400, data=data)


class StorageError(LearnAssistError):
    """The persistent key-value store could not be written."""
    kind = ErrorKind.STORAGE
    default_message = "Failed to persist credentials"


class OperationCancelledError(LearnAssistError):
    """Raised at the next checkpoint after a CancellationToken was cancelled."""
    kind = ErrorKind.CANCELLED
    default_message = "Operation cancelled"


# Errors that a single poll may recover from on the next attempt.
TRANSIENT_POLL_ERRORS = (ConnectivityError, ServerError)
