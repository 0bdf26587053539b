"""Domain Events related to API calls, resilience and task polling.

Examples include events for when calls are started, retried, fail, or
succeed, and when a polled task reports progress.
"""

from dataclasses import dataclass, field
import time
from typing import Callable, Optional

# Base Event Class
@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

# --- Request Events ---

@dataclass
class RequestInitiated(DomainEvent):
    """Event triggered when an HTTP request attempt is about to be made."""
    method: str # e.g., 'GET', 'POST'
    endpoint: str
    attempt_number: int = 1
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestSucceeded(DomainEvent):
    """Event triggered when a request returns a usable payload."""
    method: str
    endpoint: str
    latency_ms: float
    attempt_number: int = 1
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestFailed(DomainEvent):
    """Event triggered when a request fails definitively (after retries)."""
    method: str
    endpoint: str
    error_type: str
    error_message: str
    status_code: Optional[int] = None
    timestamp: float = field(default_factory=time.time)

@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled after a connectivity failure."""
    method: str
    endpoint: str
    attempt_number: int # the attempt that will run after the delay
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class CredentialCleared(DomainEvent):
    """Event triggered when a 401 response wipes the stored credential."""
    endpoint: str
    timestamp: float = field(default_factory=time.time)

# --- Task Events ---

@dataclass
class TaskPolled(DomainEvent):
    """Event triggered after each poll of an asynchronous task."""
    task_id: str
    attempt_number: int
    status: str
    progress: Optional[float] = None
    timestamp: float = field(default_factory=time.time)

EventListener = Callable[[DomainEvent], None]
