"""Cooperative cancellation for retry and poll loops.

A token is handed down by the caller and checked between poll attempts
and before every network call. Cancelling the awaiting asyncio task still
works as usual; the token covers callers that want to stop a loop from
elsewhere (a UI callback, a signal handler, another task).
"""

import logging
from typing import Optional

from .errors import OperationCancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Signals that the caller has lost interest in an operation."""

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason
        logger.debug(f"Cancellation requested: {reason or 'no reason given'}")

    def raise_if_cancelled(self) -> None:
        """Raises OperationCancelledError once ``cancel`` has been called."""
        if self._cancelled:
            raise OperationCancelledError(self._reason)


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """Checkpoint helper that tolerates a missing token."""
    if token is not None:
        token.raise_if_cancelled()
