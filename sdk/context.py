"""Cancellation and deadline context passed to every client operation."""

import threading
import time
from typing import Optional

from sdk.exceptions import DeadlineExceededError, OperationCancelledError


class CallContext:
    """
    Cancellation flag plus optional deadline, shared by the calls it is passed to.

    cancel() may be called from any thread. A call that sees the context
    cancelled, or past its deadline, raises without updating caller state.
    A request already in flight is abandoned on cancel(): the call returns
    at once and the reply, if it ever arrives, is discarded. The server may
    still have carried the request out.
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Seconds from now until the deadline; None for no deadline
        """
        self._cancelled = threading.Event()
        self.deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def wait_cancelled(self, timeout: float) -> bool:
        """Block up to timeout seconds for cancel(); True if cancelled."""
        return self._cancelled.wait(timeout)

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, never negative; None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self, method: Optional[str] = None) -> None:
        """
        Raises:
            OperationCancelledError: If cancel() was called
            DeadlineExceededError: If the deadline has passed
        """
        if self.cancelled:
            raise OperationCancelledError("operation cancelled", method=method)
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise DeadlineExceededError("deadline exceeded", method=method)
