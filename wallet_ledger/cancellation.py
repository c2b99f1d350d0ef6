"""
Cancellation tokens for engine calls.

A caller hands a Cancellation to the engine; the engine checks it at fixed
points and, once it fires, aborts the active transaction so that the call has
no effect.
"""

from typing import Optional
import threading
import time

from .errors import DeadlineExceeded, OperationCancelled


class Cancellation:
    """Cancel flag with an optional deadline measured on the monotonic clock"""

    def __init__(self, timeout: Optional[float] = None):
        self._event = threading.Event()
        self.timeout = timeout
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without one"""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelled()
        if self.expired:
            raise DeadlineExceeded(self.timeout)


def check(cancellation: Optional[Cancellation]) -> None:
    """raise_if_cancelled() for an optional token"""
    if cancellation is not None:
        cancellation.raise_if_cancelled()
