"""Cooperative cancellation shared by the authentication and API steps."""

import threading
import time
from typing import Optional

from .exceptions import OperationCancelled


class CancellationToken:
    """A thread-safe cancellation flag with an optional deadline.

    Long-running steps poll `raise_if_cancelled()` at their suspension points; `remaining()` lets
    them pass the time left on to libraries that accept a timeout.
    """

    def __init__(self):
        self._event = threading.Event()
        self._deadline: Optional[float] = None

    def cancel(self) -> None:
        self._event.set()

    def cancel_after(self, seconds: float) -> None:
        """Report cancelled once `seconds` have elapsed from now."""
        if seconds < 0:
            raise ValueError("seconds must not be negative")
        self._deadline = time.monotonic() + seconds

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline (0 when passed), or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelled()
