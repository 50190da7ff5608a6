import threading
import time
from typing import Optional

from coachline.exceptions import SearchCancelled, SearchTimedOut


class CancellationToken:
    """Cooperative cancellation signal shared between a caller and one search

    The token fires either when `cancel()` is called or once its optional
    deadline (seconds from creation, monotonic clock) has passed. The two
    are reported differently: an explicit cancel raises `SearchCancelled`,
    an expired deadline raises `SearchTimedOut`, which callers may retry.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self.reason: Optional[str] = None
        self.timed_out = False

    def cancel(self, reason: str = "cancelled by caller"):
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None when there is no deadline"""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    @property
    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.timed_out = True
            self.cancel("search deadline exceeded")
            return True
        return False

    def raise_if_cancelled(self):
        if not self.is_cancelled:
            return
        if self.timed_out:
            raise SearchTimedOut(self.reason)
        raise SearchCancelled(self.reason)
