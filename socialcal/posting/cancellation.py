"""
Cooperative cancellation for a dispatch run.
"""
import threading
from typing import Optional


class CancellationToken:
    """Set once; the dispatcher checks it before starting each platform."""

    def __init__(self):
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled"):
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
