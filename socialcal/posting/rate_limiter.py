"""
Fixed-window request quotas per (platform, account), kept in memory.
"""
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR


@dataclass(frozen=True)
class Quota:
    max_requests: int
    window_seconds: int


# Conservative publishing quotas
PLATFORM_QUOTAS: Dict[str, Quota] = {
    "facebook": Quota(200, HOUR),
    "instagram": Quota(25, DAY),
    "threads": Quota(250, DAY),
    "twitter": Quota(200, 15 * MINUTE),
    "linkedin": Quota(100, DAY),
    "bluesky": Quota(300, 5 * MINUTE),
    "pinterest": Quota(100, HOUR),
    "tiktok": Quota(10, DAY),
    "youtube": Quota(50, DAY),
}


class PlatformRateLimiter:
    """Counts publish requests; unknown platforms are never limited"""

    def __init__(self, quotas: Dict[str, Quota] = None, clock: Callable[[], float] = time.monotonic):
        self.quotas = PLATFORM_QUOTAS if quotas is None else quotas
        self._clock = clock
        self._windows: Dict[Tuple[str, str], Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def _window(self, platform: str, account_id: str) -> Tuple[float, int]:
        key = (platform, account_id)
        now = self._clock()
        quota = self.quotas[platform]
        start, count = self._windows.get(key, (now, 0))
        if now - start >= quota.window_seconds:
            start, count = now, 0
        self._windows[key] = (start, count)
        return start, count

    def can_request(self, platform: str, account_id: str) -> bool:
        if platform not in self.quotas:
            return True
        with self._lock:
            _, count = self._window(platform, account_id)
            return count < self.quotas[platform].max_requests

    def record(self, platform: str, account_id: str):
        """Count a request; call after the platform accepted it"""
        if platform not in self.quotas:
            return
        with self._lock:
            start, count = self._window(platform, account_id)
            self._windows[(platform, account_id)] = (start, count + 1)

    def remaining(self, platform: str, account_id: str) -> float:
        if platform not in self.quotas:
            return float("inf")
        with self._lock:
            _, count = self._window(platform, account_id)
            return max(0, self.quotas[platform].max_requests - count)

    def reset_in(self, platform: str, account_id: str) -> float:
        if platform not in self.quotas:
            return 0.0
        with self._lock:
            start, _ = self._window(platform, account_id)
            return max(0.0, self.quotas[platform].window_seconds - (self._clock() - start))

    def clear(self):
        with self._lock:
            self._windows.clear()


rate_limiter = PlatformRateLimiter()
