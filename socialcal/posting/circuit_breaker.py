"""
Per-platform circuit breaker.

CLOSED lets calls through, OPEN rejects them until the recovery time has
passed, HALF_OPEN lets calls through until enough succeed to close again
(any failure re-opens). State is per process.
"""
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

from ..logging_config import posting_logger

CLOSED = "CLOSED"
OPEN = "OPEN"
HALF_OPEN = "HALF_OPEN"


@dataclass(frozen=True)
class BreakerConfig:
    failure_threshold: int = 5
    recovery_seconds: float = 60.0
    success_threshold: int = 2


DEFAULT_CONFIG = BreakerConfig()

PLATFORM_CONFIGS: Dict[str, BreakerConfig] = {
    "tiktok": replace(DEFAULT_CONFIG, failure_threshold=3, recovery_seconds=120.0),
}


@dataclass
class _BreakerState:
    state: str = CLOSED
    failures: int = 0
    successes: int = 0
    last_failure_at: float = 0.0


class CircuitBreaker:
    """Tracks consecutive failures per platform"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._states: Dict[str, _BreakerState] = {}
        self._lock = threading.Lock()

    def config_for(self, platform: str) -> BreakerConfig:
        return PLATFORM_CONFIGS.get(platform, DEFAULT_CONFIG)

    def _get(self, platform: str) -> _BreakerState:
        return self._states.setdefault(platform, _BreakerState())

    def can_call(self, platform: str) -> bool:
        with self._lock:
            state = self._get(platform)
            if state.state != OPEN:
                return True
            if self._clock() - state.last_failure_at >= self.config_for(platform).recovery_seconds:
                state.state = HALF_OPEN
                state.successes = 0
                posting_logger.info("Circuit half-open", platform=platform)
                return True
            return False

    def record_success(self, platform: str):
        with self._lock:
            state = self._get(platform)
            if state.state == HALF_OPEN:
                state.successes += 1
                if state.successes >= self.config_for(platform).success_threshold:
                    state.state = CLOSED
                    state.failures = 0
                    posting_logger.info("Circuit closed", platform=platform)
            else:
                state.failures = 0

    def record_failure(self, platform: str):
        with self._lock:
            state = self._get(platform)
            config = self.config_for(platform)
            state.last_failure_at = self._clock()

            if state.state == HALF_OPEN:
                state.state = OPEN
                state.failures = config.failure_threshold
                state.successes = 0
                posting_logger.warning("Circuit re-opened", platform=platform)
            elif state.state == CLOSED:
                state.failures += 1
                if state.failures >= config.failure_threshold:
                    state.state = OPEN
                    posting_logger.warning("Circuit opened", platform=platform, failures=state.failures)

    def retry_in(self, platform: str) -> Optional[float]:
        """Seconds until an open circuit will let a call through"""
        with self._lock:
            state = self._get(platform)
            if state.state != OPEN:
                return None
            elapsed = self._clock() - state.last_failure_at
            return max(0.0, self.config_for(platform).recovery_seconds - elapsed)

    def status(self, platform: str) -> Dict:
        with self._lock:
            state = self._get(platform)
            return {
                "platform": platform,
                "state": state.state,
                "failures": state.failures,
                "successes": state.successes,
            }

    def reset(self, platform: str = None):
        with self._lock:
            if platform is None:
                self._states.clear()
            else:
                self._states.pop(platform, None)


circuit_breaker = CircuitBreaker()
