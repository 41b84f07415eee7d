"""
Fixed-window rate limiter

One instance per application (see main.create_app), never a module global,
so tests can build fresh limiters with their own clock.
"""
import time
from threading import Lock
from typing import Callable, Dict, Tuple


class RateLimiter:
    """
    Thread-safe attempt counter per key

    The first attempt for a key opens a window of window_seconds. Attempts
    beyond max_attempts inside that window are limited. The window restarts
    on the first attempt after it has elapsed.
    """
    def __init__(self, max_attempts: int = 5, window_seconds: float = 15 * 60,
                 clock: Callable[[], float] = time.monotonic):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._attempts: Dict[str, Tuple[int, float]] = {}
        self._lock = Lock()

    def _sweep(self, now: float):
        # Caller holds the lock
        expired = [key for key, (_, started_at) in self._attempts.items() if now - started_at > self.window_seconds]
        for key in expired:
            del self._attempts[key]

    def is_rate_limited(self, key: str) -> bool:
        """Record an attempt for key and report whether it exceeds the limit"""
        with self._lock:
            now = self._clock()
            self._sweep(now)
            entry = self._attempts.get(key)
            if entry is None or now - entry[1] > self.window_seconds:
                self._attempts[key] = (1, now)
                return False

            count, started_at = entry
            count += 1
            self._attempts[key] = (count, started_at)
            return count > self.max_attempts

    def remaining_attempts(self, key: str) -> int:
        with self._lock:
            entry = self._attempts.get(key)
            if entry is None or self._clock() - entry[1] > self.window_seconds:
                return self.max_attempts
            return max(0, self.max_attempts - entry[0])

    def reset(self, key: str):
        """Forget all attempts for key"""
        with self._lock:
            self._attempts.pop(key, None)

    def clear(self):
        """Forget all keys"""
        with self._lock:
            self._attempts.clear()
