"""
In-memory cache with TTL for the JSON repository
Reduces file I/O for collections that are read on every request
"""
import time
from threading import Lock
from typing import Any, Callable, Dict, Optional, Tuple


class TTLCache:
    """
    Thread-safe in-memory cache with TTL (Time To Live)

    Each JsonFileBackend owns its own instance, there are no shared globals.
    """
    def __init__(self, ttl_seconds: float = 60, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl_seconds
        self._clock = clock
        self._cache: Dict[str, Tuple[Any, float]] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache if not expired"""
        with self._lock:
            if key in self._cache:
                value, expiry = self._cache[key]
                if self._clock() < expiry:
                    return value
                # Expired
                del self._cache[key]
            return None

    def set(self, key: str, value: Any):
        """Set value in cache with TTL"""
        if self.ttl <= 0:
            return
        with self._lock:
            self._cache[key] = (value, self._clock() + self.ttl)

    def invalidate(self, key: str):
        """Remove key from cache"""
        with self._lock:
            self._cache.pop(key, None)

    def clear(self):
        """Clear all cache entries"""
        with self._lock:
            self._cache.clear()
