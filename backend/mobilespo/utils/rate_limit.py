import threading
import time
from typing import Callable, Dict, Tuple


class RateLimiter:
    """Fixed-window request counter keyed by caller (phone number or IP)."""

    def __init__(self, limit: int, window: int, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window = window
        self.clock = clock
        self._hits: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> bool:
        """Count one request; False once the key is over its limit."""
        now = self.clock()
        with self._lock:
            started, count = self._hits.get(key, (now, 0))
            if now - started >= self.window:
                started, count = now, 0
            count += 1
            self._hits[key] = (started, count)

            # keep the table from growing without bound
            if len(self._hits) > 10000:
                self._hits = {k: v for k, v in self._hits.items() if now - v[0] < self.window}

        return count <= self.limit

    def reset(self):
        with self._lock:
            self._hits.clear()
