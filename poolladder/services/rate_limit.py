"""In-memory sliding-window limiter for login attempts, keyed by client address."""

import logging
import threading
import time
from collections import defaultdict, deque
from typing import Callable

logger = logging.getLogger(__name__)

class LoginRateLimiter:
    """
    Note: history lives in process memory, so limits reset on restart and are
    not shared between workers. Idle keys are pruned once the table grows
    past ``max_keys``.
    """

    def __init__(self, limit: int, window_seconds: int, clock: Callable[[], float] = time.monotonic,
                 max_keys: int = 1000):
        self.limit = limit
        self.window = window_seconds
        self._clock = clock
        self._max_keys = max_keys
        self._attempts = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, key: str) -> int | None:
        """Record an attempt. Returns None if allowed, else seconds until the next slot frees."""
        now = self._clock()
        with self._lock:
            attempts = self._attempts[key]
            while attempts and attempts[0] <= now - self.window:
                attempts.popleft()

            if len(attempts) >= self.limit:
                retry_after = int(attempts[0] + self.window - now) + 1
                logger.warning("Login rate limit exceeded for %s", key)
                return retry_after

            attempts.append(now)
            if len(self._attempts) > self._max_keys:
                self._prune(now)
            return None

    def reset(self) -> None:
        with self._lock:
            self._attempts.clear()

    def _prune(self, now: float) -> None:
        stale = [k for k, v in self._attempts.items() if not v or v[-1] <= now - self.window]
        for key in stale:
            del self._attempts[key]
