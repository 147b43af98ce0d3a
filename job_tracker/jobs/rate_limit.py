"""Rate limiters: a minimum interval between user actions, and a fixed window per client."""

import threading
import time

from job_tracker.errors import RateLimitedError

DEFAULT_MIN_INTERVAL_MS = 1000


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class ActionRateLimiter:
    """Rejects a mutating action fired less than min_interval_ms after the last accepted one.

    This guards against accidental double submits. It is not a security control.
    """

    def __init__(self, min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS, clock=_monotonic_ms):
        self.min_interval_ms = min_interval_ms
        self.clock = clock
        self.last_action_ms: float | None = None

    def allow(self, now_ms: float | None = None) -> bool:
        now_ms = self.clock() if now_ms is None else now_ms
        if self.last_action_ms is not None and now_ms - self.last_action_ms < self.min_interval_ms:
            return False
        self.last_action_ms = now_ms
        return True

    def check(self, now_ms: float | None = None) -> None:
        """Like allow() but raises RateLimitedError when rejected."""
        if not self.allow(now_ms):
            raise RateLimitedError()


class ActionLimiterRegistry:
    """One ActionRateLimiter per signed-in user, kept in process memory."""

    def __init__(self, min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS):
        self.min_interval_ms = min_interval_ms
        self._limiters: dict[int, ActionRateLimiter] = {}
        self._lock = threading.Lock()

    def get(self, user_id: int) -> ActionRateLimiter:
        with self._lock:
            limiter = self._limiters.get(user_id)
            if limiter is None:
                limiter = ActionRateLimiter(self.min_interval_ms)
                self._limiters[user_id] = limiter
            return limiter


class FixedWindowLimiter:
    """At most max_requests per key in each window_seconds window."""

    def __init__(self, max_requests: int = 10, window_seconds: float = 60.0, clock=time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()

    def allow(self, key: str, now: float | None = None) -> bool:
        now = self.clock() if now is None else now
        with self._lock:
            window = self._windows.get(key)
            if window is None or now - window[0] > self.window_seconds:
                self._windows[key] = (now, 1)
                return True

            started, count = window
            if count >= self.max_requests:
                return False
            self._windows[key] = (started, count + 1)
            return True

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
