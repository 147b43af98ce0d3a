"""Admin resolution: static allow-list or per-user role record, cached briefly."""

import logging
import threading
import time
from collections.abc import Iterable

logger = logging.getLogger("job_tracker.admin")

DEFAULT_CACHE_SECONDS = 5 * 60


def parse_admin_emails(raw) -> list[str]:
    """Split a comma-separated string (or list) into normalised email addresses."""
    if not raw:
        return []
    items = raw.split(",") if isinstance(raw, str) else raw
    return [e.strip().lower() for e in items if e and e.strip()]


class AdminResolver:
    def __init__(
        self,
        admin_emails: Iterable[str] = (),
        ttl_seconds: float = DEFAULT_CACHE_SECONDS,
        clock=time.monotonic,
    ):
        self.admin_emails = set(parse_admin_emails(list(admin_emails)))
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._cache: dict[str, tuple[bool, float]] = {}
        self._lock = threading.Lock()

    def is_listed(self, email: str) -> bool:
        return (email or "").strip().lower() in self.admin_emails

    def is_admin(self, user) -> bool:
        """True if user is on the allow-list or carries the admin role."""
        if user is None or not user.email:
            return False

        key = user.email.strip().lower()
        now = self.clock()
        with self._lock:
            cached = self._cache.get(key)
            if cached and now - cached[1] < self.ttl_seconds:
                return cached[0]

        result = self.is_listed(key) or bool(getattr(user, "is_admin", False))
        with self._lock:
            self._cache[key] = (result, now)
        logger.debug("Admin check for %s: %s", key, result)
        return result

    def forget(self, email: str) -> None:
        with self._lock:
            self._cache.pop((email or "").strip().lower(), None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
