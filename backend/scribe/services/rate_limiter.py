"""
Per-client admission control.

Fixed-window counters keyed by client identity. Each window has its own
lock, held only while the counter is read or updated, so concurrent
requests for different clients never contend and requests for the same
client cannot lose increments.

State is in-memory: restarting the process forgets every window.
"""
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from scribe.exceptions import RateLimitExceeded
from scribe.utils.logging import log_rate_limited
from scribe.utils.metrics import rate_limit_rejections_total

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitStatus:
    """Outcome of a limiter check."""
    allowed: bool
    remaining: int
    reset_time_seconds: int  # Seconds until the current window resets


@dataclass
class RateLimitWindow:
    """Mutable counter for one client key."""
    client_id: str
    window_start: float
    attempt_count: int
    limit: int
    window_duration_seconds: float
    lock: threading.Lock

    def expired(self, now: float) -> bool:
        return now >= self.window_start + self.window_duration_seconds

    def seconds_until_reset(self, now: float) -> int:
        remaining = self.window_start + self.window_duration_seconds - now
        return max(1, math.ceil(remaining))


class RateLimiter:
    """Fixed-window rate limiter with one lock per client key."""

    def __init__(
        self,
        max_attempts: int,
        window_seconds: float,
        name: str = "default",
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.name = name
        self._clock = clock
        self._windows: Dict[str, RateLimitWindow] = {}
        # Guards the dict itself. Lock order: registry lock, then a window lock
        self._registry_lock = threading.Lock()
        self._last_purge = clock()

    def check_limit(self, client_id: str) -> RateLimitStatus:
        """Report the client's standing without counting an attempt."""
        now = self._clock()
        window = self._windows.get(client_id)
        if window is None:
            return RateLimitStatus(True, self.max_attempts, math.ceil(self.window_seconds))

        with window.lock:
            if window.expired(now):
                return RateLimitStatus(True, self.max_attempts, math.ceil(self.window_seconds))
            remaining = max(0, window.limit - window.attempt_count)
            return RateLimitStatus(remaining > 0, remaining, window.seconds_until_reset(now))

    def record_attempt(self, client_id: str) -> RateLimitStatus:
        """Count an attempt unconditionally and return the new standing."""
        return self._update(client_id, enforce=False)

    def acquire(self, client_id: str) -> RateLimitStatus:
        """
        Atomically check and count an attempt.

        Attempts over the limit are rejected and do not extend or consume
        the window.
        """
        return self._update(client_id, enforce=True)

    def purge_expired(self) -> int:
        """Drop windows whose period has elapsed. Returns how many were removed."""
        now = self._clock()
        expired = []
        with self._registry_lock:
            for key, window in list(self._windows.items()):
                with window.lock:
                    if window.expired(now):
                        del self._windows[key]
                        expired.append(key)
            self._last_purge = now
        if expired:
            logger.debug(f"Purged {len(expired)} expired rate-limit windows from {self.name}")
        return len(expired)

    def reset(self) -> None:
        """Forget every window."""
        with self._registry_lock:
            self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)

    def _update(self, client_id: str, enforce: bool) -> RateLimitStatus:
        now = self._clock()
        if now - self._last_purge >= self.window_seconds:
            self.purge_expired()

        while True:
            window = self._get_or_create_window(client_id, now)
            with window.lock:
                if self._windows.get(client_id) is not window:
                    # Purged between lookup and lock; retry on the live window
                    continue
                return self._count(window, now, enforce)

    def _count(self, window: RateLimitWindow, now: float, enforce: bool) -> RateLimitStatus:
        # Caller holds window.lock
        if window.expired(now):
            window.window_start = now
            window.attempt_count = 0

        if enforce and window.attempt_count >= window.limit:
            return RateLimitStatus(False, 0, window.seconds_until_reset(now))

        window.attempt_count += 1
        remaining = max(0, window.limit - window.attempt_count)
        return RateLimitStatus(
            window.attempt_count <= window.limit,
            remaining,
            window.seconds_until_reset(now),
        )

    def _get_or_create_window(self, client_id: str, now: float) -> RateLimitWindow:
        window = self._windows.get(client_id)
        if window is not None:
            return window
        with self._registry_lock:
            window = self._windows.get(client_id)
            if window is None:
                window = RateLimitWindow(
                    client_id=client_id,
                    window_start=now,
                    attempt_count=0,
                    limit=self.max_attempts,
                    window_duration_seconds=self.window_seconds,
                    lock=threading.Lock(),
                )
                self._windows[client_id] = window
            return window


def enforce_rate_limit(limiter: RateLimiter, client_id: str) -> RateLimitStatus:
    """
    Acquire a slot or fail the request.

    Raises:
        RateLimitExceeded: If the client is over its budget for the window
    """
    status = limiter.acquire(client_id)
    if not status.allowed:
        rate_limit_rejections_total.labels(operation=limiter.name).inc()
        log_rate_limited(
            logger,
            client_id=client_id,
            operation=limiter.name,
            limit=limiter.max_attempts,
            retry_after_seconds=status.reset_time_seconds,
        )
        raise RateLimitExceeded(client_id, status.reset_time_seconds, limiter.max_attempts)
    return status


class RateLimiterRegistry:
    """Independent limiter instances per operation class (auth, summarize, tagging)."""

    def __init__(self, limiters: Dict[str, RateLimiter]):
        self._limiters = dict(limiters)

    @classmethod
    def from_settings(cls, settings, clock: Optional[Callable[[], float]] = None) -> "RateLimiterRegistry":
        clock = clock or time.monotonic
        return cls({
            "auth": RateLimiter(
                settings.rate_limit_auth_attempts,
                settings.rate_limit_auth_window_seconds,
                name="auth",
                clock=clock,
            ),
            "summarize": RateLimiter(
                settings.rate_limit_summarize_attempts,
                settings.rate_limit_summarize_window_seconds,
                name="summarize",
                clock=clock,
            ),
            "tagging": RateLimiter(
                settings.rate_limit_tagging_attempts,
                settings.rate_limit_tagging_window_seconds,
                name="tagging",
                clock=clock,
            ),
        })

    def get(self, operation: str) -> RateLimiter:
        try:
            return self._limiters[operation]
        except KeyError:
            raise KeyError(f"No rate limiter configured for operation '{operation}'")

    def __getitem__(self, operation: str) -> RateLimiter:
        return self.get(operation)

    def __contains__(self, operation: str) -> bool:
        return operation in self._limiters
