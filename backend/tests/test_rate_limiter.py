"""
Tests for per-client rate limiting.
"""
import threading

import pytest

from scribe.config import Settings
from scribe.exceptions import RateLimitExceeded
from scribe.services.rate_limiter import RateLimiter, RateLimiterRegistry, enforce_rate_limit

from conftest import FakeClock


class TestRateLimiter:
    """Tests for RateLimiter."""

    def test_first_request_is_always_allowed(self):
        """An unseen client gets through with the full budget minus one."""
        limiter = RateLimiter(3, 60, clock=FakeClock())

        status = limiter.acquire("summarize:10.0.0.1")

        assert status.allowed is True
        assert status.remaining == 2
        assert status.reset_time_seconds == 60

    def test_rejects_after_limit_within_window(self):
        """The (N+1)th attempt inside one window is rejected."""
        clock = FakeClock()
        limiter = RateLimiter(10, 60, clock=clock)

        results = []
        for _ in range(11):
            results.append(limiter.acquire("client"))
            clock.advance(1)

        assert all(r.allowed for r in results[:10])
        assert results[10].allowed is False
        assert results[10].remaining == 0
        assert results[10].reset_time_seconds > 0

    def test_rejected_attempts_are_not_counted(self):
        """Rejections do not consume budget in the next window."""
        clock = FakeClock()
        limiter = RateLimiter(2, 60, clock=clock)
        limiter.acquire("client")
        limiter.acquire("client")
        for _ in range(5):
            assert limiter.acquire("client").allowed is False

        clock.advance(60)
        status = limiter.acquire("client")

        assert status.allowed is True
        assert status.remaining == 1

    def test_window_resets_after_duration(self):
        """A new window starts once the old one has elapsed."""
        clock = FakeClock()
        limiter = RateLimiter(1, 30, clock=clock)
        assert limiter.acquire("client").allowed is True
        assert limiter.acquire("client").allowed is False

        clock.advance(30)

        assert limiter.acquire("client").allowed is True

    def test_reset_time_counts_down(self):
        """reset_time_seconds reflects the time left in the window."""
        clock = FakeClock()
        limiter = RateLimiter(1, 60, clock=clock)
        limiter.acquire("client")

        clock.advance(45.5)
        status = limiter.acquire("client")

        assert status.allowed is False
        assert status.reset_time_seconds == 15

    def test_clients_are_independent(self):
        """One client's exhaustion does not affect another."""
        limiter = RateLimiter(1, 60, clock=FakeClock())
        limiter.acquire("a")

        assert limiter.acquire("a").allowed is False
        assert limiter.acquire("b").allowed is True

    def test_check_limit_does_not_count(self):
        """check_limit is a read-only view."""
        limiter = RateLimiter(2, 60, clock=FakeClock())

        for _ in range(5):
            status = limiter.check_limit("client")
            assert status.allowed is True
            assert status.remaining == 2

        limiter.record_attempt("client")
        assert limiter.check_limit("client").remaining == 1

    def test_record_attempt_counts_unconditionally(self):
        """record_attempt keeps counting past the limit and reports not allowed."""
        limiter = RateLimiter(1, 60, clock=FakeClock())

        assert limiter.record_attempt("client").allowed is True
        assert limiter.record_attempt("client").allowed is False
        assert limiter.check_limit("client").allowed is False

    def test_expired_windows_are_purged(self):
        """Expired windows are garbage-collected."""
        clock = FakeClock()
        limiter = RateLimiter(5, 60, clock=clock)
        limiter.acquire("a")
        limiter.acquire("b")
        assert len(limiter) == 2

        clock.advance(61)
        removed = limiter.purge_expired()

        assert removed == 2
        assert len(limiter) == 0

    def test_purge_runs_opportunistically(self):
        """A request after a full window triggers a purge of stale keys."""
        clock = FakeClock()
        limiter = RateLimiter(5, 60, clock=clock)
        for i in range(10):
            limiter.acquire(f"client-{i}")

        clock.advance(120)
        limiter.acquire("fresh")

        assert len(limiter) == 1

    def test_restart_loses_state(self):
        """A new limiter instance starts with no memory of previous windows."""
        clock = FakeClock()
        limiter = RateLimiter(1, 60, clock=clock)
        limiter.acquire("client")
        assert limiter.acquire("client").allowed is False

        restarted = RateLimiter(1, 60, clock=clock)

        assert restarted.acquire("client").allowed is True

    def test_invalid_configuration(self):
        """Non-positive limits are rejected at construction."""
        with pytest.raises(ValueError):
            RateLimiter(0, 60)
        with pytest.raises(ValueError):
            RateLimiter(5, 0)

    def test_concurrent_acquire_never_exceeds_limit(self):
        """Parallel attempts for one key admit exactly the limit."""
        limiter = RateLimiter(50, 60)
        allowed = []
        lock = threading.Lock()
        barrier = threading.Barrier(20)

        def worker():
            barrier.wait()
            for _ in range(10):
                status = limiter.acquire("shared")
                if status.allowed:
                    with lock:
                        allowed.append(status)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(allowed) == 50
        assert limiter.check_limit("shared").remaining == 0


class TestEnforceRateLimit:
    """Tests for enforce_rate_limit."""

    def test_raises_with_retry_after(self):
        """Rejection surfaces as RateLimitExceeded with retry information."""
        limiter = RateLimiter(1, 60, name="summarize", clock=FakeClock())
        enforce_rate_limit(limiter, "client")

        with pytest.raises(RateLimitExceeded) as exc_info:
            enforce_rate_limit(limiter, "client")

        assert exc_info.value.retry_after_seconds == 60
        assert exc_info.value.limit == 1
        assert exc_info.value.status_code == 429


class TestRateLimiterRegistry:
    """Tests for RateLimiterRegistry."""

    def test_from_settings_builds_operation_classes(self):
        """Each operation class gets its configured limits."""
        registry = RateLimiterRegistry.from_settings(Settings())

        assert registry["auth"].max_attempts == 5
        assert registry["auth"].window_seconds == 900
        assert registry["summarize"].max_attempts == 10
        assert registry["summarize"].window_seconds == 60
        assert registry["tagging"].max_attempts == 20

    def test_operation_classes_are_independent(self):
        """Exhausting one operation class leaves the others untouched."""
        registry = RateLimiterRegistry.from_settings(Settings(), clock=FakeClock())
        for _ in range(5):
            registry["auth"].acquire("10.0.0.1")

        assert registry["auth"].acquire("10.0.0.1").allowed is False
        assert registry["summarize"].acquire("10.0.0.1").allowed is True

    def test_unknown_operation(self):
        """Unknown operation classes are a KeyError."""
        registry = RateLimiterRegistry.from_settings(Settings())

        assert "summarize" in registry
        assert "billing" not in registry
        with pytest.raises(KeyError):
            registry.get("billing")
