"""
ASGI middleware for tracking HTTP request metrics.
Records request count, duration, and errors per normalized route.
"""
import re
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from scribe.utils.metrics import http_requests_total, http_request_duration_seconds, errors_total

_UUID_RE = re.compile(r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', re.IGNORECASE)
_NUMERIC_SEGMENT_RE = re.compile(r'/\d+(?=/|$)')
_SUMMARY_ID_RE = re.compile(r'(/summaries/)[^/]+')

UNTRACKED_PATHS = frozenset({"/metrics"})


def normalize_path(path: str) -> str:
    """
    Collapse ids in a path so each route is one label value.

    /api/summaries/abc-123/tags -> /api/summaries/{id}/tags
    """
    path = _UUID_RE.sub('{id}', path)
    path = _NUMERIC_SEGMENT_RE.sub('/{id}', path)
    # Summary ids are opaque strings, not always UUIDs
    path = _SUMMARY_ID_RE.sub(r'\1{id}', path)
    return path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to track HTTP metrics for Prometheus."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in UNTRACKED_PATHS:
            return await call_next(request)

        method = request.method
        path = normalize_path(request.url.path)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            errors_total.labels(error_type="exception").inc()
            raise

        status_code = response.status_code
        http_requests_total.labels(method=method, path=path, status=status_code).inc()
        http_request_duration_seconds.labels(method=method, path=path).observe(time.perf_counter() - start_time)

        # 4xx and 5xx
        if status_code >= 400:
            errors_total.labels(error_type=f"{status_code // 100}xx").inc()

        return response
