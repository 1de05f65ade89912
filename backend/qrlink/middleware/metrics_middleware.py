"""
ASGI middleware for tracking HTTP request metrics.
Records request count, duration, and errors.
"""
import re
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from qrlink.utils.metrics import http_requests_total, http_request_duration_seconds, errors_total

SHORT_LINK_PATH = re.compile(r'^/s/[^/]+$')


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to track HTTP metrics for Prometheus."""

    async def dispatch(self, request: Request, call_next):
        """Process request and record metrics."""
        start_time = time.time()

        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        normalized_path = self._normalize_path(request.url.path)

        try:
            response = await call_next(request)
        except Exception:
            errors_total.labels(error_type="exception").inc()
            raise

        status_code = response.status_code
        http_requests_total.labels(
            method=method,
            path=normalized_path,
            status=status_code
        ).inc()

        duration = time.time() - start_time
        http_request_duration_seconds.labels(
            method=method,
            path=normalized_path
        ).observe(duration)

        # Track errors (4xx and 5xx)
        if status_code >= 400:
            errors_total.labels(error_type=f"{status_code // 100}xx").inc()

        return response

    def _normalize_path(self, path: str) -> str:
        """
        Normalize path to reduce cardinality.
        Every short code collapses into a single /s/{code} label.
        """
        if SHORT_LINK_PATH.match(path):
            return "/s/{code}"
        return path
