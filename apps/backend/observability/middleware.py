"""
Request instrumentation: correlation id, HTTP RED metrics and access logging.

The inbound ``X-Request-ID`` (or ``X-Correlation-ID``) is reused when present
and echoed back on the response. Query strings are never logged, since they
carry the user's search text.
"""

import os
import re
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .logging import get_logger, correlation_id_context
from .metrics import (
    http_requests_total,
    http_request_duration_seconds,
    http_requests_in_progress,
)

logger = get_logger(__name__)

# Above the default provider timeout, so a normal fan-out never trips it.
try:
    SLOW_REQUEST_SECONDS = float(os.getenv("SLOW_REQUEST_SECONDS", "8.0"))
except ValueError:
    SLOW_REQUEST_SECONDS = 8.0

QUIET_PREFIXES = ("/health", "/metrics")

_UUID_SEGMENT = re.compile(r"/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)
_NUMERIC_SEGMENT = re.compile(r"/\d+")


def sanitize_path(path: str) -> str:
    """Collapse id-like segments so the endpoint label stays low-cardinality."""
    path = _UUID_SEGMENT.sub("/{uuid}", path)
    return _NUMERIC_SEGMENT.sub("/{id}", path)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, enable_request_logging: bool = True):
        super().__init__(app)
        self.enable_request_logging = enable_request_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming_id = request.headers.get("X-Request-ID") or request.headers.get("X-Correlation-ID")

        with correlation_id_context(incoming_id) as req_id:
            request.state.correlation_id = req_id
            method = request.method
            endpoint = sanitize_path(request.url.path)
            log_access = self.enable_request_logging and not request.url.path.startswith(QUIET_PREFIXES)

            http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()
            started = time.monotonic()
            try:
                response = await call_next(request)
            except Exception as exc:
                duration = self._observe(method, endpoint, 500, started)
                logger.error(
                    "Request failed",
                    extra={
                        "method": method,
                        "path": endpoint,
                        "duration_seconds": duration,
                        "error_type": type(exc).__name__,
                    },
                    exc_info=True,
                )
                raise
            finally:
                http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()

            duration = self._observe(method, endpoint, response.status_code, started)
            response.headers["X-Request-ID"] = req_id

            if log_access:
                extra = {
                    "method": method,
                    "path": endpoint,
                    "status_code": response.status_code,
                    "duration_seconds": duration,
                }
                if duration > SLOW_REQUEST_SECONDS:
                    logger.warning("Slow request", extra=extra)
                else:
                    logger.info(f"{method} {endpoint} {response.status_code}", extra=extra)

            return response

    @staticmethod
    def _observe(method: str, endpoint: str, status: int, started: float) -> float:
        duration = time.monotonic() - started
        http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)
        return round(duration, 3)
