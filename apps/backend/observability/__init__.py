"""
Observability infrastructure for the video search backend.

Provides:
- Structured logging with correlation IDs
- Sentry error tracking
- Prometheus metrics
- Health check utilities
"""

from .logging import get_logger, correlation_id_context, get_correlation_id, provider_context
from .metrics import (
    metrics_registry,
    http_requests_total,
    http_request_duration_seconds,
    http_requests_in_progress,
    search_provider_duration_seconds,
    search_provider_errors_total,
    search_results_count,
    search_requests_total,
)

__all__ = [
    "get_logger",
    "correlation_id_context",
    "get_correlation_id",
    "provider_context",
    "metrics_registry",
    "http_requests_total",
    "http_request_duration_seconds",
    "http_requests_in_progress",
    "search_provider_duration_seconds",
    "search_provider_errors_total",
    "search_results_count",
    "search_requests_total",
]
