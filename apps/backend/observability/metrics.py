"""
Prometheus metrics collection for the video search backend.

Provides RED metrics (Rate, Errors, Duration) for HTTP and for each search provider.
"""

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    REGISTRY,
)

# Use the default registry
metrics_registry = REGISTRY

# HTTP Metrics (RED - Rate, Errors, Duration)
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=metrics_registry,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=metrics_registry,
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["method", "endpoint"],
    registry=metrics_registry,
)

# Search Provider Metrics
search_provider_duration_seconds = Histogram(
    "search_provider_duration_seconds",
    "Search provider call duration in seconds",
    ["provider"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 8.0, 10.0],
    registry=metrics_registry,
)

search_provider_errors_total = Counter(
    "search_provider_errors_total",
    "Total search provider failures",
    ["provider", "error_type"],  # error_type: rejected, timeout, malformed, error
    registry=metrics_registry,
)

search_results_count = Histogram(
    "search_results_count",
    "Number of records contributed per provider call",
    ["provider"],
    buckets=[0, 1, 5, 10, 15, 20, 50],
    registry=metrics_registry,
)

# Aggregated searches
search_requests_total = Counter(
    "search_requests_total",
    "Total aggregated search requests",
    ["outcome"],  # outcome: ok, partial, all_failed
    registry=metrics_registry,
)
