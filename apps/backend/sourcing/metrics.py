"""Search pipeline observability.

Structured log events and Prometheus updates for the fan-out:
- search_start: one per inbound search
- provider_complete: one per provider call, with status and latency
- search_complete: per-request summary with provider success rate
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from observability.metrics import (
    search_provider_duration_seconds,
    search_provider_errors_total,
    search_requests_total,
    search_results_count,
)
from sourcing.models import ProviderOutcome

logger = logging.getLogger("sourcing.metrics")


@dataclass
class ProviderMetrics:
    """Metrics for a single provider execution."""
    provider_id: str
    status: str  # ok, empty, rejected, timeout, malformed, error
    result_count: int
    latency_ms: float
    error_message: Optional[str] = None


@dataclass
class SearchMetrics:
    """Aggregated metrics for a single search operation."""
    query: str = ""
    total_results: int = 0
    providers_called: int = 0
    providers_succeeded: int = 0
    providers_failed: int = 0
    total_latency_ms: float = 0.0
    provider_metrics: List[ProviderMetrics] = field(default_factory=list)

    def success_rate(self) -> float:
        """Share of called providers that did not fail."""
        if self.providers_called == 0:
            return 0.0
        return self.providers_succeeded / self.providers_called

    def has_results(self) -> bool:
        return self.total_results > 0

    def outcome_label(self) -> str:
        if self.providers_called > 0 and self.providers_failed == self.providers_called:
            return "all_failed"
        if self.providers_failed > 0:
            return "partial"
        return "ok"


class SearchMetricsCollector:
    """Collects metrics for one search request. Create one per request."""

    def __init__(self):
        self._current_metrics: Optional[SearchMetrics] = None
        self._start_time: Optional[float] = None

    @contextmanager
    def track_search(self, query: str = "") -> Iterator[SearchMetrics]:
        """Context manager to track a search operation."""
        self._current_metrics = SearchMetrics(query=query)
        self._start_time = time.monotonic()
        try:
            yield self._current_metrics
        finally:
            if self._current_metrics and self._start_time is not None:
                self._current_metrics.total_latency_ms = (time.monotonic() - self._start_time) * 1000
                self._log_metrics()
            self._current_metrics = None
            self._start_time = None

    def record_outcome(self, outcome: ProviderOutcome) -> None:
        self.record_provider(
            outcome.provider_key,
            outcome.status,
            len(outcome.records),
            float(outcome.latency_ms or 0),
            outcome.message if outcome.failed else None,
        )

    def record_provider(self, provider_id: str, status: str, result_count: int,
                        latency_ms: float, error_message: Optional[str] = None):
        """Record metrics for a provider execution."""
        if not self._current_metrics:
            return

        self._current_metrics.provider_metrics.append(
            ProviderMetrics(
                provider_id=provider_id,
                status=status,
                result_count=result_count,
                latency_ms=latency_ms,
                error_message=error_message,
            )
        )
        self._current_metrics.providers_called += 1

        if status in ("ok", "empty"):
            self._current_metrics.providers_succeeded += 1
        else:
            self._current_metrics.providers_failed += 1

    def record_results(self, total: int):
        if not self._current_metrics:
            return
        self._current_metrics.total_results = total

    def _log_metrics(self):
        m = self._current_metrics
        if not m:
            return

        provider_summary = [
            {
                "id": pm.provider_id,
                "status": pm.status,
                "results": pm.result_count,
                "latency_ms": round(pm.latency_ms, 1),
            }
            for pm in m.provider_metrics
        ]

        log_data = {
            "event": "search_complete",
            "query_length": len(m.query),
            "results": m.total_results,
            "providers": {
                "called": m.providers_called,
                "succeeded": m.providers_succeeded,
                "failed": m.providers_failed,
                "success_rate": round(m.success_rate(), 2),
                "details": provider_summary,
            },
            "latency_ms": round(m.total_latency_ms, 1),
        }

        search_requests_total.labels(outcome=m.outcome_label()).inc()

        if m.providers_failed == m.providers_called and m.providers_called > 0:
            logger.error("Search completed - all providers failed", extra=log_data)
        elif m.providers_failed > 0:
            logger.warning("Search completed with provider failures", extra=log_data)
        elif not m.has_results():
            logger.info("Search completed with no results", extra=log_data)
        else:
            logger.info("Search completed successfully", extra=log_data)


def log_search_start(query: str, providers: List[str]):
    """Log search operation start."""
    logger.info(
        "Search started",
        extra={
            "event": "search_start",
            "query_length": len(query),
            "providers_requested": providers,
        }
    )


def log_provider_result(provider_id: str, status: str, result_count: int, latency_ms: float,
                        message: Optional[str] = None):
    """Log an individual provider result and update provider metrics."""
    search_provider_duration_seconds.labels(provider=provider_id).observe(latency_ms / 1000)
    search_results_count.labels(provider=provider_id).observe(result_count)
    extra = {
        "event": "provider_complete",
        "provider_id": provider_id,
        "status": status,
        "result_count": result_count,
        "latency_ms": round(latency_ms, 1),
    }
    if status in ("ok", "empty"):
        logger.info(f"Provider {provider_id} completed", extra=extra)
        return

    search_provider_errors_total.labels(provider=provider_id, error_type=status).inc()
    extra["error_message"] = message
    if status == "timeout":
        logger.info(f"Provider {provider_id} timed out", extra=extra)
    else:
        logger.warning(f"Provider {provider_id} failed", extra=extra)
