"""Tests for search pipeline observability metrics."""

import time

from observability.metrics import metrics_registry
from sourcing.metrics import (
    ProviderMetrics,
    SearchMetrics,
    SearchMetricsCollector,
    log_provider_result,
    log_search_start,
)
from sourcing.models import ProviderOutcome


def _sample(name, labels):
    value = metrics_registry.get_sample_value(name, labels)
    return value or 0.0


class TestSearchMetrics:
    """Tests for SearchMetrics dataclass."""

    def test_success_rate_with_all_succeeded(self):
        metrics = SearchMetrics(providers_called=3, providers_succeeded=3)
        assert metrics.success_rate() == 1.0

    def test_success_rate_with_partial_failure(self):
        metrics = SearchMetrics(providers_called=4, providers_succeeded=2, providers_failed=2)
        assert metrics.success_rate() == 0.5

    def test_success_rate_with_no_providers(self):
        metrics = SearchMetrics(providers_called=0)
        assert metrics.success_rate() == 0.0

    def test_has_results(self):
        assert SearchMetrics(total_results=5).has_results() is True
        assert SearchMetrics(total_results=0).has_results() is False

    def test_outcome_label(self):
        assert SearchMetrics(providers_called=2, providers_succeeded=2).outcome_label() == "ok"
        assert SearchMetrics(providers_called=2, providers_succeeded=1, providers_failed=1).outcome_label() == "partial"
        assert SearchMetrics(providers_called=2, providers_failed=2).outcome_label() == "all_failed"


def test_provider_metrics_with_error():
    pm = ProviderMetrics(
        provider_id="alpha",
        status="timeout",
        result_count=0,
        latency_ms=5000.0,
        error_message="no response within 5.0s",
    )
    assert pm.status == "timeout"
    assert pm.error_message == "no response within 5.0s"


class TestSearchMetricsCollector:
    """Tests for SearchMetricsCollector."""

    def test_track_search_context_manager(self):
        collector = SearchMetricsCollector()

        with collector.track_search(query="test query") as metrics:
            assert metrics.query == "test query"
            collector.record_provider("alpha", "ok", 5, 100.0)
            collector.record_results(5)

        # After context exits, metrics should be cleared
        assert collector._current_metrics is None

    def test_empty_provider_counts_as_success(self):
        collector = SearchMetricsCollector()

        with collector.track_search(query="test") as metrics:
            collector.record_provider("alpha", "ok", 5, 100.0)
            collector.record_provider("beta", "empty", 0, 80.0)
            collector.record_provider("gamma", "timeout", 0, 5000.0, "timeout")

            assert metrics.providers_called == 3
            assert metrics.providers_succeeded == 2
            assert metrics.providers_failed == 1
            assert len(metrics.provider_metrics) == 3

    def test_record_outcome_uses_outcome_status(self):
        collector = SearchMetricsCollector()

        with collector.track_search(query="test") as metrics:
            collector.record_outcome(ProviderOutcome.success("alpha", [{"name": "x"}], latency_ms=12))
            collector.record_outcome(
                ProviderOutcome.failure("beta", "malformed payload", latency_ms=3.0, message="bad xml")
            )

            first, second = metrics.provider_metrics
            assert (first.status, first.result_count, first.error_message) == ("ok", 1, None)
            assert (second.status, second.error_message) == ("malformed", "bad xml")

    def test_record_outside_tracking_is_ignored(self):
        collector = SearchMetricsCollector()
        collector.record_provider("alpha", "ok", 1, 1.0)
        collector.record_results(1)
        assert collector._current_metrics is None

    def test_search_requests_counter_labelled_by_outcome(self):
        before = _sample("search_requests_total", {"outcome": "all_failed"})
        collector = SearchMetricsCollector()

        with collector.track_search(query="test"):
            collector.record_provider("alpha", "rejected", 0, 10.0, "HTTP 503")

        assert _sample("search_requests_total", {"outcome": "all_failed"}) == before + 1

    def test_latency_tracked(self):
        collector = SearchMetricsCollector()

        with collector.track_search(query="test") as metrics:
            time.sleep(0.02)

        assert metrics.total_latency_ms >= 20


class TestLoggingFunctions:
    """Tests for standalone logging functions."""

    def test_log_search_start_does_not_raise(self):
        log_search_start(query="test", providers=["alpha", "beta"])

    def test_log_provider_result_observes_duration(self):
        before = _sample("search_provider_duration_seconds_count", {"provider": "metrics-ok"})

        log_provider_result(provider_id="metrics-ok", status="ok", result_count=10, latency_ms=250.0)

        assert _sample("search_provider_duration_seconds_count", {"provider": "metrics-ok"}) == before + 1

    def test_log_provider_result_counts_failures_by_type(self):
        labels = {"provider": "metrics-bad", "error_type": "timeout"}
        before = _sample("search_provider_errors_total", labels)

        log_provider_result(provider_id="metrics-bad", status="timeout", result_count=0, latency_ms=5000.0)

        assert _sample("search_provider_errors_total", labels) == before + 1

    def test_empty_result_is_not_an_error(self):
        labels = {"provider": "metrics-empty", "error_type": "empty"}

        log_provider_result(provider_id="metrics-empty", status="empty", result_count=0, latency_ms=10.0)

        assert _sample("search_provider_errors_total", labels) == 0.0
