"""
Optional Sentry reporting.

Only request-level crashes reach Sentry. Provider failures are an expected
part of a fan-out and stay in logs and metrics.
"""

import logging
import os
from typing import Any, Dict, Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from .logging import get_correlation_id, get_logger, get_provider

logger = get_logger(__name__)

DISCONNECT_MARKER = "client disconnected"


def _traces_sample_rate(environment: str) -> float:
    default = "0.2" if environment == "production" else "0.0"
    try:
        return float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", default))
    except ValueError:
        logger.warning("Invalid SENTRY_TRACES_SAMPLE_RATE, tracing disabled")
        return 0.0


def init_sentry() -> bool:
    """
    Initialise Sentry when SENTRY_DSN is set. Returns True when enabled.

    Environment variables:
    - SENTRY_DSN: project DSN (required)
    - SENTRY_ENABLE: "false" turns reporting off even with a DSN
    - SENTRY_ENVIRONMENT: falls back to ENVIRONMENT
    - SENTRY_RELEASE: release identifier, e.g. a commit SHA
    - SENTRY_TRACES_SAMPLE_RATE: 0.0-1.0
    """
    dsn = os.getenv("SENTRY_DSN")
    if not dsn or os.getenv("SENTRY_ENABLE", "true").lower() != "true":
        logger.info("Sentry disabled")
        return False

    environment = os.getenv("SENTRY_ENVIRONMENT") or os.getenv("ENVIRONMENT", "development")
    release = os.getenv("SENTRY_RELEASE") or "unknown"
    traces_sample_rate = _traces_sample_rate(environment)

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=f"video-search-backend@{release}",
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=traces_sample_rate,
        send_default_pii=False,
        max_breadcrumbs=50,
        before_send=before_send_hook,
    )
    logger.info(
        "Sentry initialized",
        extra={"environment": environment, "release": release, "traces_sample_rate": traces_sample_rate},
    )
    return True


def _context_tags() -> Dict[str, str]:
    tags = {}
    correlation_id = get_correlation_id()
    if correlation_id:
        tags["correlation_id"] = correlation_id
    provider = get_provider()
    if provider:
        tags["provider"] = provider
    return tags


def before_send_hook(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Drop client disconnects; tag events with the correlation id and provider."""
    for exc_value in event.get("exception", {}).get("values", []):
        if DISCONNECT_MARKER in str(exc_value.get("value", "")).lower():
            return None

    tags = _context_tags()
    if tags:
        event.setdefault("tags", {}).update(tags)
    return event


def capture_exception(exc: Exception, **kwargs) -> None:
    """Report ``exc`` with context tags plus any ``tags=``/``extra=`` dicts."""
    with sentry_sdk.new_scope() as scope:
        for key, value in {**_context_tags(), **kwargs.get("tags", {})}.items():
            scope.set_tag(key, value)
        for key, value in kwargs.get("extra", {}).items():
            scope.set_extra(key, value)
        sentry_sdk.capture_exception(exc)
