"""
Structured logging for the search backend.

Two context variables travel with every log record:
- correlation_id: one per inbound HTTP request (set by ObservabilityMiddleware)
- provider: set by the provider client for the duration of one provider call

asyncio copies the current context into each task, so provider calls running
under ``gather`` see the request's correlation id but never each other's
provider key.

Usage:
    from observability import get_logger

    logger = get_logger(__name__)
    logger.info("Provider completed", extra={"status": "ok", "result_count": 12})
"""

import logging
import os
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "video-search-backend"
UNSET = "-"

_correlation_id_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
_provider_ctx: ContextVar[Optional[str]] = ContextVar("provider", default=None)


def get_correlation_id() -> Optional[str]:
    return _correlation_id_ctx.get()


def get_provider() -> Optional[str]:
    return _provider_ctx.get()


def generate_correlation_id() -> str:
    return f"req-{uuid.uuid4().hex[:16]}"


class correlation_id_context:
    """Bind a correlation id (generated when not supplied) for a block."""

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self.token = None

    def __enter__(self) -> str:
        self.token = _correlation_id_ctx.set(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        _correlation_id_ctx.reset(self.token)


@contextmanager
def provider_context(provider_key: str) -> Iterator[str]:
    """Tag every record logged inside the block with ``provider``."""
    token = _provider_ctx.set(provider_key)
    try:
        yield provider_key
    finally:
        _provider_ctx.reset(token)


class SearchContextFilter(logging.Filter):
    """Copies correlation id and provider key from context onto the record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or UNSET
        if not hasattr(record, "provider"):
            record.provider = get_provider() or UNSET
        return True


class SensitiveDataFilter(logging.Filter):
    """Redacts credentials from dict-style args and ``extra`` fields."""

    SENSITIVE_KEYS = {"password", "token", "api_key", "secret", "authorization", "cookie", "sentry_dsn"}

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, dict):
            record.args = self._redact(record.args)
        for key in list(record.__dict__):
            if key.lower() in self.SENSITIVE_KEYS:
                setattr(record, key, "[REDACTED]")
        return True

    def _redact(self, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: "[REDACTED]" if str(k).lower() in self.SENSITIVE_KEYS else self._redact(v)
                for k, v in data.items()
            }
        if isinstance(data, list):
            return [self._redact(item) for item in data]
        return data


class SearchJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = SERVICE_NAME
        log_record["environment"] = os.getenv("ENVIRONMENT", "development")
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return SearchJsonFormatter(
            "%(timestamp)s %(level)s %(logger)s %(correlation_id)s %(provider)s %(message)s",
            rename_fields={"timestamp": "@timestamp"},
        )
    return logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(provider)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging() -> None:
    """
    Configure the root logger from the environment.

    Environment variables:
    - LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default INFO)
    - LOG_FORMAT: json or text (default json when ENVIRONMENT=production)
    """
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_format = os.getenv("LOG_FORMAT", "json" if os.getenv("ENVIRONMENT") == "production" else "text")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(_build_formatter(log_format))
    handler.addFilter(SearchContextFilter())
    handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # Per-request access lines come from ObservabilityMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


setup_logging()
