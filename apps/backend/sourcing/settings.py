"""Tunables for the provider fan-out, read from the environment."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_MAX_RESULTS_PER_PROVIDER = 15
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.36"
)


@dataclass(frozen=True)
class SearchSettings:
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_providers: Optional[int] = None  # None queries every registered provider
    max_results_per_provider: int = DEFAULT_MAX_RESULTS_PER_PROVIDER
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls) -> "SearchSettings":
        """
        Build settings from environment variables.

        Environment variables:
        - SOURCING_PROVIDER_TIMEOUT_SECONDS: per-provider timeout (default 5.0)
        - SOURCING_MAX_PROVIDERS: providers queried per request (default: all)
        - SOURCING_MAX_RESULTS_PER_PROVIDER: record cap per provider (default 15)
        - SOURCING_USER_AGENT: outbound User-Agent header
        """
        timeout = _env_float("SOURCING_PROVIDER_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        if timeout <= 0:
            logger.warning("Ignoring non-positive SOURCING_PROVIDER_TIMEOUT_SECONDS=%s", timeout)
            timeout = DEFAULT_TIMEOUT_SECONDS

        max_providers = _env_int("SOURCING_MAX_PROVIDERS", None)
        if max_providers is not None and max_providers < 0:
            logger.warning("Ignoring negative SOURCING_MAX_PROVIDERS=%s", max_providers)
            max_providers = None

        max_results = _env_int("SOURCING_MAX_RESULTS_PER_PROVIDER", DEFAULT_MAX_RESULTS_PER_PROVIDER)
        if max_results is None or max_results < 0:
            max_results = DEFAULT_MAX_RESULTS_PER_PROVIDER

        user_agent = (os.getenv("SOURCING_USER_AGENT") or "").strip() or DEFAULT_USER_AGENT

        return cls(
            timeout_seconds=timeout,
            max_providers=max_providers,
            max_results_per_provider=max_results,
            user_agent=user_agent,
        )


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using default %s", name, raw, default)
        return default


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using default %s", name, raw, default)
        return default
