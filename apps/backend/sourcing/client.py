"""Single-provider XML search client with timeout and failure classification."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional

import httpx

from exceptions import MalformedPayloadError, ProviderRejectedError
from observability.logging import provider_context
from sourcing.metrics import log_provider_result
from sourcing.models import ProviderDescriptor, ProviderOutcome, VideoRecord
from sourcing.normalizers.xml_feed import normalize_video_records, parse_xml_tree
from sourcing.settings import DEFAULT_MAX_RESULTS_PER_PROVIDER, DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from sourcing.utils.url import build_search_url

logger = logging.getLogger(__name__)


class ProviderClient:
    """
    Queries one provider per call and reports a ProviderOutcome.

    ``fetch`` never raises (except for cancellation of the caller itself):
    HTTP errors, timeouts, transport failures and undecodable bodies all come
    back as failed outcomes with an empty record list.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        max_results: int = DEFAULT_MAX_RESULTS_PER_PROVIDER,
    ):
        self._owns_client = http_client is None
        # Per-call deadlines come from fetch(); httpx's own timeout is disabled.
        self._http = http_client or httpx.AsyncClient(timeout=None, follow_redirects=True)
        self.user_agent = user_agent
        self.max_results = max_results

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _get_body(self, descriptor: ProviderDescriptor, query: str) -> str:
        url = build_search_url(descriptor.endpoint_template, query)
        response = await self._http.get(url, headers={"User-Agent": self.user_agent})
        if not response.is_success:
            raise ProviderRejectedError(
                f"Status {response.status_code}",
                provider=descriptor.key,
                status=response.status_code,
            )
        return response.text

    def _decode(self, descriptor: ProviderDescriptor, body: str) -> List[VideoRecord]:
        tree = parse_xml_tree(body)
        return normalize_video_records(tree, descriptor, self.max_results)

    async def fetch(
        self,
        descriptor: ProviderDescriptor,
        query: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> ProviderOutcome:
        with provider_context(descriptor.key):
            return await self._fetch(descriptor, query, timeout_seconds)

    async def _fetch(
        self,
        descriptor: ProviderDescriptor,
        query: str,
        timeout_seconds: float,
    ) -> ProviderOutcome:
        started = time.monotonic()

        def elapsed_ms() -> int:
            return int((time.monotonic() - started) * 1000)

        try:
            body = await asyncio.wait_for(self._get_body(descriptor, query), timeout=timeout_seconds)
            records = self._decode(descriptor, body)
            outcome = ProviderOutcome.success(descriptor.key, records, latency_ms=elapsed_ms())
        except (asyncio.TimeoutError, httpx.TimeoutException):
            outcome = ProviderOutcome.failure(
                descriptor.key, "timeout", latency_ms=elapsed_ms(), message=f"Timed out after {timeout_seconds}s"
            )
        except ProviderRejectedError as e:
            outcome = ProviderOutcome.failure(
                descriptor.key, "provider rejected request", latency_ms=elapsed_ms(), message=e.message
            )
        except MalformedPayloadError as e:
            outcome = ProviderOutcome.failure(
                descriptor.key, "malformed payload", latency_ms=elapsed_ms(), message=e.message[:100]
            )
        except httpx.HTTPError as e:
            outcome = ProviderOutcome.failure(
                descriptor.key,
                "network error",
                latency_ms=elapsed_ms(),
                message=f"{type(e).__name__}: {str(e)[:100]}",
            )
        except Exception as e:
            logger.exception("Unexpected error querying provider %s", descriptor.key)
            outcome = ProviderOutcome.failure(
                descriptor.key,
                "unexpected error",
                latency_ms=elapsed_ms(),
                message=f"{type(e).__name__}: {str(e)[:100]}",
            )

        log_provider_result(
            descriptor.key,
            outcome.status,
            len(outcome.records),
            outcome.latency_ms or 0,
            outcome.message,
        )
        return outcome
