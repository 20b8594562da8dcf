"""Concurrent dispatch of one query to the registered providers."""

import asyncio
import logging
from typing import List, Optional

from sourcing.client import ProviderClient
from sourcing.models import ProviderDescriptor, ProviderOutcome
from sourcing.registry import ProviderRegistry
from sourcing.settings import DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class SourcingRepository:
    """
    Fans a query out to the first ``max_providers`` registry entries.

    Every selected provider runs as its own task under its own timeout. The
    join waits for all of them to settle; one provider failing or timing out
    never cancels or hides the others. Outcomes come back in selection order.
    """

    def __init__(self, client: ProviderClient, *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.client = client
        self.timeout_seconds = timeout_seconds

    async def _run_provider(self, descriptor: ProviderDescriptor, query: str) -> ProviderOutcome:
        logger.debug("Starting search with provider: %s", descriptor.key)
        return await self.client.fetch(descriptor, query, self.timeout_seconds)

    async def dispatch(
        self,
        registry: ProviderRegistry,
        query: str,
        max_providers: Optional[int] = None,
    ) -> List[ProviderOutcome]:
        """Query up to ``max_providers`` providers (all when None) and join every outcome."""
        selected = registry.select(max_providers)
        if not selected:
            return []

        settled = await asyncio.gather(
            *(self._run_provider(descriptor, query) for descriptor in selected),
            return_exceptions=True,
        )

        outcomes: List[ProviderOutcome] = []
        for descriptor, result in zip(selected, settled):
            if isinstance(result, ProviderOutcome):
                outcomes.append(result)
                continue
            # The client contains its own errors; anything here escaped it.
            logger.error(
                "Provider %s task ended abnormally: %s",
                descriptor.key,
                type(result).__name__,
                exc_info=result if isinstance(result, Exception) else None,
            )
            outcomes.append(
                ProviderOutcome.failure(
                    descriptor.key,
                    "unexpected error",
                    message=f"{type(result).__name__}: {str(result)[:100]}",
                )
            )
        return outcomes
