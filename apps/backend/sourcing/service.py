"""Search service: the inbound ``search(query)`` operation."""

import logging
from typing import Optional

import httpx

from exceptions import ConfigurationError, ValidationError
from sourcing.aggregator import aggregate
from sourcing.client import ProviderClient
from sourcing.metrics import SearchMetricsCollector, log_search_start
from sourcing.models import AggregatedResult, SearchQuery
from sourcing.registry import ProviderRegistry
from sourcing.repository import SourcingRepository
from sourcing.settings import SearchSettings

logger = logging.getLogger(__name__)

QUERY_MISSING_MESSAGE = "Search query not provided"
CONFIG_MISSING_MESSAGE = "API configuration not found"


class VideoSearchService:
    def __init__(
        self,
        registry: Optional[ProviderRegistry],
        sourcing_repo: SourcingRepository,
        settings: SearchSettings,
    ):
        self.registry = registry
        self.repo = sourcing_repo
        self.settings = settings

    @classmethod
    def create(
        cls,
        registry: Optional[ProviderRegistry],
        settings: SearchSettings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "VideoSearchService":
        client = ProviderClient(
            http_client,
            user_agent=settings.user_agent,
            max_results=settings.max_results_per_provider,
        )
        repo = SourcingRepository(client, timeout_seconds=settings.timeout_seconds)
        return cls(registry, repo, settings)

    async def aclose(self) -> None:
        await self.repo.client.aclose()

    async def search(self, query: Optional[str]) -> AggregatedResult:
        """
        Run one query across the configured providers and merge the results.

        Raises:
            ValidationError: query absent or empty (no provider is contacted)
            ConfigurationError: provider registry missing or empty
        """
        if not query:
            raise ValidationError(QUERY_MISSING_MESSAGE)
        if self.registry is None or self.registry.is_empty:
            raise ConfigurationError(CONFIG_MISSING_MESSAGE)

        search_query = SearchQuery(text=query)
        selected = [d.key for d in self.registry.select(self.settings.max_providers)]
        log_search_start(search_query.text, selected)

        collector = SearchMetricsCollector()
        with collector.track_search(query=search_query.text):
            outcomes = await self.repo.dispatch(
                self.registry, search_query.text, self.settings.max_providers
            )
            for outcome in outcomes:
                collector.record_outcome(outcome)
            result = aggregate(outcomes)
            collector.record_results(len(result.records))

        return result
