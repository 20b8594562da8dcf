"""Provider fan-out and aggregation for the video search backend."""

from .models import (
    AggregatedResult,
    ProviderDescriptor,
    ProviderOutcome,
    SearchQuery,
    VideoRecord,
)
from .aggregator import aggregate
from .client import ProviderClient
from .registry import ProviderRegistry, load_registry
from .repository import SourcingRepository
from .service import VideoSearchService
from .settings import SearchSettings

__all__ = [
    "AggregatedResult",
    "ProviderDescriptor",
    "ProviderOutcome",
    "SearchQuery",
    "VideoRecord",
    "aggregate",
    "ProviderClient",
    "ProviderRegistry",
    "load_registry",
    "SourcingRepository",
    "VideoSearchService",
    "SearchSettings",
]
