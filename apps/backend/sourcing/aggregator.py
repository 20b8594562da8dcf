"""Merge per-provider outcomes into one flat, source-tagged list."""

from typing import Iterable, List

from sourcing.models import AggregatedResult, ProviderOutcome, VideoRecord


def aggregate(outcomes: Iterable[ProviderOutcome]) -> AggregatedResult:
    """Concatenate records of non-failed outcomes, in outcome order.

    No deduplication, re-ranking or extra truncation happens here.
    """
    records: List[VideoRecord] = []
    for outcome in outcomes:
        if outcome.failed:
            continue
        records.extend(outcome.records)
    return AggregatedResult(records=records)
