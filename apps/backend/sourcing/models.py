"""Typed models for the provider fan-out pipeline."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ProviderStatus = Literal["ok", "empty", "rejected", "timeout", "malformed", "error"]
FailureReason = Literal[
    "provider rejected request",
    "timeout",
    "malformed payload",
    "network error",
    "unexpected error",
]

# Open-ended field set decoded from one <video> node, plus source/source_name.
VideoRecord = Dict[str, Any]

_STATUS_BY_REASON: Dict[str, ProviderStatus] = {
    "provider rejected request": "rejected",
    "timeout": "timeout",
    "malformed payload": "malformed",
    "network error": "error",
    "unexpected error": "error",
}


class ProviderDescriptor(BaseModel):
    """One external XML search endpoint, as supplied by the registry."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1)
    display_name: str
    endpoint_template: str = Field(..., min_length=1)


class SearchQuery(BaseModel):
    """Inbound query text, created once per request."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1)


class ProviderOutcome(BaseModel):
    """Per-provider result of one dispatch attempt."""

    provider_key: str
    records: List[VideoRecord] = Field(default_factory=list)
    failed: bool = False
    failure_reason: Optional[FailureReason] = None
    latency_ms: Optional[int] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, provider_key: str, records: List[VideoRecord], latency_ms: Optional[int] = None) -> "ProviderOutcome":
        return cls(provider_key=provider_key, records=records, latency_ms=latency_ms)

    @classmethod
    def failure(
        cls,
        provider_key: str,
        reason: FailureReason,
        *,
        latency_ms: Optional[int] = None,
        message: Optional[str] = None,
    ) -> "ProviderOutcome":
        return cls(
            provider_key=provider_key,
            failed=True,
            failure_reason=reason,
            latency_ms=latency_ms,
            message=message,
        )

    @property
    def status(self) -> ProviderStatus:
        if self.failed:
            return _STATUS_BY_REASON.get(self.failure_reason or "", "error")
        return "ok" if self.records else "empty"


class AggregatedResult(BaseModel):
    """Flattened, source-tagged records handed to the HTTP layer."""

    records: List[VideoRecord] = Field(default_factory=list)

    def to_response(self) -> Dict[str, List[VideoRecord]]:
        return {"data": self.records}
