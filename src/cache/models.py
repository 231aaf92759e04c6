# src/cache/models.py - v2
"""Cache domain models: CachedFeedback, CacheEntryMetadata, ApproximateMatch,
CacheLookupResult, CacheStats.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from semcache.core.models import AnalysisResult, FeedbackType

# Bump when CacheEntryMetadata gains or changes fields.
METADATA_SCHEMA_VERSION = 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CachedFeedback(BaseModel):
    """Exact-store record: an AnalysisResult plus its write timestamp."""

    type: FeedbackType
    subtype: str | None = None
    suggestion_text: str
    reasoning: str
    confidence_score: float = Field(ge=0.0, le=1.0)
    cached_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_result(cls, result: AnalysisResult) -> CachedFeedback:
        return cls(**result.model_dump())

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(**self.model_dump(exclude={"cached_at"}))


class CacheEntryMetadata(BaseModel):
    """Payload stored alongside a vector in the approximate-match store.

    Closed and versioned: unknown fields are rejected and readers check
    ``schema_version`` before trusting the payload.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    schema_version: Literal[1] = METADATA_SCHEMA_VERSION
    content_hash: str
    variant: str
    feedback_type: FeedbackType
    subtype: str | None = None
    suggestion_text: str
    reasoning: str
    confidence_score: float = Field(ge=0.0, le=1.0)
    topic_id: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def for_result(
        cls,
        result: AnalysisResult,
        content_hash: str,
        variant: str,
        topic_id: str | None = None,
    ) -> CacheEntryMetadata:
        return cls(
            content_hash=content_hash,
            variant=variant,
            feedback_type=result.type,
            subtype=result.subtype,
            suggestion_text=result.suggestion_text,
            reasoning=result.reasoning,
            confidence_score=result.confidence_score,
            topic_id=topic_id,
        )

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(
            type=self.feedback_type,
            subtype=self.subtype,
            suggestion_text=self.suggestion_text,
            reasoning=self.reasoning,
            confidence_score=self.confidence_score,
        )

    def to_payload(self) -> dict:
        """JSON-safe dict for vector store payloads."""
        return self.model_dump(mode="json")


class ApproximateMatch(BaseModel):
    """Nearest neighbor returned by a vector store search."""

    result: AnalysisResult
    metadata: CacheEntryMetadata
    similarity: float


class CacheLookupResult(BaseModel):
    """Outcome of a read-only tiered lookup."""

    hit: bool = False
    source: Literal["exact", "approximate", "none"] = "none"
    result: AnalysisResult | None = None
    similarity: float | None = None


class CacheStats(BaseModel):
    """Counters kept by the orchestrator since construction."""

    exact_hits: int = 0
    approximate_hits: int = 0
    misses: int = 0
    computations: int = 0
    coalesced: int = 0
    population_failures: int = 0

    @property
    def hit_rate(self) -> float:
        """Share of lookups served from cache (0.0 to 1.0)."""
        hits = self.exact_hits + self.approximate_hits
        total = hits + self.misses
        if total == 0:
            return 0.0
        return hits / total
