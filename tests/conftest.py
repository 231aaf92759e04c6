# tests/conftest.py - v2
"""Shared test fixtures for all unit and integration tests.

Provides a deterministic embedder, sample analysis results and ready-made
in-memory caches. No external services: every backend here is in-process.
"""

from __future__ import annotations

import asyncio
import hashlib
import math

import pytest

from semcache.cache.fingerprint import normalize
from semcache.cache.memory_store import MemoryExactStore
from semcache.cache.semantic_cache import SemanticCache
from semcache.core.models import AnalysisResult, FeedbackType
from semcache.embeddings.base_embedder import BaseEmbedder
from semcache.embeddings.provider import EmbeddingProvider
from semcache.vector_store.memory_store import InMemoryVectorStore


class MockEmbedder(BaseEmbedder):
    """Deterministic embedder for testing - hashes text to produce vectors.

    ``vectors`` pins exact vectors for given texts (looked up by normalized
    text) so tests can control cosine similarity precisely. Anything else
    gets a unit vector derived from its SHA-256 digest.
    """

    provider = "mock"

    def __init__(
        self,
        dimensions: int = 64,
        vectors: dict[str, list[float]] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        super().__init__("mock-embedder", dimensions)
        self._vectors = {normalize(k): v for k, v in (vectors or {}).items()}
        self._error = error
        self._delay = delay
        self.call_count = 0

    def _text_to_vec(self, text: str) -> list[float]:
        pinned = self._vectors.get(normalize(text))
        if pinned is not None:
            return list(pinned)
        digest = hashlib.sha256(text.encode()).hexdigest()
        raw = [int(digest[i:i + 2], 16) / 255.0 - 0.5 for i in range(0, len(digest), 2)]
        while len(raw) < self._dimensions:
            raw.extend(raw[:self._dimensions - len(raw)])
        raw = raw[:self._dimensions]
        norm = math.sqrt(sum(x * x for x in raw)) or 1.0
        return [x / norm for x in raw]

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed_query(t) for t in texts]

    async def embed_query(self, query: str) -> list[float]:
        self.call_count += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._text_to_vec(query)


class CountingCompute:
    """Async compute function that records how often it ran."""

    def __init__(self, result: AnalysisResult, delay: float = 0.0):
        self.result = result
        self.delay = delay
        self.calls = 0

    async def __call__(self) -> AnalysisResult:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.result


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_result() -> AnalysisResult:
    """Typical fallacy feedback."""
    return AnalysisResult(
        type=FeedbackType.FALLACY,
        subtype="strawman",
        suggestion_text="Address the argument as it was actually made.",
        reasoning="The reply attacks a position nobody in the thread holds.",
        confidence_score=0.82,
    )


@pytest.fixture
def other_result() -> AnalysisResult:
    return AnalysisResult(
        type=FeedbackType.UNSOURCED,
        suggestion_text="Consider linking a source for this figure.",
        reasoning="A statistic is stated without attribution.",
        confidence_score=0.64,
    )


# === FIXTURES: Embeddings and caches ===


@pytest.fixture
def mock_embedder() -> MockEmbedder:
    return MockEmbedder(dimensions=64)


@pytest.fixture
def exact_store() -> MemoryExactStore:
    return MemoryExactStore(default_ttl=3600, max_items=100)


@pytest.fixture
def vector_store() -> InMemoryVectorStore:
    return InMemoryVectorStore(vector_size=64)


@pytest.fixture
def semantic_cache(
    exact_store: MemoryExactStore,
    vector_store: InMemoryVectorStore,
    mock_embedder: MockEmbedder,
) -> SemanticCache:
    """Both tiers enabled, in-process backends, default threshold."""
    return SemanticCache(
        exact_store=exact_store,
        vector_store=vector_store,
        embeddings=EmbeddingProvider(mock_embedder, dimensions=64),
        variants=["low", "medium", "high"],
    )


@pytest.fixture
def make_embedder():
    """Factory for MockEmbedder with custom dimensions, pinned vectors or errors."""
    return MockEmbedder


@pytest.fixture
def make_compute():
    """Factory for CountingCompute."""
    return CountingCompute
