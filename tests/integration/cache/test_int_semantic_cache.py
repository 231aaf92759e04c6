# tests/integration/cache/test_int_semantic_cache.py - v1
"""End-to-end tests for SemanticCache over real adapters.

TestLocalStack: Qdrant local mode + memory exact store, no Docker.
TestContainerStack: Redis + Qdrant containers (skipped without Docker).
Coverage targets: semantic_cache.py, redis_store.py, qdrant_store.py
"""

from __future__ import annotations

import asyncio
import math
import uuid

import pytest

from semcache.cache.fingerprint import exact_cache_key, fingerprint
from semcache.cache.memory_store import MemoryExactStore
from semcache.cache.semantic_cache import SemanticCache
from semcache.core.models import AnalysisResult, FeedbackType
from semcache.embeddings.provider import EmbeddingProvider

ORIGINAL = "Climate change is obviously fake"
PARAPHRASE = "Global warming is clearly a fabrication"
VECTORS = {ORIGINAL: [1.0, 0.0], PARAPHRASE: [0.97, math.sqrt(1 - 0.97**2)]}


@pytest.fixture
def climate_result() -> AnalysisResult:
    return AnalysisResult(
        type=FeedbackType.UNSOURCED,
        subtype="scientific_consensus",
        suggestion_text="Cite a source that supports this claim.",
        reasoning="The claim contradicts the scientific consensus without evidence.",
        confidence_score=0.82,
    )


async def _run_climate_scenario(cache: SemanticCache, result, make_compute) -> None:
    compute = make_compute(result)

    first = await cache.get_or_compute(ORIGINAL, compute, "topic-climate")
    assert first.confidence_score == 0.82
    await cache.drain()
    # Vector writes are not awaited for durability; wait until visible.
    for _ in range(20):
        if await cache.vector_count() == 1:
            break
        await asyncio.sleep(0.1)

    second = await cache.get_or_compute("climate change is OBVIOUSLY fake ", compute)
    assert second == first

    outcome = await cache.lookup(PARAPHRASE)
    assert outcome.hit is True
    assert outcome.source == "approximate"
    assert outcome.similarity == pytest.approx(0.97, abs=1e-4)
    assert outcome.result == first

    third = await cache.get_or_compute(PARAPHRASE, compute)
    assert third == first
    assert compute.calls == 1


class TestLocalStack:
    @pytest.fixture
    def cache(self, make_embedder):
        from semcache.vector_store.qdrant_store import QdrantVectorStore
        vector_store = QdrantVectorStore(
            collection=f"test_{uuid.uuid4().hex[:8]}", vector_size=2, location=":memory:",
        )
        return SemanticCache(
            exact_store=MemoryExactStore(),
            vector_store=vector_store,
            embeddings=EmbeddingProvider(make_embedder(dimensions=2, vectors=VECTORS), dimensions=2),
            variants=["low", "medium", "high"],
        )

    @pytest.mark.asyncio
    async def test_climate_scenario(self, cache, climate_result, make_compute):
        await cache.ensure_ready()
        await _run_climate_scenario(cache, climate_result, make_compute)
        await cache.aclose()

    @pytest.mark.asyncio
    async def test_invalidate_clears_both_tiers(self, cache, climate_result, make_compute):
        await cache.ensure_ready()
        compute = make_compute(climate_result)
        await cache.get_or_compute(ORIGINAL, compute)
        await cache.drain()
        assert await cache.vector_count() == 1

        await cache.invalidate(ORIGINAL)
        assert await cache.vector_count() == 0
        assert (await cache.lookup(ORIGINAL)).hit is False
        await cache.aclose()


@pytest.mark.redis
@pytest.mark.qdrant
class TestContainerStack:
    @pytest.mark.asyncio
    async def test_climate_scenario(
        self, redis_url, qdrant_url, qdrant_collection, key_prefix,
        make_embedder, climate_result, make_compute,
    ):
        from semcache.cache.redis_store import RedisExactStore
        from semcache.vector_store.qdrant_store import QdrantVectorStore

        cache = SemanticCache(
            exact_store=RedisExactStore(redis_url=redis_url, default_ttl=60),
            vector_store=QdrantVectorStore(
                collection=qdrant_collection, vector_size=2, url=qdrant_url, timeout=5.0,
            ),
            embeddings=EmbeddingProvider(make_embedder(dimensions=2, vectors=VECTORS), dimensions=2),
            key_prefix=key_prefix,
        )
        await cache.ensure_ready()
        await _run_climate_scenario(cache, climate_result, make_compute)
        await cache.aclose()

    @pytest.mark.asyncio
    async def test_exact_entries_use_namespaced_keys(
        self, redis_url, key_prefix, climate_result, make_compute,
    ):
        import redis.asyncio as aioredis

        from semcache.cache.redis_store import RedisExactStore

        cache = SemanticCache(
            exact_store=RedisExactStore(redis_url=redis_url, default_ttl=60),
            key_prefix=key_prefix,
        )
        await cache.get_or_compute(ORIGINAL, make_compute(climate_result), variant="high")
        await cache.aclose()

        client = aioredis.Redis.from_url(redis_url, decode_responses=True)
        try:
            key = exact_cache_key(fingerprint(ORIGINAL), "high", key_prefix)
            assert await client.exists(key) == 1
            assert 0 < await client.ttl(key) <= 60
        finally:
            await client.aclose()
