# src/cache/semantic_cache.py - v1
"""Tiered semantic cache in front of the feedback analysis call.

Lookup order:
    1. Exact-match store keyed by content fingerprint (fast path)
    2. Approximate-match store by embedding similarity (>= threshold)
    3. Fresh computation via the caller-supplied function

Results found in tier 2 are back-filled into tier 1, and fresh results are
written to both tiers, in background tasks the caller never waits on. Store
and embedding failures degrade to "tier absent"; only the compute function's
own exception reaches the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Coroutine, TypeVar

from semcache.cache.background import BackgroundTasks
from semcache.cache.base_exact_store import BaseExactStore
from semcache.cache.fingerprint import exact_cache_key, fingerprint
from semcache.cache.inflight import InflightRequests
from semcache.cache.models import (
    ApproximateMatch,
    CacheEntryMetadata,
    CacheLookupResult,
    CacheStats,
)
from semcache.core.models import AnalysisResult
from semcache.embeddings.provider import EmbeddingProvider
from semcache.logging.context import (
    reset_request_context,
    set_cache_tier,
    set_request_context,
)
from semcache.vector_store.base_vector_store import BaseVectorStore

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.95

ComputeFn = Callable[[], Awaitable[AnalysisResult]]
T = TypeVar("T")


class SemanticCache:
    """Orchestrates the exact and approximate tiers around a compute function."""

    def __init__(
        self,
        exact_store: BaseExactStore | None = None,
        vector_store: BaseVectorStore | None = None,
        embeddings: EmbeddingProvider | None = None,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        ttl: int | None = None,
        key_prefix: str = "feedback",
        default_variant: str = "medium",
        variants: list[str] | None = None,
        coalesce_inflight: bool = False,
    ) -> None:
        if not 0.0 <= similarity_threshold <= 1.0:
            raise ValueError("similarity_threshold must be between 0 and 1")

        self._exact_store = exact_store
        self._vector_store = vector_store
        self._embeddings = embeddings
        self._similarity_threshold = similarity_threshold
        self._ttl = ttl
        self._key_prefix = key_prefix
        self._default_variant = default_variant
        self._variants = variants or [default_variant]
        self._stats = CacheStats()
        self._tasks = BackgroundTasks(on_error=self._record_population_failure)
        self._inflight: InflightRequests[AnalysisResult] | None = (
            InflightRequests() if coalesce_inflight else None
        )

    @property
    def similarity_threshold(self) -> float:
        return self._similarity_threshold

    @property
    def approximate_enabled(self) -> bool:
        """True when both an embedder and a usable vector store are configured."""
        return (
            self._vector_store is not None
            and self._vector_store.enabled
            and self._embeddings is not None
            and self._embeddings.available
        )

    @property
    def pending_tasks(self) -> int:
        """Number of background population tasks not yet finished."""
        return self._tasks.pending

    async def ensure_ready(self) -> None:
        """Initialize the approximate-match collection. Safe to call repeatedly."""
        if self._vector_store is None:
            return
        ready = await self._guard(
            self._vector_store.ensure_collection(), "vector store init", False
        )
        if not ready:
            logger.warning("Approximate-match tier unavailable after init")

    async def get_or_compute(
        self,
        text: str,
        compute_fn: ComputeFn,
        correlation_id: str | None = None,
        *,
        variant: str | None = None,
    ) -> AnalysisResult:
        """Return a cached result for ``text`` or compute and cache a fresh one.

        Args:
            text: Content to analyze.
            compute_fn: Zero-argument coroutine function producing the result
                on a full miss. Its exceptions propagate unchanged.
            correlation_id: Optional id (e.g. topic id) attached to logs and
                stored in the approximate-match metadata.
            variant: Exact-key discriminator (e.g. feedback sensitivity).
                Defaults to the cache's default variant.

        Returns:
            The AnalysisResult, identical in shape whichever tier served it.
        """
        variant = variant or self._default_variant
        token = set_request_context(correlation_id)
        try:
            content_hash = fingerprint(text)
            key = exact_cache_key(content_hash, variant, self._key_prefix)

            cached = await self._exact_get(key)
            if cached is not None:
                self._stats.exact_hits += 1
                logger.debug("Cache hit: exact match")
                return cached

            embedding = await self._embed(text)
            if embedding is not None:
                match = await self._search(embedding, variant)
                if match is not None:
                    self._stats.approximate_hits += 1
                    logger.debug(
                        "Cache hit: approximate match similarity=%.3f",
                        match.similarity,
                    )
                    self._tasks.spawn(
                        self._backfill_exact(key, match.result),
                        name=f"backfill:{content_hash[:12]}",
                    )
                    return match.result

            self._stats.misses += 1
            logger.debug("Cache miss: running fresh analysis")

            async def compute_and_populate() -> AnalysisResult:
                result = await self._compute(compute_fn)
                self._tasks.spawn(
                    self._populate(
                        key, content_hash, variant, text, result, embedding,
                        correlation_id,
                    ),
                    name=f"populate:{content_hash[:12]}",
                )
                return result

            if self._inflight is None:
                return await compute_and_populate()
            # Population runs inside the shared computation, so it happens
            # even when the caller that started it is cancelled.
            result, leader = await self._inflight.run(key, compute_and_populate)
            if not leader:
                self._stats.coalesced += 1
            return result
        finally:
            reset_request_context(token)

    async def lookup(
        self, text: str, *, variant: str | None = None
    ) -> CacheLookupResult:
        """Read-only tiered lookup: never computes, never writes."""
        variant = variant or self._default_variant
        content_hash = fingerprint(text)
        key = exact_cache_key(content_hash, variant, self._key_prefix)

        cached = await self._exact_get(key)
        if cached is not None:
            return CacheLookupResult(hit=True, source="exact", result=cached)

        embedding = await self._embed(text)
        if embedding is not None:
            match = await self._search(embedding, variant)
            if match is not None:
                return CacheLookupResult(
                    hit=True,
                    source="approximate",
                    result=match.result,
                    similarity=match.similarity,
                )

        return CacheLookupResult(hit=False, source="none")

    async def invalidate(self, text: str, *, variant: str | None = None) -> None:
        """Drop cached results for ``text`` from both tiers.

        With ``variant`` None every configured variant is removed.
        """
        content_hash = fingerprint(text)
        variants = [variant] if variant else list(self._variants)

        if self._exact_store is not None:
            for v in variants:
                key = exact_cache_key(content_hash, v, self._key_prefix)
                await self._guard(self._exact_store.delete(key), "exact delete", None)

        if self._vector_store is not None:
            await self._guard(
                self._vector_store.delete_by_content_hash(content_hash, variant),
                "vector delete",
                None,
            )

    def stats(self) -> CacheStats:
        """Snapshot of hit/miss/population counters."""
        return self._stats.model_copy()

    async def vector_count(self) -> int:
        """Number of points in the approximate-match store (0 if absent)."""
        if self._vector_store is None:
            return 0
        return await self._guard(self._vector_store.count(), "vector count", 0)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for outstanding background population."""
        await self._tasks.drain(timeout)

    async def aclose(self, timeout: float | None = 5.0) -> None:
        """Drain background work, then close both stores."""
        await self.drain(timeout)
        if self._exact_store is not None:
            await self._guard(self._exact_store.close(), "exact close", None)
        if self._vector_store is not None:
            await self._guard(self._vector_store.close(), "vector close", None)

    # --- Tier access ---

    async def _exact_get(self, key: str) -> AnalysisResult | None:
        if self._exact_store is None:
            return None
        return await self._guard(self._exact_store.get(key), "exact get", None)

    async def _embed(self, text: str) -> list[float] | None:
        if not self.approximate_enabled:
            return None
        return await self._guard(self._embeddings.embed(text), "embedding", None)

    async def _search(
        self, embedding: list[float], variant: str
    ) -> ApproximateMatch | None:
        match = await self._guard(
            self._vector_store.search(
                embedding, self._similarity_threshold, variant
            ),
            "vector search",
            None,
        )
        # Stores filter already; re-check so a custom store cannot loosen the bar.
        if match is not None and match.similarity < self._similarity_threshold:
            return None
        return match

    async def _compute(self, compute_fn: ComputeFn) -> AnalysisResult:
        self._stats.computations += 1
        return await compute_fn()

    # --- Background population ---

    async def _backfill_exact(self, key: str, result: AnalysisResult) -> None:
        set_cache_tier("backfill")
        await self._write_exact(key, result)

    async def _populate(
        self,
        key: str,
        content_hash: str,
        variant: str,
        text: str,
        result: AnalysisResult,
        embedding: list[float] | None,
        topic_id: str | None,
    ) -> None:
        set_cache_tier("populate")
        await asyncio.gather(
            self._write_exact(key, result),
            self._write_vector(content_hash, variant, text, result, embedding, topic_id),
        )

    async def _write_exact(self, key: str, result: AnalysisResult) -> None:
        if self._exact_store is None:
            return
        await self._write(self._exact_store.set(key, result, self._ttl), "exact set")

    async def _write_vector(
        self,
        content_hash: str,
        variant: str,
        text: str,
        result: AnalysisResult,
        embedding: list[float] | None,
        topic_id: str | None,
    ) -> None:
        if not self.approximate_enabled:
            return
        vector = embedding if embedding is not None else await self._embed(text)
        if vector is None:
            logger.debug("Skipping vector store write: embedding unavailable")
            return
        metadata = CacheEntryMetadata.for_result(
            result, content_hash=content_hash, variant=variant, topic_id=topic_id
        )
        await self._write(self._vector_store.upsert(vector, metadata), "vector upsert")

    # --- Error boundary ---

    async def _guard(
        self,
        coro: Coroutine[Any, Any, T],
        what: str,
        default: T,
    ) -> T:
        """Await a dependency call, converting any failure into ``default``."""
        try:
            return await coro
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Cache %s failed, continuing without it: %s", what, e)
            return default

    async def _write(self, coro: Coroutine[Any, Any, bool], what: str) -> None:
        """Population write; a raised error or a False return counts as a failure."""
        if not await self._guard(coro, what, False):
            self._stats.population_failures += 1

    def _record_population_failure(self, exc: BaseException) -> None:
        self._stats.population_failures += 1
