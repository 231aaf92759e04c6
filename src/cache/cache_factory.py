# src/cache/cache_factory.py - v3
"""Factories for the exact-match store and the assembled SemanticCache."""

from __future__ import annotations

import logging

from semcache.cache.base_exact_store import BaseExactStore
from semcache.cache.semantic_cache import SemanticCache
from semcache.config.settings import Settings, load_settings
from semcache.embeddings.embedder_factory import create_embedder
from semcache.embeddings.provider import EmbeddingProvider
from semcache.vector_store.vector_store_factory import create_vector_store

logger = logging.getLogger(__name__)


class UnsupportedExactStoreError(ValueError):
    """Raised when an exact store backend is not supported."""


def create_exact_store(settings: Settings) -> BaseExactStore | None:
    """Instantiate the configured exact-match backend.

    Args:
        settings: Application settings (EXACT_STORE_BACKEND, REDIS_*,
            CACHE_TTL_SECONDS, CACHE_MAX_ITEMS).

    Returns:
        Configured BaseExactStore, or None when EXACT_STORE_BACKEND=none.
    """
    backend = settings.exact_store_backend

    if backend == "none":
        logger.info("Exact store disabled; exact tier inactive")
        return None

    if backend == "memory":
        from semcache.cache.memory_store import MemoryExactStore
        return MemoryExactStore(
            default_ttl=settings.cache_ttl_seconds,
            max_items=settings.cache_max_items,
        )

    if backend == "redis":
        from semcache.cache.redis_store import RedisExactStore
        return RedisExactStore(
            redis_url=settings.redis_connection_url,
            default_ttl=settings.cache_ttl_seconds,
            timeout=settings.store_timeout_seconds,
            max_items=settings.cache_max_items,
        )

    raise UnsupportedExactStoreError(
        f"Unsupported exact store backend: {backend!r}. "
        f"Available: memory, redis"
    )


async def create_semantic_cache(settings: Settings | None = None) -> SemanticCache:
    """Build a SemanticCache from settings and initialize its collection.

    Args:
        settings: Application settings. Loaded from .env when omitted.

    Returns:
        Ready-to-use SemanticCache. Tiers whose backend is "none" are absent.
    """
    settings = settings or load_settings()

    embeddings = EmbeddingProvider(
        create_embedder(settings),
        dimensions=settings.embedding_dimensions,
        timeout=settings.embedding_timeout_seconds,
    )
    cache = SemanticCache(
        exact_store=create_exact_store(settings),
        vector_store=create_vector_store(settings),
        embeddings=embeddings,
        similarity_threshold=settings.similarity_threshold,
        ttl=settings.cache_ttl_seconds,
        key_prefix=settings.cache_key_prefix,
        default_variant=settings.cache_default_variant,
        variants=settings.cache_variants_list,
        coalesce_inflight=settings.coalesce_inflight,
    )
    await cache.ensure_ready()
    logger.info(
        "Semantic cache ready: exact=%s vector=%s embeddings=%s threshold=%.2f",
        settings.exact_store_backend,
        settings.vector_db_type,
        settings.embedding_provider,
        settings.similarity_threshold,
    )
    return cache
