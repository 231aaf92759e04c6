# src/vector_store/vector_store_factory.py - v2
"""Factory: instantiate the approximate-match store from configuration."""

from __future__ import annotations

import logging

from semcache.config.settings import Settings
from semcache.vector_store.base_vector_store import BaseVectorStore

logger = logging.getLogger(__name__)


class UnsupportedVectorStoreError(ValueError):
    """Raised when a vector store type is not supported."""


def create_vector_store(settings: Settings) -> BaseVectorStore | None:
    """Instantiate the configured vector store.

    Args:
        settings: Application settings (VECTOR_DB_TYPE, VECTOR_DB_URL,
            VECTOR_DB_COLLECTION, EMBEDDING_DIMENSIONS).

    Returns:
        Configured BaseVectorStore instance, or None when VECTOR_DB_TYPE=none.

    Raises:
        UnsupportedVectorStoreError: If type is not supported.
    """
    db_type = settings.vector_db_type

    if db_type == "none":
        logger.info("Vector store disabled; approximate tier inactive")
        return None

    if db_type == "memory":
        from semcache.vector_store.memory_store import InMemoryVectorStore
        return InMemoryVectorStore(vector_size=settings.embedding_dimensions)

    if db_type == "qdrant":
        from semcache.vector_store.qdrant_store import QdrantVectorStore
        url = settings.vector_db_url
        location = ":memory:" if url == ":memory:" else None
        return QdrantVectorStore(
            collection=settings.vector_db_collection,
            vector_size=settings.embedding_dimensions,
            url=None if location else url,
            location=location,
            api_key=settings.vector_db_api_key or None,
            timeout=settings.store_timeout_seconds,
        )

    raise UnsupportedVectorStoreError(
        f"Unsupported vector store type: {db_type!r}. "
        f"Available: memory, qdrant"
    )
