# src/vector_store/base_vector_store.py - v2
"""Abstract approximate-match store interface.

A store holds one collection of (vector, CacheEntryMetadata) points compared
under cosine similarity. Implementations never raise from search/upsert/delete:
failures are logged and turned into a miss or a no-op.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from semcache.cache.models import ApproximateMatch, CacheEntryMetadata


class BaseVectorStore(ABC):
    """Unified interface for vector store backends."""

    @abstractmethod
    async def ensure_collection(self) -> bool:
        """Create the collection if missing. Idempotent.

        Returns:
            True when the collection is usable afterwards.
        """

    @abstractmethod
    async def search(
        self,
        vector: list[float],
        min_similarity: float,
        variant: str | None = None,
    ) -> ApproximateMatch | None:
        """Return the single nearest neighbor with similarity >= min_similarity."""

    @abstractmethod
    async def upsert(
        self, vector: list[float], metadata: CacheEntryMetadata
    ) -> bool:
        """Write a new point with a fresh identifier; does not wait for durability.

        Returns False when the write was rejected or failed. Never raises.
        """

    @abstractmethod
    async def delete_by_content_hash(
        self, content_hash: str, variant: str | None = None
    ) -> None:
        """Delete points carrying ``content_hash`` (optionally one variant only)."""

    @abstractmethod
    async def count(self) -> int:
        """Return number of points in the collection (0 if unavailable)."""

    async def close(self) -> None:
        """Release client resources."""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """False when the store has no usable backing client."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (memory, qdrant)."""
