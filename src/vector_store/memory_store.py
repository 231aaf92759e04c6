# src/vector_store/memory_store.py - v1
"""In-process approximate-match store (VECTOR_DB_TYPE=memory).

Brute-force cosine search over a numpy matrix. Meant for development and
tests; it has the same contract as the Qdrant adapter, including the
inclusive similarity threshold and fresh ids per write.
"""

from __future__ import annotations

import logging
import uuid

import numpy as np

from semcache.cache.models import ApproximateMatch, CacheEntryMetadata
from semcache.vector_store.base_vector_store import BaseVectorStore

logger = logging.getLogger(__name__)


class InMemoryVectorStore(BaseVectorStore):
    """Vector store holding unit-normalized vectors in memory."""

    def __init__(self, vector_size: int) -> None:
        self._vector_size = vector_size
        self._ids: list[str] = []
        self._vectors: list[np.ndarray] = []
        self._metadata: list[CacheEntryMetadata] = []

    @property
    def enabled(self) -> bool:
        return True

    @property
    def provider_name(self) -> str:
        return "memory"

    async def ensure_collection(self) -> bool:
        return True

    async def search(
        self,
        vector: list[float],
        min_similarity: float,
        variant: str | None = None,
    ) -> ApproximateMatch | None:
        """Nearest neighbor by cosine similarity, thresholded inclusively."""
        query = self._normalize(vector)
        if query is None:
            return None

        candidates = [
            i for i, meta in enumerate(self._metadata)
            if variant is None or meta.variant == variant
        ]
        if not candidates:
            return None

        matrix = np.vstack([self._vectors[i] for i in candidates])
        scores = matrix @ query
        best = int(np.argmax(scores))
        similarity = float(np.clip(scores[best], 0.0, 1.0))
        if similarity < min_similarity:
            return None

        metadata = self._metadata[candidates[best]]
        return ApproximateMatch(
            result=metadata.to_result(), metadata=metadata, similarity=similarity
        )

    async def upsert(
        self, vector: list[float], metadata: CacheEntryMetadata
    ) -> bool:
        """Append a point under a fresh id; zero vectors are rejected."""
        normalized = self._normalize(vector)
        if normalized is None:
            return False
        self._ids.append(str(uuid.uuid4()))
        self._vectors.append(normalized)
        self._metadata.append(metadata)
        return True

    async def delete_by_content_hash(
        self, content_hash: str, variant: str | None = None
    ) -> None:
        keep = [
            i for i, meta in enumerate(self._metadata)
            if meta.content_hash != content_hash
            or (variant is not None and meta.variant != variant)
        ]
        self._ids = [self._ids[i] for i in keep]
        self._vectors = [self._vectors[i] for i in keep]
        self._metadata = [self._metadata[i] for i in keep]

    async def count(self) -> int:
        return len(self._ids)

    def _normalize(self, vector: list[float]) -> np.ndarray | None:
        arr = np.asarray(vector, dtype=np.float64)
        if arr.shape != (self._vector_size,):
            logger.warning(
                "Vector has shape %s, expected (%d,); ignoring",
                arr.shape, self._vector_size,
            )
            return None
        norm = np.linalg.norm(arr)
        if norm == 0:
            return None
        return arr / norm
