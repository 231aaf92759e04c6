# src/vector_store/qdrant_store.py - v2
"""Qdrant approximate-match store adapter.

Uses qdrant_client.AsyncQdrantClient against a remote server (url) or the
embedded local mode (location=":memory:"). Requires: pip install qdrant-client.

Constructed without any client, url or location, the store is disabled: every
operation is a no-op that reports a miss. This is how the approximate tier is
switched off by omitting configuration.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any

from pydantic import ValidationError

from semcache.cache.models import ApproximateMatch, CacheEntryMetadata
from semcache.vector_store.base_vector_store import BaseVectorStore

logger = logging.getLogger(__name__)


class QdrantVectorStore(BaseVectorStore):
    """Vector store backed by Qdrant (cosine distance, single collection)."""

    def __init__(
        self,
        collection: str,
        vector_size: int,
        url: str | None = None,
        api_key: str | None = None,
        location: str | None = None,
        timeout: float = 2.0,
        client: Any | None = None,
    ) -> None:
        try:
            from qdrant_client import AsyncQdrantClient, models
        except ImportError as e:
            raise ImportError(
                "qdrant-client package required: pip install qdrant-client"
            ) from e

        self._models = models
        self._collection = collection
        self._vector_size = vector_size
        self._timeout = timeout

        if client is None and (url or location):
            client = AsyncQdrantClient(
                url=url, api_key=api_key or None, location=location,
                timeout=max(1, int(timeout)),
            )
        if client is None:
            logger.info("Qdrant client not configured; approximate tier disabled")
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._client is not None

    @property
    def provider_name(self) -> str:
        return "qdrant"

    @property
    def collection(self) -> str:
        return self._collection

    async def ensure_collection(self) -> bool:
        """Create the collection with {vector_size, COSINE} if it is missing.

        An existing collection whose vector size or distance differs disables
        the store and closes its client: scores from a non-cosine collection
        cannot be compared with the similarity threshold.
        """
        if self._client is None:
            return False

        models = self._models
        try:
            exists = await self._call(
                self._client.collection_exists(self._collection)
            )
            if not exists:
                try:
                    await self._call(
                        self._client.create_collection(
                            collection_name=self._collection,
                            vectors_config=models.VectorParams(
                                size=self._vector_size,
                                distance=models.Distance.COSINE,
                            ),
                        )
                    )
                    logger.info(
                        "Created Qdrant collection %s (size=%d, distance=cosine)",
                        self._collection, self._vector_size,
                    )
                except Exception:
                    # Another instance may have created it concurrently.
                    if not await self._call(
                        self._client.collection_exists(self._collection)
                    ):
                        raise
                return True

            info = await self._call(self._client.get_collection(self._collection))
            params = _unnamed_vector_params(info)
            if params is None:
                return True
            if params.size != self._vector_size:
                problem = f"vector size {params.size}, expected {self._vector_size}"
            elif params.distance != models.Distance.COSINE:
                problem = f"distance {params.distance}, expected Cosine"
            else:
                return True
            logger.error(
                "Qdrant collection %s has %s; disabling approximate tier",
                self._collection, problem,
            )
            await self._disable()
            return False
        except Exception as e:
            logger.warning(
                "Failed to initialize Qdrant collection %s: %s",
                self._collection, e,
            )
            return False

    async def search(
        self,
        vector: list[float],
        min_similarity: float,
        variant: str | None = None,
    ) -> ApproximateMatch | None:
        """Nearest neighbor lookup, thresholded at ``min_similarity`` (inclusive)."""
        if self._client is None:
            return None

        models = self._models
        query_filter = None
        if variant is not None:
            query_filter = models.Filter(
                must=[
                    models.FieldCondition(
                        key="variant", match=models.MatchValue(value=variant)
                    )
                ]
            )

        try:
            response = await self._call(
                self._client.query_points(
                    collection_name=self._collection,
                    query=vector,
                    query_filter=query_filter,
                    limit=1,
                    score_threshold=min_similarity,
                    with_payload=True,
                )
            )
        except Exception as e:
            logger.warning("Qdrant search failed: %s", e)
            return None

        if not response.points:
            return None

        point = response.points[0]
        if point.score < min_similarity:
            return None

        try:
            metadata = CacheEntryMetadata.model_validate(point.payload or {})
        except ValidationError as e:
            logger.warning(
                "Ignoring Qdrant point %s with unreadable payload: %s", point.id, e
            )
            return None

        return ApproximateMatch(
            result=metadata.to_result(),
            metadata=metadata,
            similarity=min(max(float(point.score), 0.0), 1.0),
        )

    async def upsert(
        self, vector: list[float], metadata: CacheEntryMetadata
    ) -> bool:
        """Insert a new point without waiting for the write to be applied."""
        if self._client is None:
            return False

        point = self._models.PointStruct(
            id=str(uuid.uuid4()),
            vector=vector,
            payload=metadata.to_payload(),
        )
        try:
            await self._call(
                self._client.upsert(
                    collection_name=self._collection, points=[point], wait=False
                )
            )
        except Exception as e:
            logger.warning("Qdrant upsert failed: %s", e)
            return False
        return True

    async def delete_by_content_hash(
        self, content_hash: str, variant: str | None = None
    ) -> None:
        """Delete every point for a content hash, or one variant of it."""
        if self._client is None:
            return

        models = self._models
        conditions = [
            models.FieldCondition(
                key="content_hash", match=models.MatchValue(value=content_hash)
            )
        ]
        if variant is not None:
            conditions.append(
                models.FieldCondition(
                    key="variant", match=models.MatchValue(value=variant)
                )
            )
        selector = models.FilterSelector(filter=models.Filter(must=conditions))
        try:
            await self._call(
                self._client.delete(
                    collection_name=self._collection, points_selector=selector
                )
            )
        except Exception as e:
            logger.warning("Qdrant delete failed for %s: %s", content_hash, e)

    async def count(self) -> int:
        """Return number of points in the collection."""
        if self._client is None:
            return 0
        try:
            result = await self._call(
                self._client.count(collection_name=self._collection, exact=True)
            )
        except Exception as e:
            logger.warning("Qdrant count failed: %s", e)
            return 0
        return result.count

    async def close(self) -> None:
        """Close the Qdrant client."""
        if self._client is None:
            return
        try:
            await self._client.close()
        except Exception as e:
            logger.debug("Qdrant close failed: %s", e)

    async def _disable(self) -> None:
        client, self._client = self._client, None
        try:
            await client.close()
        except Exception as e:
            logger.debug("Qdrant close failed: %s", e)

    async def _call(self, coro):
        return await asyncio.wait_for(coro, self._timeout)


def _unnamed_vector_params(info: Any) -> Any | None:
    """VectorParams of a single-vector collection; None for named vectors."""
    vectors = info.config.params.vectors
    if isinstance(vectors, dict):
        return None
    return vectors
