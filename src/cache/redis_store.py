# src/cache/redis_store.py - v2
"""Redis-backed exact-match store (EXACT_STORE_BACKEND=redis).

Uses the asyncio client from the 'redis' package. Entries are JSON-encoded
CachedFeedback records written with SET ... EX so that expiry is handled by
Redis itself. Every call is bounded by ``timeout`` and any failure is logged
and converted into a miss or a no-op.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from semcache.cache.base_exact_store import BaseExactStore
from semcache.cache.models import CachedFeedback
from semcache.core.models import AnalysisResult

logger = logging.getLogger(__name__)


class RedisExactStore(BaseExactStore):
    """Redis-backed exact store for distributed deployments."""

    def __init__(
        self,
        redis_url: str | None = None,
        default_ttl: int = 3600,
        timeout: float = 2.0,
        max_items: int | None = None,
        client: Any | None = None,
    ) -> None:
        if client is None:
            try:
                import redis.asyncio as aioredis
            except ImportError as e:
                raise ImportError(
                    "redis package required: pip install redis"
                ) from e
            if not redis_url:
                raise ValueError("redis_url is required when no client is given")
            client = aioredis.Redis.from_url(
                redis_url,
                decode_responses=True,
                socket_timeout=timeout,
                socket_connect_timeout=timeout,
            )

        self._client = client
        self._default_ttl = default_ttl
        self._timeout = timeout
        # Advisory only: Redis enforces its own maxmemory policy.
        self._max_items = max_items

    async def get(self, key: str) -> AnalysisResult | None:
        """Retrieve a cached result by key."""
        try:
            data = await asyncio.wait_for(self._client.get(key), self._timeout)
        except Exception as e:
            logger.warning("Redis get failed for %s: %s", key, e)
            return None

        if data is None:
            return None
        try:
            return CachedFeedback.model_validate_json(data).to_result()
        except Exception as e:
            logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None

    async def set(
        self, key: str, result: AnalysisResult, ttl: int | None = None
    ) -> bool:
        """Store a result with expiry (seconds)."""
        try:
            payload = CachedFeedback.from_result(result).model_dump_json()
            await asyncio.wait_for(
                self._client.set(key, payload, ex=ttl or self._default_ttl),
                self._timeout,
            )
        except Exception as e:
            logger.warning("Redis set failed for %s: %s", key, e)
            return False
        return True

    async def delete(self, key: str) -> None:
        """Remove a cached result."""
        try:
            await asyncio.wait_for(self._client.delete(key), self._timeout)
        except Exception as e:
            logger.warning("Redis delete failed for %s: %s", key, e)

    async def close(self) -> None:
        """Close the Redis connection pool."""
        try:
            await self._client.aclose()
        except Exception as e:
            logger.debug("Redis close failed: %s", e)

    @property
    def backend_name(self) -> str:
        return "redis"
