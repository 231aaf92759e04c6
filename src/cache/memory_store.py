# src/cache/memory_store.py - v1
"""In-process exact-match store (EXACT_STORE_BACKEND=memory).

TTL plus LRU eviction over an OrderedDict. Suitable for development, tests
and single-process deployments; use Redis when several workers share a cache.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Callable

from semcache.cache.base_exact_store import BaseExactStore
from semcache.cache.models import CachedFeedback
from semcache.core.models import AnalysisResult

logger = logging.getLogger(__name__)


class MemoryExactStore(BaseExactStore):
    """LRU + TTL dictionary keyed by exact cache key."""

    def __init__(
        self,
        default_ttl: int = 3600,
        max_items: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl
        self._max_items = max_items
        self._clock = clock
        # key -> (expires_at, serialized CachedFeedback)
        self._entries: OrderedDict[str, tuple[float, str]] = OrderedDict()

    async def get(self, key: str) -> AnalysisResult | None:
        """Retrieve a cached result, dropping it if expired."""
        item = self._entries.get(key)
        if item is None:
            return None

        expires_at, data = item
        if expires_at <= self._clock():
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        try:
            return CachedFeedback.model_validate_json(data).to_result()
        except Exception as e:
            logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None

    async def set(
        self, key: str, result: AnalysisResult, ttl: int | None = None
    ) -> bool:
        """Store a result, evicting the least recently used entry when full."""
        expires_at = self._clock() + (ttl or self._default_ttl)
        data = CachedFeedback.from_result(result).model_dump_json()

        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self._max_items:
            self._entries.popitem(last=False)

        self._entries[key] = (expires_at, data)
        return True

    async def delete(self, key: str) -> None:
        """Remove a cached result."""
        self._entries.pop(key, None)

    async def close(self) -> None:
        self._entries.clear()

    @property
    def size(self) -> int:
        """Number of stored entries, expired ones included until touched."""
        return len(self._entries)

    @property
    def backend_name(self) -> str:
        return "memory"
