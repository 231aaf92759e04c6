# src/cache/base_exact_store.py - v2
"""Abstract exact-match store interface.

Implementations are best-effort: errors from the backing store are logged and
turned into a miss (reads) or a no-op (writes). They never raise to callers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from semcache.core.models import AnalysisResult


class BaseExactStore(ABC):
    """Unified interface for exact-match (key/value + TTL) backends."""

    @abstractmethod
    async def get(self, key: str) -> AnalysisResult | None:
        """Retrieve a cached result by key, or None on miss or error."""

    @abstractmethod
    async def set(
        self, key: str, result: AnalysisResult, ttl: int | None = None
    ) -> bool:
        """Store a result; ``ttl`` in seconds, None means the store default.

        Returns False when the write could not be applied. Never raises.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a cached result."""

    async def close(self) -> None:
        """Release client resources."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Backend identifier (memory, redis)."""
