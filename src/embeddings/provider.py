# src/embeddings/provider.py - v1
"""Embedding provider as seen by the cache orchestrator.

Wraps an optional BaseEmbedder and turns every failure mode (no embedder,
provider error, timeout, wrong vector size) into ``None``. A missing
embedding is an expected outcome that simply disables the approximate tier
for that call.
"""

from __future__ import annotations

import asyncio
import logging

from semcache.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)


class EmbeddingProvider:
    """Tolerant ``embed(text) -> vector | None`` facade over an embedder."""

    def __init__(
        self,
        embedder: BaseEmbedder | None,
        dimensions: int | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._embedder = embedder
        self._dimensions = dimensions if dimensions is not None else (
            embedder.dimensions if embedder is not None else None
        )
        self._timeout = timeout

    @property
    def available(self) -> bool:
        return self._embedder is not None

    @property
    def dimensions(self) -> int | None:
        """Expected vector size; must equal the vector store's size."""
        return self._dimensions

    async def embed(self, text: str) -> list[float] | None:
        """Return an embedding for ``text`` or None if unavailable."""
        if self._embedder is None:
            return None
        if not text.strip():
            return None

        try:
            vector = await asyncio.wait_for(
                self._embedder.embed_query(text), self._timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Embedding timed out after %.1fs (provider=%s)",
                self._timeout, self._embedder.provider_name,
            )
            return None
        except Exception as e:
            logger.warning(
                "Embedding failed (provider=%s): %s",
                self._embedder.provider_name, e,
            )
            return None

        if not vector:
            return None
        if self._dimensions is not None and len(vector) != self._dimensions:
            logger.warning(
                "Embedding has %d dimensions, expected %d; skipping",
                len(vector), self._dimensions,
            )
            return None
        return [float(x) for x in vector]
