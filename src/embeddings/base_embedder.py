# src/embeddings/base_embedder.py - v2
"""Abstract embeddings interface.

Adapters implement ``embed_texts`` (one provider round-trip per batch); a
single query is a batch of one unless the adapter overrides it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar


class BaseEmbedder(ABC):
    """Unified interface for all embedding providers."""

    provider: ClassVar[str] = "unknown"

    def __init__(self, model: str, dimensions: int) -> None:
        self._model = model
        self._dimensions = dimensions

    @abstractmethod
    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of texts into vectors, preserving input order."""

    async def embed_query(self, query: str) -> list[float]:
        """Embed a single text."""
        vectors = await self.embed_texts([query])
        return vectors[0]

    @property
    def dimensions(self) -> int:
        """Output vector dimensions."""
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return self.provider

    @property
    def model_name(self) -> str:
        return self._model
