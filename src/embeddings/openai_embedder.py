# src/embeddings/openai_embedder.py - v3
"""OpenAI embedding adapter (text-embedding-3-small / -large).

Requests are sent with ``dimensions`` so the returned vectors always match
the collection size, even for models whose native size is larger.
Requires: pip install openai.
"""

from __future__ import annotations

from semcache.embeddings.base_embedder import BaseEmbedder


class OpenAIEmbedder(BaseEmbedder):
    """Embeddings via the OpenAI API (async client, created on first use)."""

    provider = "openai"

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: str | None = None,
        dimensions: int = 1536,
    ) -> None:
        super().__init__(model, dimensions)
        self._api_key = api_key
        self._client = None

    def _get_client(self):
        if self._client is None:
            try:
                from openai import AsyncOpenAI
            except ImportError as e:
                raise ImportError(
                    "openai package required: pip install openai"
                ) from e
            self._client = AsyncOpenAI(api_key=self._api_key or None)
        return self._client

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        response = await self._get_client().embeddings.create(
            input=texts, model=self._model, dimensions=self._dimensions
        )
        # The API tags each vector with its input position.
        ordered = sorted(response.data, key=lambda item: item.index)
        return [item.embedding for item in ordered]
