# src/embeddings/sentence_tf_embedder.py - v3
"""In-process embeddings with sentence-transformers (all-MiniLM-L6-v2 etc.).

The model loads on first use; encoding is CPU/GPU bound and runs on a
worker thread. Vectors are L2-normalized so cosine equals dot product.
Requires: pip install sentence-transformers.
"""

from __future__ import annotations

import asyncio
import logging

from semcache.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder(BaseEmbedder):
    """Local embeddings via sentence-transformers."""

    provider = "sentence_transformers"

    def __init__(self, model: str = "all-MiniLM-L6-v2", dimensions: int = 384) -> None:
        super().__init__(model, dimensions)
        self._encoder = None

    def _load(self):
        if self._encoder is None:
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError as e:
                raise ImportError(
                    "sentence-transformers package required: "
                    "pip install sentence-transformers"
                ) from e
            self._encoder = SentenceTransformer(self._model)
            native = self._encoder.get_sentence_embedding_dimension()
            if native != self._dimensions:
                logger.warning(
                    "Model %s produces %d-dim vectors, configured %d",
                    self._model, native, self._dimensions,
                )
        return self._encoder

    def _encode(self, texts: list[str]) -> list[list[float]]:
        matrix = self._load().encode(
            texts, show_progress_bar=False, normalize_embeddings=True
        )
        return matrix.tolist()

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        return await asyncio.to_thread(self._encode, texts)
