# src/embeddings/ollama_embedder.py - v3
"""Ollama embedding adapter (local inference server).

Posts the whole batch to ``/api/embed`` in one request. urllib is blocking,
so the request runs on a worker thread.
"""

from __future__ import annotations

import asyncio
import json
import urllib.request

from semcache.embeddings.base_embedder import BaseEmbedder


class OllamaEmbedder(BaseEmbedder):
    """Embeddings from a local Ollama server (nomic-embed-text, mxbai-embed-large...)."""

    provider = "ollama"

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        dimensions: int = 768,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(model, dimensions)
        self._endpoint = f"{base_url.rstrip('/')}/api/embed"
        self._timeout = timeout

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        return await asyncio.to_thread(self._post, texts)

    def _post(self, texts: list[str]) -> list[list[float]]:
        body = json.dumps({"model": self._model, "input": texts}).encode("utf-8")
        request = urllib.request.Request(
            self._endpoint, data=body, headers={"Content-Type": "application/json"}
        )
        with urllib.request.urlopen(request, timeout=self._timeout) as resp:
            payload = json.loads(resp.read().decode("utf-8"))

        vectors = payload.get("embeddings") or []
        if len(vectors) != len(texts):
            raise RuntimeError(
                f"Ollama returned no embeddings for {len(texts)} input(s) "
                f"(model {self._model}, got {len(vectors)})"
            )
        return vectors
