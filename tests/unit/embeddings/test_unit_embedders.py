# tests/unit/embeddings/test_unit_embedders.py - v3
"""Tests for all embedding adapters - properties, request shape and import
error handling.
"""

from __future__ import annotations

import json
import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from semcache.embeddings.base_embedder import BaseEmbedder


class TestBaseEmbedder:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BaseEmbedder()  # type: ignore[abstract]


class TestOpenAIEmbedder:
    def test_properties(self):
        from semcache.embeddings.openai_embedder import OpenAIEmbedder
        e = OpenAIEmbedder(model="text-embedding-3-small", dimensions=1536)
        assert e.provider_name == "openai"
        assert e.model_name == "text-embedding-3-small"
        assert e.dimensions == 1536

    @pytest.mark.asyncio
    async def test_import_error(self):
        mod = sys.modules.get("openai")
        sys.modules["openai"] = None  # type: ignore[assignment]
        try:
            from semcache.embeddings.openai_embedder import OpenAIEmbedder
            e = OpenAIEmbedder()
            with pytest.raises(ImportError, match="openai"):
                await e.embed_query("test")
        finally:
            if mod is not None:
                sys.modules["openai"] = mod
            else:
                sys.modules.pop("openai", None)

    @pytest.mark.asyncio
    async def test_requests_configured_dimensions(self):
        from semcache.embeddings.openai_embedder import OpenAIEmbedder
        e = OpenAIEmbedder(model="text-embedding-3-small", dimensions=3)
        client = MagicMock()
        client.embeddings.create = AsyncMock(
            return_value=SimpleNamespace(data=[SimpleNamespace(index=0, embedding=[0.1, 0.2, 0.3])])
        )
        e._client = client

        vector = await e.embed_query("hello")
        assert vector == [0.1, 0.2, 0.3]
        kwargs = client.embeddings.create.call_args.kwargs
        assert kwargs["dimensions"] == 3
        assert kwargs["input"] == ["hello"]


class TestSentenceTransformerEmbedder:
    def test_properties(self):
        from semcache.embeddings.sentence_tf_embedder import SentenceTransformerEmbedder
        e = SentenceTransformerEmbedder(model="all-MiniLM-L6-v2", dimensions=384)
        assert e.provider_name == "sentence_transformers"
        assert e.model_name == "all-MiniLM-L6-v2"
        assert e.dimensions == 384

    @pytest.mark.asyncio
    async def test_import_error(self):
        mod = sys.modules.get("sentence_transformers")
        sys.modules["sentence_transformers"] = None  # type: ignore[assignment]
        try:
            from semcache.embeddings.sentence_tf_embedder import SentenceTransformerEmbedder
            e = SentenceTransformerEmbedder()
            with pytest.raises(ImportError, match="sentence-transformers"):
                await e.embed_query("test")
        finally:
            if mod is not None:
                sys.modules["sentence_transformers"] = mod
            else:
                sys.modules.pop("sentence_transformers", None)


class TestOllamaEmbedder:
    def test_properties(self):
        from semcache.embeddings.ollama_embedder import OllamaEmbedder
        e = OllamaEmbedder(model="nomic-embed-text", dimensions=768)
        assert e.provider_name == "ollama"
        assert e.model_name == "nomic-embed-text"
        assert e.dimensions == 768

    @pytest.mark.asyncio
    async def test_embed_query(self):
        from semcache.embeddings.ollama_embedder import OllamaEmbedder
        e = OllamaEmbedder(base_url="http://ollama:11434/")
        response = MagicMock()
        response.read.return_value = json.dumps({"embeddings": [[0.5, 0.5]]}).encode()
        response.__enter__.return_value = response

        with patch("urllib.request.urlopen", return_value=response) as urlopen:
            vector = await e.embed_query("hello")

        assert vector == [0.5, 0.5]
        request = urlopen.call_args.args[0]
        assert request.full_url == "http://ollama:11434/api/embed"

    @pytest.mark.asyncio
    async def test_empty_response_raises(self):
        from semcache.embeddings.ollama_embedder import OllamaEmbedder
        e = OllamaEmbedder()
        response = MagicMock()
        response.read.return_value = b"{}"
        response.__enter__.return_value = response

        with patch("urllib.request.urlopen", return_value=response):
            with pytest.raises(RuntimeError, match="no embeddings"):
                await e.embed_query("hello")
