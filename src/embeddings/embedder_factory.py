# src/embeddings/embedder_factory.py - v3
"""Factory: build the configured embedder from Settings.

Providers are registered by dotted class path and imported lazily, so the
optional SDKs (openai, sentence-transformers) are only needed when chosen.
EMBEDDING_PROVIDER=none yields no embedder, which disables the
approximate-match tier without raising.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Callable

from semcache.config.settings import Settings
from semcache.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)

_PROVIDER_REGISTRY: dict[str, str] = {
    "openai": "semcache.embeddings.openai_embedder.OpenAIEmbedder",
    "sentence_transformers": "semcache.embeddings.sentence_tf_embedder.SentenceTransformerEmbedder",
    "ollama": "semcache.embeddings.ollama_embedder.OllamaEmbedder",
}

# Provider-specific constructor arguments; dimensions is always passed.
_SETTINGS_OPTIONS: dict[str, Callable[[Settings], dict[str, Any]]] = {
    "openai": lambda s: {"model": s.embedding_model, "api_key": s.openai_api_key},
    "sentence_transformers": lambda s: {"model": s.embedding_st_model},
    "ollama": lambda s: {
        "model": s.embedding_ollama_model,
        "base_url": s.ollama_base_url,
        "timeout": s.embedding_timeout_seconds,
    },
}


class UnsupportedEmbeddingProviderError(ValueError):
    """Raised when an embedding provider is not registered."""


def create_embedder(settings: Settings) -> BaseEmbedder | None:
    """Instantiate the configured embedding provider, or None when disabled.

    Raises:
        UnsupportedEmbeddingProviderError: EMBEDDING_PROVIDER is not registered.
    """
    provider = settings.embedding_provider
    if provider == "none":
        logger.info("Embedding provider disabled; approximate tier inactive")
        return None

    class_path = _PROVIDER_REGISTRY.get(provider)
    if class_path is None:
        raise UnsupportedEmbeddingProviderError(
            f"Unsupported embedding provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    module_path, class_name = class_path.rsplit(".", 1)
    cls = getattr(importlib.import_module(module_path), class_name)

    options = _SETTINGS_OPTIONS.get(provider, lambda s: {})(settings)
    logger.debug("Creating embedder: provider=%s dims=%d", provider, settings.embedding_dimensions)
    return cls(dimensions=settings.embedding_dimensions, **options)


def register_embedding_provider(
    name: str,
    class_path: str,
    options: Callable[[Settings], dict[str, Any]] | None = None,
) -> None:
    """Register a custom embedding provider.

    ``options`` maps Settings to extra constructor kwargs; without it the
    class receives ``dimensions`` only.
    """
    _PROVIDER_REGISTRY[name] = class_path
    if options is not None:
        _SETTINGS_OPTIONS[name] = options
