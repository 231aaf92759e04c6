# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for the exact store, vector store, embedding provider,
timeouts and logging. Every field can be overridden by the matching upper-case
environment variable (e.g. SIMILARITY_THRESHOLD=0.9).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Exact-match store ===
    exact_store_backend: Literal["none", "memory", "redis"] = "memory"
    redis_url: str = ""
    redis_host: str = ""
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: str = ""
    cache_ttl_seconds: int = 3600
    cache_max_items: int = 10_000
    cache_key_prefix: str = "feedback"
    cache_variants: str = "low,medium,high"
    cache_default_variant: str = "medium"

    # === Approximate-match store ===
    vector_db_type: Literal["none", "memory", "qdrant"] = "none"
    vector_db_url: str = ""
    vector_db_api_key: str = ""
    vector_db_collection: str = "feedback_embeddings"
    similarity_threshold: float = 0.95

    # === Embeddings ===
    embedding_provider: Literal[
        "none", "openai", "ollama", "sentence_transformers"
    ] = "none"
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536
    embedding_ollama_model: str = "nomic-embed-text"
    embedding_st_model: str = "all-MiniLM-L6-v2"
    openai_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"

    # === Timeouts (seconds) ===
    store_timeout_seconds: float = 2.0
    embedding_timeout_seconds: float = 10.0

    # === Orchestration ===
    coalesce_inflight: bool = False

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("similarity_threshold")
    @classmethod
    def validate_similarity_threshold(cls, v: float) -> float:  # noqa: N805
        """SIMILARITY_THRESHOLD is a cosine score and must lie in [0, 1]."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("similarity_threshold must be between 0 and 1")
        return v

    @field_validator("cache_ttl_seconds", "cache_max_items", "embedding_dimensions")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.exact_store_backend == "redis" and not (
            self.redis_url or self.redis_host
        ):
            errors.append(
                "EXACT_STORE_BACKEND=redis requires REDIS_URL or REDIS_HOST"
            )

        if self.vector_db_type == "qdrant" and not self.vector_db_url:
            errors.append("VECTOR_DB_TYPE=qdrant requires VECTOR_DB_URL")

        if self.embedding_provider == "openai" and not self.openai_api_key:
            errors.append("EMBEDDING_PROVIDER=openai requires OPENAI_API_KEY")

        if self.cache_default_variant not in self.cache_variants_list:
            errors.append(
                "CACHE_DEFAULT_VARIANT must be one of CACHE_VARIANTS"
            )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def cache_variants_list(self) -> list[str]:
        """Parse comma-separated cache variants."""
        return [v.strip() for v in self.cache_variants.split(",") if v.strip()]

    @property
    def redis_connection_url(self) -> str:
        """REDIS_URL if set, otherwise built from host/port/db/password."""
        if self.redis_url:
            return self.redis_url
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or embedding callers).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
