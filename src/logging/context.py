# src/logging/context.py - v2
"""Contextual logging support: attach correlation_id and cache tier to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per cache request.
_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)
_cache_tier: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "cache_tier", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    correlation_id: str | None = None
    cache_tier: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        correlation_id=_correlation_id.get(),
        cache_tier=_cache_tier.get(),
    )


def set_request_context(correlation_id: str | None) -> contextvars.Token:
    """Set the correlation id for the current request; returns a reset token."""
    return _correlation_id.set(correlation_id)


def reset_request_context(token: contextvars.Token) -> None:
    """Restore the correlation id saved by set_request_context."""
    _correlation_id.reset(token)


def set_cache_tier(tier: str | None) -> None:
    """Record which tier (exact, approximate, compute, populate) is active."""
    _cache_tier.set(tier)


def clear_context() -> None:
    """Reset all context variables."""
    _correlation_id.set(None)
    _cache_tier.set(None)
