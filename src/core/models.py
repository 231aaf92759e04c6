# src/core/models.py - v1
"""Shared Pydantic domain models used across modules.

AnalysisResult is the unit of value the cache stores and serves. It carries
no provenance: a result looks the same whichever tier produced it.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FeedbackType(str, Enum):
    """Classification produced by the feedback analyzers."""

    FALLACY = "FALLACY"
    INFLAMMATORY = "INFLAMMATORY"
    UNSOURCED = "UNSOURCED"
    BIAS = "BIAS"
    AFFIRMATION = "AFFIRMATION"


class AnalysisResult(BaseModel):
    """Output of the (expensive) feedback analysis call."""

    model_config = ConfigDict(frozen=True)

    type: FeedbackType
    subtype: str | None = None
    suggestion_text: str
    reasoning: str
    confidence_score: float = Field(ge=0.0, le=1.0)
