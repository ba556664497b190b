# models/prompt_models.py
"""Data models exchanged with the contextual prompt engine."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ArcStage(str, Enum):
    """Ordered narrative stages used as a pattern lookup dimension."""

    SETUP = "setup"
    RISING = "rising"
    CLIMAX = "climax"
    RESOLUTION = "resolution"


class UserPrefs(BaseModel):
    """Writer preferences that shape the prompt header."""

    model_config = ConfigDict(frozen=True)

    tone: str
    language: str
    genre: str


class DocumentContext(BaseModel):
    """Where in the story the current request sits."""

    model_config = ConfigDict(frozen=True)

    scene: str = ""
    arc: str = ArcStage.SETUP.value
    character_name: str | None = None


class PromptHeader(BaseModel):
    """Annotated block injected at the top of an LLM prompt."""

    model_config = ConfigDict(frozen=True)

    header: str
    tone: str
    language: str
    genre: str
    pattern_used: str


class FallbackRecord(BaseModel):
    """A single occasion on which a non-exact pattern was used."""

    model_config = ConfigDict(frozen=True)

    genre: str
    arc: str
    used_fallback: str
    timestamp: float
    context: str | None = None


class FallbackCount(BaseModel):
    genre: str
    arc: str
    count: int


class FallbackStats(BaseModel):
    """Summary of the fallback diagnostics log for dashboards."""

    total_fallbacks: int = 0
    unique_fallbacks: int = 0
    recent_fallbacks: list[FallbackRecord] = Field(default_factory=list)
    most_common_fallbacks: list[FallbackCount] = Field(default_factory=list)


class CacheStats(BaseModel):
    size: int = 0
    last_used: bool = False
