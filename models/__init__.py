"""Central package for prompt engine data models."""

from .prompt_models import (
    ArcStage,
    CacheStats,
    DocumentContext,
    FallbackCount,
    FallbackRecord,
    FallbackStats,
    PromptHeader,
    UserPrefs,
)

__all__ = [
    "ArcStage",
    "UserPrefs",
    "DocumentContext",
    "PromptHeader",
    "FallbackRecord",
    "FallbackCount",
    "FallbackStats",
    "CacheStats",
]
