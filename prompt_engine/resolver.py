# prompt_engine/resolver.py
"""Tiered pattern lookup with explicit fallback reporting."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import structlog

from .constants import DEFAULT_GENRE_KEY, GENERIC_PATTERN, SETUP_ARC

logger = structlog.get_logger(__name__)


class PatternSource(Protocol):
    def get_pattern(self, genre: str, arc: str) -> str | None: ...


class FallbackTier(str, Enum):
    """Degradation steps, in the order they are attempted."""

    GENRE_SETUP = "genre_setup"
    DEFAULT_ARC = "default_arc"
    DEFAULT_SETUP = "default_setup"
    GENERIC_SENTENCE = "generic_sentence"


@dataclass(frozen=True)
class FallbackEvent:
    """Emitted whenever the exact (genre, arc) pattern was unavailable."""

    genre: str
    arc: str
    used_fallback: str
    tier: FallbackTier


@dataclass(frozen=True)
class Resolution:
    pattern: str
    fallback: FallbackEvent | None = None


class PatternResolver:
    """Resolve a pattern for a sanitized (genre, arc) pair.

    The order is exact match, then the same genre at the setup arc, then the
    generic ``DEFAULT`` namespace at the requested arc, ``DEFAULT`` at setup,
    and finally a hard-coded sentence. A genre's own setup pattern is a closer
    match than any generic pattern, so it is always tried first.

    Resolution is side-effect free: fallbacks are returned on the
    ``Resolution`` rather than logged, and the caller decides what to do with
    them.
    """

    def __init__(self, library: PatternSource) -> None:
        self.library = library

    def resolve(self, genre: str, arc: str) -> Resolution:
        logger.debug("Looking for pattern", genre=genre, arc=arc)

        pattern = self.library.get_pattern(genre, arc)
        if pattern:
            logger.debug("Found exact pattern", genre=genre, arc=arc, pattern=pattern)
            return Resolution(pattern)

        if arc != SETUP_ARC:
            pattern = self.library.get_pattern(genre, SETUP_ARC)
            if pattern:
                logger.debug("Using setup pattern", genre=genre, pattern=pattern)
                return Resolution(
                    pattern,
                    FallbackEvent(
                        genre, arc, f"setup arc for {genre}", FallbackTier.GENRE_SETUP
                    ),
                )

        pattern = self.library.get_pattern(DEFAULT_GENRE_KEY, arc)
        tier = FallbackTier.DEFAULT_ARC
        if not pattern:
            pattern = self.library.get_pattern(DEFAULT_GENRE_KEY, SETUP_ARC)
            tier = FallbackTier.DEFAULT_SETUP
        if not pattern:
            pattern = GENERIC_PATTERN
            tier = FallbackTier.GENERIC_SENTENCE

        logger.debug("Using fallback pattern", pattern=pattern, tier=tier.value)
        return Resolution(
            pattern,
            FallbackEvent(genre, arc, f"DEFAULT pattern for {genre} / {arc}", tier),
        )
