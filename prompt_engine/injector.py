# prompt_engine/injector.py
"""Placeholder substitution for resolved patterns."""

from __future__ import annotations

import re

import structlog

from .constants import (
    CHARACTER_MARKER,
    OTHER_CHARACTER_PHRASE,
    OTHER_MARKER,
    THEIR_MARKER,
    THEY_MARKER,
    UNNAMED_CHARACTER_PHRASE,
)

logger = structlog.get_logger(__name__)

_MARKER_RE = re.compile(
    "|".join(
        re.escape(marker)
        for marker in (CHARACTER_MARKER, OTHER_MARKER, THEY_MARKER, THEIR_MARKER)
    )
)


def _substitutions(character_name: str) -> dict[str, str]:
    return {
        CHARACTER_MARKER: character_name,
        OTHER_MARKER: OTHER_CHARACTER_PHRASE,
        THEY_MARKER: character_name,
        THEIR_MARKER: f"{character_name}'s",
    }


def inject_character_name(pattern: str, character_name: str | None = None) -> str:
    """Replace placeholder markers in ``pattern``.

    Substitution happens in a single pass with a callable replacement, so the
    name is inserted verbatim: backslashes, apostrophes, non-ASCII text and
    even marker-like text inside a name are never reinterpreted. Without a
    name the character markers become a neutral phrase instead of leaking
    into the prompt.
    """
    substitutions = _substitutions(character_name or UNNAMED_CHARACTER_PHRASE)
    injected = _MARKER_RE.sub(lambda m: substitutions[m.group(0)], pattern)

    if character_name and injected != pattern:
        logger.debug("Injected character name", original=pattern, injected=injected)
    return injected
