# prompt_engine/sanitizer.py
"""Coerce raw preference and context input into safe, canonical models.

Nothing in here raises. Invalid values are replaced by defaults so that a
malformed request can never stop prompt generation.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

import structlog

from models.prompt_models import DocumentContext, UserPrefs

from .constants import (
    ARC_STAGES,
    DEFAULT_GENRE,
    DEFAULT_LANGUAGE,
    DEFAULT_TONE,
    SAFE_LANGUAGES,
    SAFE_TONES,
    SETUP_ARC,
)

logger = structlog.get_logger(__name__)

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]+")


def _get_field(raw: Any, *names: str) -> Any:
    """Return the first non-None field from a mapping or attribute-style object."""
    if raw is None:
        return None
    for name in names:
        if isinstance(raw, Mapping):
            value = raw.get(name)
        else:
            value = getattr(raw, name, None)
        if value is not None:
            return value
    return None


def _as_str(value: Any) -> str | None:
    if isinstance(value, Enum):
        value = value.value
    return value if isinstance(value, str) else None


def _single_line(value: str | None) -> str | None:
    """Flatten text echoed into the header so it stays two comment lines."""
    if value is None:
        return None
    return _CONTROL_CHARS_RE.sub(" ", value).replace("*/", "* /").strip()


def sanitize_user_prefs(prefs: Any) -> UserPrefs:
    """Sanitize and validate user preferences with safe fallbacks."""
    tone = _as_str(_get_field(prefs, "tone"))
    language = _as_str(_get_field(prefs, "language"))
    genre = _single_line(_as_str(_get_field(prefs, "genre")))

    return UserPrefs(
        tone=tone if tone in SAFE_TONES else DEFAULT_TONE,
        language=language if language in SAFE_LANGUAGES else DEFAULT_LANGUAGE,
        genre=genre or DEFAULT_GENRE,
    )


def sanitize_document_context(context: Any) -> DocumentContext:
    """Sanitize document context with safe fallbacks."""
    scene = _as_str(_get_field(context, "scene"))
    arc = _as_str(_get_field(context, "arc"))
    character_name = _single_line(
        _as_str(_get_field(context, "character_name", "characterName"))
    )

    return DocumentContext(
        scene=scene or "",
        arc=arc if arc in ARC_STAGES else SETUP_ARC,
        character_name=character_name or None,
    )


def sanitize(prefs: Any, context: Any) -> tuple[UserPrefs, DocumentContext]:
    safe_prefs = sanitize_user_prefs(prefs)
    safe_context = sanitize_document_context(context)
    logger.debug(
        "Sanitized prompt inputs",
        prefs=safe_prefs.model_dump(),
        context=safe_context.model_dump(),
    )
    return safe_prefs, safe_context
