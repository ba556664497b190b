# prompt_engine/header.py
"""Formatting of the annotation block prepended to prompts."""

from __future__ import annotations

from models.prompt_models import UserPrefs


def assemble_header(prefs: UserPrefs, pattern: str) -> str:
    """Build the two-line header followed by a blank line.

    Downstream prompt assembly parses this block verbatim; field order and
    delimiters must stay exactly as they are.
    """
    return (
        f"/* Tone: {prefs.tone} | Language: {prefs.language} | Genre: {prefs.genre} */\n"
        f'/* Pattern: "{pattern}" */\n\n'
    )
