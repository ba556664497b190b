"""Contextual pattern resolution for prompt headers."""

from .diagnostics import FallbackDiagnosticsLog
from .engine import (
    ContextualPromptEngine,
    EngineConfig,
    build_contextual_prompt_header,
    default_engine,
    get_diagnostics,
    log_fallback_warning,
)
from .header import assemble_header
from .injector import inject_character_name
from .memo_cache import MemoizationCache
from .pattern_library import PatternEntry, PatternLibrary
from .resolver import FallbackEvent, FallbackTier, PatternResolver, Resolution
from .sanitizer import sanitize, sanitize_document_context, sanitize_user_prefs

__all__ = [
    "ContextualPromptEngine",
    "EngineConfig",
    "build_contextual_prompt_header",
    "default_engine",
    "get_diagnostics",
    "log_fallback_warning",
    "FallbackDiagnosticsLog",
    "MemoizationCache",
    "PatternEntry",
    "PatternLibrary",
    "PatternResolver",
    "Resolution",
    "FallbackEvent",
    "FallbackTier",
    "assemble_header",
    "inject_character_name",
    "sanitize",
    "sanitize_user_prefs",
    "sanitize_document_context",
]
