# prompt_engine/engine.py
"""Entry point that turns writer preferences and story context into a header."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog
from config import PATTERN_LIBRARY_FILE_PATH, settings
from pydantic import BaseModel, Field

from models.prompt_models import (
    CacheStats,
    FallbackRecord,
    FallbackStats,
    PromptHeader,
    UserPrefs,
)

from .constants import (
    DEFAULT_GENRE,
    DEFAULT_LANGUAGE,
    DEFAULT_TONE,
    FALLBACK_WARNING_PREFIX,
    GENERIC_PATTERN,
)
from .diagnostics import FallbackDiagnosticsLog
from .header import assemble_header
from .injector import inject_character_name
from .memo_cache import MemoizationCache
from .pattern_library import PatternLibrary
from .resolver import PatternResolver, PatternSource
from .sanitizer import sanitize

logger = structlog.get_logger(__name__)

HeaderHook = Callable[[PromptHeader], Any]


class EngineConfig(BaseModel):
    """Per-engine switches. Defaults mirror ``config.settings``."""

    debug: bool = False
    enable_memoization: bool = True
    max_memoized_entries: int = Field(100, ge=1)
    enable_fallback_logging: bool = True
    max_fallback_logs: int = Field(1000, ge=1)

    @classmethod
    def from_settings(cls) -> EngineConfig:
        return cls(
            debug=settings.PROMPT_ENGINE_DEBUG,
            enable_memoization=settings.ENABLE_MEMOIZATION,
            max_memoized_entries=settings.MAX_MEMOIZED_ENTRIES,
            enable_fallback_logging=settings.ENABLE_FALLBACK_LOGGING,
            max_fallback_logs=settings.MAX_FALLBACK_LOGS,
        )


def load_default_library() -> PatternLibrary:
    """Built-in patterns, extended by ``PATTERN_LIBRARY_FILE`` when configured."""
    if PATTERN_LIBRARY_FILE_PATH:
        return PatternLibrary.from_yaml(PATTERN_LIBRARY_FILE_PATH)
    return PatternLibrary()


def _generic_header() -> PromptHeader:
    prefs = UserPrefs(tone=DEFAULT_TONE, language=DEFAULT_LANGUAGE, genre=DEFAULT_GENRE)
    pattern = inject_character_name(GENERIC_PATTERN)
    return PromptHeader(
        header=assemble_header(prefs, pattern),
        tone=prefs.tone,
        language=prefs.language,
        genre=prefs.genre,
        pattern_used=pattern,
    )


class ContextualPromptEngine:
    """Resolve, inject, format and memoize prompt headers.

    Each engine owns its cache and fallback log, so independent instances
    (per tenant, per test) never share state.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        library: PatternSource | None = None,
    ) -> None:
        self.config = config or EngineConfig.from_settings()
        self.library = library if library is not None else load_default_library()
        self.resolver = PatternResolver(self.library)
        self.cache = MemoizationCache(
            max_entries=self.config.max_memoized_entries,
            enabled=self.config.enable_memoization,
        )
        self.diagnostics = FallbackDiagnosticsLog(
            max_entries=self.config.max_fallback_logs,
            enabled=self.config.enable_fallback_logging,
        )
        self._hooks: list[HeaderHook] = []

    def build_contextual_prompt_header(self, prefs: Any, context: Any) -> PromptHeader:
        """Build a contextual prompt header. Never raises."""
        try:
            result = self._build(prefs, context)
        except Exception as exc:
            logger.error(
                "Prompt header generation failed. Using generic header.",
                error=str(exc),
                exc_info=True,
            )
            result = _generic_header()
        self._notify_hooks(result)
        return result

    def _build(self, prefs: Any, context: Any) -> PromptHeader:
        debug = self.config.debug
        if debug:
            logger.info(
                f"{FALLBACK_WARNING_PREFIX} Building contextual prompt header",
                prefs=prefs,
                context=context,
            )

        safe_prefs, safe_context = sanitize(prefs, context)

        memoized = self.cache.lookup(safe_prefs, safe_context)
        if memoized is not None:
            if debug:
                logger.info(f"{FALLBACK_WARNING_PREFIX} Using memoized result")
            return memoized

        resolution = self.resolver.resolve(safe_prefs.genre, safe_context.arc)
        if resolution.fallback is not None:
            event = resolution.fallback
            self.diagnostics.record(
                event.genre,
                event.arc,
                event.used_fallback,
                debug=debug,
                context=safe_context.scene or None,
            )

        injected = inject_character_name(
            resolution.pattern, safe_context.character_name
        )
        result = PromptHeader(
            header=assemble_header(safe_prefs, injected),
            tone=safe_prefs.tone,
            language=safe_prefs.language,
            genre=safe_prefs.genre,
            pattern_used=injected,
        )
        result = self.cache.store(safe_prefs, safe_context, result)

        if debug:
            logger.info(
                f"{FALLBACK_WARNING_PREFIX} Generated header", header=result.header
            )
        return result

    def _notify_hooks(self, result: PromptHeader) -> None:
        for hook in list(self._hooks):
            try:
                hook(result)
            except Exception as exc:
                logger.error(
                    "Prompt header hook failed",
                    hook=getattr(hook, "__name__", repr(hook)),
                    error=str(exc),
                    exc_info=True,
                )

    def add_hook(self, hook: HeaderHook) -> None:
        """Register a callable invoked with every header this engine returns."""
        self._hooks.append(hook)

    def remove_hook(self, hook: HeaderHook) -> None:
        if hook in self._hooks:
            self._hooks.remove(hook)

    def log_fallback_warning(
        self,
        genre: str,
        arc: str,
        used_fallback: str,
        debug: bool | None = None,
    ) -> bool:
        """Record a fallback, warning only when debug is active."""
        effective_debug = self.config.debug if debug is None else debug
        return self.diagnostics.record(genre, arc, used_fallback, debug=effective_debug)

    def get_diagnostics(self) -> list[FallbackRecord]:
        return self.diagnostics.get_all()

    def get_fallback_stats(self) -> FallbackStats:
        return self.diagnostics.get_stats()

    def clear_fallback_logs(self) -> None:
        self.diagnostics.clear()

    def get_cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def clear_memoization_cache(self) -> None:
        self.cache.clear()
        if self.config.debug:
            logger.info("Cleared memoization cache")

    def update_config(self, **changes: Any) -> EngineConfig:
        """Apply config changes. A smaller cache bound takes effect on next store."""
        self.config = EngineConfig.model_validate(
            {**self.config.model_dump(), **changes}
        )
        self.cache.enabled = self.config.enable_memoization
        self.cache.max_entries = self.config.max_memoized_entries
        self.diagnostics.enabled = self.config.enable_fallback_logging
        self.diagnostics.resize(self.config.max_fallback_logs)
        if self.config.debug:
            logger.info("Configuration updated", config=self.config.model_dump())
        return self.config

    def reset(self) -> None:
        """Drop cached headers, fallback records and hooks."""
        self.cache.clear()
        self.diagnostics.clear()
        self._hooks.clear()

    dispose = reset


default_engine = ContextualPromptEngine()


def build_contextual_prompt_header(prefs: Any, context: Any) -> PromptHeader:
    return default_engine.build_contextual_prompt_header(prefs, context)


def log_fallback_warning(
    genre: str, arc: str, used_fallback: str, debug: bool | None = None
) -> bool:
    return default_engine.log_fallback_warning(genre, arc, used_fallback, debug)


def get_diagnostics() -> list[FallbackRecord]:
    return default_engine.get_diagnostics()
