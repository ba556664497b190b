# prompt_engine/memo_cache.py
"""Bounded memoization of prompt headers keyed by sanitized inputs."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass

import structlog

from models.prompt_models import CacheStats, DocumentContext, PromptHeader, UserPrefs

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    prefs: UserPrefs
    context: DocumentContext
    result: PromptHeader
    timestamp: int

    def matches(self, prefs: UserPrefs, context: DocumentContext) -> bool:
        return prefs_equal(self.prefs, prefs) and contexts_equal(self.context, context)


def prefs_equal(a: UserPrefs, b: UserPrefs) -> bool:
    return a.tone == b.tone and a.language == b.language and a.genre == b.genre


def contexts_equal(a: DocumentContext, b: DocumentContext) -> bool:
    return (
        a.scene == b.scene
        and a.arc == b.arc
        and a.character_name == b.character_name
    )


class MemoizationCache:
    """Single last-used slot in front of a bounded list of entries.

    Eviction keeps the most recently *created* entries. A hit promotes the
    entry to the last-used slot but leaves its timestamp alone, so an old entry
    that is read often is still evicted in creation order.
    """

    def __init__(self, max_entries: int = 100, enabled: bool = True) -> None:
        self.max_entries = max_entries
        self.enabled = enabled
        self._entries: list[CacheEntry] = []
        self._last_used: CacheEntry | None = None
        self._clock = itertools.count()
        self._lock = threading.RLock()

    def lookup(self, prefs: UserPrefs, context: DocumentContext) -> PromptHeader | None:
        if not self.enabled:
            return None

        with self._lock:
            last = self._last_used
            if last is not None and last.matches(prefs, context):
                return last.result

            for entry in self._entries:
                if entry.matches(prefs, context):
                    self._last_used = entry
                    return entry.result
        return None

    def store(
        self, prefs: UserPrefs, context: DocumentContext, result: PromptHeader
    ) -> PromptHeader:
        """Store ``result`` and return the header now cached for this key.

        When another caller stored the same key first, its entry is kept with
        its original timestamp and that header is returned instead.
        """
        if not self.enabled:
            return result

        with self._lock:
            for existing in self._entries:
                if existing.matches(prefs, context):
                    self._last_used = existing
                    return existing.result

            entry = CacheEntry(prefs, context, result, next(self._clock))
            self._last_used = entry
            self._entries.append(entry)

            if len(self._entries) > self.max_entries:
                self._entries.sort(key=lambda e: e.timestamp, reverse=True)
                del self._entries[self.max_entries :]
                logger.debug("Trimmed memoization cache", size=len(self._entries))
        return result

    def clear(self) -> None:
        with self._lock:
            self._entries = []
            self._last_used = None

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                size=len(self._entries), last_used=self._last_used is not None
            )

    def __len__(self) -> int:
        return len(self._entries)
