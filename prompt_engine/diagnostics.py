# prompt_engine/diagnostics.py
"""Deduplicated, size-bounded record of pattern fallbacks."""

from __future__ import annotations

import threading
import time
from collections import Counter, deque

import structlog

from models.prompt_models import FallbackCount, FallbackRecord, FallbackStats

from .constants import (
    FALLBACK_WARNING_PREFIX,
    MOST_COMMON_FALLBACK_LIMIT,
    RECENT_FALLBACK_WINDOW_SECONDS,
)

logger = structlog.get_logger(__name__)


class FallbackDiagnosticsLog:
    """Keep the first occurrence of every (genre, arc, fallback) triple.

    A key is marked as seen whether or not the warning is emitted, so toggling
    debug mode never produces a late duplicate warning for an old key.
    """

    def __init__(self, max_entries: int = 1000, enabled: bool = True) -> None:
        self.enabled = enabled
        self._lock = threading.Lock()
        self._seen: set[tuple[str, str, str]] = set()
        self._records: deque[FallbackRecord] = deque(maxlen=max_entries)

    @property
    def max_entries(self) -> int:
        return self._records.maxlen or 0

    def resize(self, max_entries: int) -> None:
        """Change capacity, keeping the newest records."""
        with self._lock:
            if max_entries == self._records.maxlen:
                return
            self._records = deque(self._records, maxlen=max_entries)

    def record(
        self,
        genre: str,
        arc: str,
        used_fallback: str,
        debug: bool = False,
        context: str | None = None,
    ) -> bool:
        """Register a fallback. Returns True only the first time a key is seen."""
        key = (genre, arc, used_fallback)
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            if self.enabled:
                self._records.append(
                    FallbackRecord(
                        genre=genre,
                        arc=arc,
                        used_fallback=used_fallback,
                        timestamp=time.time(),
                        context=context,
                    )
                )

        if debug:
            logger.warning(
                f'{FALLBACK_WARNING_PREFIX} No pattern match for genre "{genre}" + '
                f'arc "{arc}". Using fallback: [{used_fallback}]'
            )
        return True

    def get_all(self) -> list[FallbackRecord]:
        with self._lock:
            return list(self._records)

    def get_stats(self, now: float | None = None) -> FallbackStats:
        current = time.time() if now is None else now
        with self._lock:
            records = list(self._records)
            unique = len(self._seen)

        recent = sorted(
            (
                r
                for r in records
                if current - r.timestamp < RECENT_FALLBACK_WINDOW_SECONDS
            ),
            key=lambda r: r.timestamp,
            reverse=True,
        )
        counts = Counter((r.genre, r.arc) for r in records)
        most_common = [
            FallbackCount(genre=genre, arc=arc, count=count)
            for (genre, arc), count in counts.most_common(MOST_COMMON_FALLBACK_LIMIT)
        ]
        return FallbackStats(
            total_fallbacks=len(records),
            unique_fallbacks=unique,
            recent_fallbacks=recent,
            most_common_fallbacks=most_common,
        )

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._seen.clear()
