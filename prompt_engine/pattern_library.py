# prompt_engine/pattern_library.py
"""Static genre x arc pattern table consulted by the resolver."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

import structlog
from yaml_parser import load_yaml_file

from .constants import DEFAULT_GENRE_KEY, SETUP_ARC
from .prompt_renderer import render_prompt

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PatternEntry:
    """One template string for a genre at a given arc stage."""

    genre: str
    arc: str
    pattern: str
    description: str | None = None


BUILTIN_PATTERNS: tuple[PatternEntry, ...] = (
    PatternEntry(
        "Romance",
        "setup",
        "Introduce [CHARACTER] and create a moment of unexpected connection",
        "Establish romantic tension and character introduction",
    ),
    PatternEntry(
        "Romance",
        "rising",
        "Create a conflict that forces [CHARACTER] to question their feelings",
        "Build romantic tension through obstacles",
    ),
    PatternEntry(
        "Romance",
        "climax",
        "Reveal a secret that [CHARACTER] must hide from [OTHER]",
        "High emotional stakes and revelation",
    ),
    PatternEntry(
        "Romance",
        "resolution",
        "Show [CHARACTER] making a choice that defines their relationship",
        "Resolution and commitment",
    ),
    PatternEntry(
        "Sci-Fi",
        "setup",
        "Introduce a technological element that changes [CHARACTER]'s world",
        "Establish futuristic setting and technology",
    ),
    PatternEntry(
        "Sci-Fi",
        "rising",
        "Create a discovery that challenges [CHARACTER]'s understanding of reality",
        "Build tension through scientific revelation",
    ),
    PatternEntry(
        "Sci-Fi",
        "climax",
        "Force [CHARACTER] to make a choice between technology and humanity",
        "High stakes technological dilemma",
    ),
    PatternEntry(
        "Sci-Fi",
        "resolution",
        "Show [CHARACTER] integrating technology with human values",
        "Synthesis of technology and humanity",
    ),
    PatternEntry(
        "Mystery",
        "setup",
        "Present [CHARACTER] with an unexplained event that demands investigation",
        "Establish mystery and investigative elements",
    ),
    PatternEntry(
        "Mystery",
        "rising",
        "Reveal a clue that [CHARACTER] must interpret while danger grows",
        "Build tension through investigation",
    ),
    PatternEntry(
        "Mystery",
        "climax",
        "Confront [CHARACTER] with the truth they've been seeking",
        "Revelation and confrontation",
    ),
    PatternEntry(
        "Mystery",
        "resolution",
        "Show [CHARACTER] dealing with the consequences of their discovery",
        "Resolution and aftermath",
    ),
    PatternEntry(
        "Fantasy",
        "setup",
        "Introduce [CHARACTER] to a magical element that changes their destiny",
        "Establish magical world and character's role",
    ),
    PatternEntry(
        "Fantasy",
        "rising",
        "Create a magical challenge that tests [CHARACTER]'s abilities",
        "Build tension through magical obstacles",
    ),
    PatternEntry(
        "Fantasy",
        "climax",
        "Force [CHARACTER] to use their magic in an unexpected way",
        "Magical revelation and power",
    ),
    PatternEntry(
        "Fantasy",
        "resolution",
        "Show [CHARACTER] mastering their magical abilities",
        "Mastery and resolution",
    ),
    PatternEntry(
        "Thriller",
        "setup",
        "Place [CHARACTER] in a situation where their safety is compromised",
        "Establish danger and stakes",
    ),
    PatternEntry(
        "Thriller",
        "rising",
        "Create a trap that [CHARACTER] must escape while time runs out",
        "Build tension through danger",
    ),
    PatternEntry(
        "Thriller",
        "climax",
        "Force [CHARACTER] to face their greatest fear to survive",
        "Ultimate confrontation and survival",
    ),
    PatternEntry(
        "Thriller",
        "resolution",
        "Show [CHARACTER] dealing with the psychological aftermath",
        "Recovery and consequences",
    ),
    PatternEntry(
        "Horror",
        "setup",
        "Introduce [CHARACTER] to something that defies their understanding",
        "Establish supernatural or horrific elements",
    ),
    PatternEntry(
        "Horror",
        "rising",
        "Create a situation where [CHARACTER]'s reality is questioned",
        "Build tension through psychological horror",
    ),
    PatternEntry(
        "Horror",
        "climax",
        "Confront [CHARACTER] with the source of their terror",
        "Direct confrontation with horror",
    ),
    PatternEntry(
        "Horror",
        "resolution",
        "Show [CHARACTER] changed by their encounter with horror",
        "Transformation and aftermath",
    ),
    PatternEntry(
        "Comedy",
        "setup",
        "Place [CHARACTER] in an awkward situation they must navigate",
        "Establish comedic premise and character",
    ),
    PatternEntry(
        "Comedy",
        "rising",
        "Create a misunderstanding that [CHARACTER] must resolve",
        "Build humor through escalating confusion",
    ),
    PatternEntry(
        "Comedy",
        "climax",
        "Force [CHARACTER] to make a choice that reveals the truth",
        "Comedic revelation and resolution",
    ),
    PatternEntry(
        "Comedy",
        "resolution",
        "Show [CHARACTER] learning from their comedic misadventure",
        "Growth and humor",
    ),
    PatternEntry(
        "Historical",
        "setup",
        "Introduce [CHARACTER] to a historical event that will change their life",
        "Establish historical setting and stakes",
    ),
    PatternEntry(
        "Historical",
        "rising",
        "Create a conflict that reflects the historical period's tensions",
        "Build tension through historical context",
    ),
    PatternEntry(
        "Historical",
        "climax",
        "Force [CHARACTER] to make a choice that impacts history",
        "Historical significance and choice",
    ),
    PatternEntry(
        "Historical",
        "resolution",
        "Show [CHARACTER] dealing with the consequences of their historical role",
        "Historical impact and legacy",
    ),
    PatternEntry(
        DEFAULT_GENRE_KEY,
        "setup",
        "Introduce [CHARACTER] and establish the central conflict",
        "Generic setup pattern",
    ),
    PatternEntry(
        DEFAULT_GENRE_KEY,
        "rising",
        "Create a challenge that [CHARACTER] must overcome",
        "Generic rising action pattern",
    ),
    PatternEntry(
        DEFAULT_GENRE_KEY,
        "climax",
        "Force [CHARACTER] to make a difficult choice",
        "Generic climax pattern",
    ),
    PatternEntry(
        DEFAULT_GENRE_KEY,
        "resolution",
        "Show [CHARACTER] dealing with the consequences of their choice",
        "Generic resolution pattern",
    ),
)


def _key(genre: str, arc: str) -> tuple[str, str]:
    return genre.lower(), arc.lower()


class PatternLibrary:
    """Read-only lookup of (genre, arc) -> pattern string.

    Matching is case-insensitive. Later entries override earlier ones with the
    same key, which is how YAML files extend or replace the built-in table.
    """

    def __init__(
        self, entries: tuple[PatternEntry, ...] | list[PatternEntry] = BUILTIN_PATTERNS
    ) -> None:
        self._entries: dict[tuple[str, str], PatternEntry] = {}
        for entry in entries:
            self._entries[_key(entry.genre, entry.arc)] = entry
        self._lookup_cache: dict[tuple[str, str], str] = {}
        self._hits = 0
        self._lock = threading.Lock()

    @classmethod
    def from_yaml(cls, filepath: str, include_builtin: bool = True) -> PatternLibrary:
        """Build a library from a YAML file with a top-level ``patterns`` list."""
        entries: list[PatternEntry] = list(BUILTIN_PATTERNS) if include_builtin else []
        data = load_yaml_file(filepath)
        if data is None:
            logger.warning(
                "Pattern library file unusable. Using built-in patterns.",
                file_path=filepath,
            )
            return cls(list(BUILTIN_PATTERNS))

        raw_patterns = data.get("patterns", [])
        if not isinstance(raw_patterns, list):
            logger.warning(
                "Pattern library 'patterns' is not a list. Using built-in patterns.",
                file_path=filepath,
            )
            return cls(list(BUILTIN_PATTERNS))

        loaded = 0
        for item in raw_patterns:
            entry = cls._entry_from_mapping(item)
            if entry is None:
                logger.warning(
                    "Skipping malformed pattern entry", file_path=filepath, entry=item
                )
                continue
            entries.append(entry)
            loaded += 1
        logger.info("Loaded pattern library file", file_path=filepath, entries=loaded)
        return cls(entries)

    @staticmethod
    def _entry_from_mapping(item: Any) -> PatternEntry | None:
        if not isinstance(item, dict):
            return None
        genre, arc, pattern = item.get("genre"), item.get("arc"), item.get("pattern")
        if not all(isinstance(v, str) and v for v in (genre, arc, pattern)):
            return None
        description = item.get("description")
        return PatternEntry(
            genre=genre,
            arc=arc,
            pattern=pattern,
            description=description if isinstance(description, str) else None,
        )

    def get_pattern(self, genre: str, arc: str) -> str | None:
        """Return the pattern for ``genre`` at ``arc`` or ``None``."""
        cache_key = (genre, arc)
        with self._lock:
            cached = self._lookup_cache.get(cache_key)
            if cached is not None:
                self._hits += 1
                return cached

            entry = self._entries.get(_key(genre, arc))
            if entry is None:
                return None
            self._lookup_cache[cache_key] = entry.pattern
            return entry.pattern

    def has_pattern_for(self, genre: str, arc: str) -> bool:
        return _key(genre, arc) in self._entries

    def get_patterns_for_genre(self, genre: str) -> list[PatternEntry]:
        return [e for e in self._entries.values() if e.genre.lower() == genre.lower()]

    def get_available_genres(self) -> list[str]:
        """Genres with at least one pattern, excluding the generic namespace."""
        genres: dict[str, None] = {}
        for entry in self._entries.values():
            if entry.genre != DEFAULT_GENRE_KEY:
                genres.setdefault(entry.genre, None)
        return list(genres)

    def get_available_arcs(self) -> list[str]:
        arcs: dict[str, None] = {}
        for entry in self._entries.values():
            arcs.setdefault(entry.arc, None)
        return list(arcs)

    def get_pattern_description(self, genre: str, arc: str) -> str | None:
        entry = self._entries.get(_key(genre, arc))
        return entry.description if entry else None

    def clear_pattern_cache(self) -> None:
        with self._lock:
            self._lookup_cache.clear()
            self._hits = 0

    def get_cache_stats(self) -> dict[str, int]:
        with self._lock:
            return {"size": len(self._lookup_cache), "hits": self._hits}

    def get_prompt_for(
        self,
        genre: str,
        arc: str,
        tone: str | None = None,
        memory: bool = False,
        copilot: bool = False,
        language: str | None = None,
    ) -> str:
        """Render a complete prompt block around the pattern for ``genre``/``arc``."""
        pattern = (
            self.get_pattern(genre, arc)
            or self.get_pattern(DEFAULT_GENRE_KEY, arc)
            or self.get_pattern(DEFAULT_GENRE_KEY, SETUP_ARC)
            or "Create engaging content for [CHARACTER]"
        )
        return render_prompt(
            "pattern_prompt.j2",
            {
                "genre": genre,
                "pattern": pattern,
                "tone": tone,
                "memory": memory,
                "copilot": copilot,
                "language": language,
            },
        )
