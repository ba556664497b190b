import pytest
from models.prompt_models import UserPrefs
from prompt_engine import engine as engine_module
from prompt_engine.engine import (
    ContextualPromptEngine,
    EngineConfig,
    build_contextual_prompt_header,
)
from prompt_engine.pattern_library import PatternLibrary

TONES = ["friendly", "formal", "casual", "professional", "creative", "dramatic"]
GENRES = [
    "Romance",
    "Sci-Fi",
    "Mystery",
    "Fantasy",
    "Thriller",
    "Horror",
    "Comedy",
    "Historical",
]
ARCS = ["setup", "rising", "climax", "resolution"]


@pytest.fixture
def engine():
    return ContextualPromptEngine(EngineConfig(), library=PatternLibrary())


class RecordingLogger:
    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def _record(self, level):
        def log(msg, *_a, **_kw):
            self.messages.append((level, msg))

        return log

    def __getattr__(self, level):
        return self._record(level)


def test_basic_header(engine):
    result = engine.build_contextual_prompt_header(
        {"tone": "friendly", "language": "en", "genre": "Romance"},
        {"scene": "A coffee shop", "arc": "setup", "characterName": "Emma"},
    )
    assert result.header.startswith("/* Tone: friendly | Language: en | Genre: Romance */\n")
    assert "Emma" in result.pattern_used
    assert "[CHARACTER]" not in result.pattern_used
    assert result.header.endswith(f'/* Pattern: "{result.pattern_used}" */\n\n')
    assert (result.tone, result.language, result.genre) == ("friendly", "en", "Romance")


def test_unknown_genre_climax_records_one_fallback(engine):
    prefs = {"tone": "casual", "language": "fr", "genre": "UnknownGenre"}
    context = {"scene": "A random place", "arc": "climax"}
    result = engine.build_contextual_prompt_header(prefs, context)
    assert result.pattern_used
    assert result.genre == "UnknownGenre"
    records = engine.get_diagnostics()
    assert len(records) == 1
    assert records[0].used_fallback == "DEFAULT pattern for UnknownGenre / climax"


def test_repeated_fallbacks_deduplicated_even_without_cache():
    engine = ContextualPromptEngine(
        EngineConfig(enable_memoization=False), library=PatternLibrary()
    )
    for _ in range(10):
        engine.build_contextual_prompt_header(
            {"tone": "friendly", "language": "en", "genre": "Noir"},
            {"scene": "", "arc": "rising"},
        )
    assert len(engine.get_diagnostics()) == 1
    assert engine.get_fallback_stats().unique_fallbacks == 1


def test_debug_warning_emitted_once(monkeypatch):
    from prompt_engine import diagnostics as diagnostics_module

    recorder = RecordingLogger()
    monkeypatch.setattr(diagnostics_module, "logger", recorder)
    engine = ContextualPromptEngine(
        EngineConfig(debug=True, enable_memoization=False), library=PatternLibrary()
    )
    for _ in range(3):
        engine.build_contextual_prompt_header(
            {"tone": "friendly", "language": "en", "genre": "Noir"},
            {"scene": "", "arc": "climax"},
        )
    warnings = [m for level, m in recorder.messages if level == "warning"]
    assert len(warnings) == 1
    assert warnings[0].startswith("[PromptEngine] No pattern match")


def test_debug_mode_traces_build(monkeypatch):
    recorder = RecordingLogger()
    monkeypatch.setattr(engine_module, "logger", recorder)
    engine = ContextualPromptEngine(EngineConfig(debug=True), library=PatternLibrary())
    engine.build_contextual_prompt_header(
        {"tone": "friendly", "language": "en", "genre": "Romance"},
        {"scene": "A coffee shop", "arc": "setup"},
    )
    assert any("[PromptEngine]" in msg for _, msg in recorder.messages)


def test_identical_inputs_are_deterministic(engine):
    prefs = {"tone": "friendly", "language": "en", "genre": "Romance"}
    context = {"scene": "A coffee shop", "arc": "setup"}
    results = [engine.build_contextual_prompt_header(prefs, context) for _ in range(100)]
    assert all(r == results[0] for r in results)
    assert engine.get_cache_stats().size == 1


def test_different_tone_is_not_cached(engine):
    context = {"scene": "A coffee shop", "arc": "setup"}
    first = engine.build_contextual_prompt_header(
        {"tone": "friendly", "language": "en", "genre": "Romance"}, context
    )
    second = engine.build_contextual_prompt_header(
        {"tone": "formal", "language": "en", "genre": "Romance"}, context
    )
    assert first != second
    assert engine.get_cache_stats().size == 2


def test_equivalent_raw_inputs_share_cache_entry(engine):
    context = {"scene": "x", "arc": "setup"}
    engine.build_contextual_prompt_header({"tone": "bogus", "genre": "Romance"}, context)
    engine.build_contextual_prompt_header(
        {"tone": "friendly", "language": "en", "genre": "Romance"}, context
    )
    assert engine.get_cache_stats().size == 1


def test_cache_bound_respected():
    engine = ContextualPromptEngine(
        EngineConfig(max_memoized_entries=2), library=PatternLibrary()
    )
    for i in range(3):
        engine.build_contextual_prompt_header(
            {"tone": "friendly", "language": "en", "genre": f"Genre{i}"},
            {"scene": "Test", "arc": "setup"},
        )
    assert engine.get_cache_stats().size == 2


def test_disabled_memoization_still_builds():
    engine = ContextualPromptEngine(
        EngineConfig(enable_memoization=False), library=PatternLibrary()
    )
    prefs = {"tone": "friendly", "language": "en", "genre": "Romance"}
    context = {"scene": "A coffee shop", "arc": "setup"}
    assert engine.build_contextual_prompt_header(prefs, context) == (
        engine.build_contextual_prompt_header(prefs, context)
    )
    assert engine.get_cache_stats().size == 0


def test_clear_memoization_cache(engine):
    engine.build_contextual_prompt_header(
        {"tone": "friendly", "language": "en", "genre": "Romance"},
        {"scene": "", "arc": "setup"},
    )
    assert engine.get_cache_stats().size > 0
    engine.clear_memoization_cache()
    assert engine.get_cache_stats().size == 0


@pytest.mark.parametrize(
    "prefs, context",
    [
        (None, None),
        ({}, {}),
        ("nonsense", 42),
        ({"tone": None, "language": [], "genre": {}}, {"arc": object(), "scene": 5}),
        ({"tone": "friendly", "language": "en", "genre": "Romance"}, {"arc": "unknown"}),
    ],
)
def test_never_raises_on_malformed_input(engine, prefs, context):
    result = engine.build_contextual_prompt_header(prefs, context)
    assert result.tone in TONES
    assert result.pattern_used
    assert result.header.startswith("/* Tone: ")


def test_internal_failure_returns_generic_header(engine, monkeypatch):
    def explode(*_a, **_kw):
        raise RuntimeError("library offline")

    monkeypatch.setattr(engine.resolver, "resolve", explode)
    result = engine.build_contextual_prompt_header(
        {"tone": "formal", "language": "de", "genre": "Romance"}, {"arc": "climax"}
    )
    assert result.genre == "General"
    assert result.pattern_used == "Create an engaging scene that advances the story"


def test_failing_hook_does_not_abort(engine):
    seen = []

    def bad_hook(_result):
        raise ValueError("boom")

    engine.add_hook(bad_hook)
    engine.add_hook(seen.append)
    result = engine.build_contextual_prompt_header(
        {"tone": "friendly", "language": "en", "genre": "Romance"}, {"arc": "setup"}
    )
    assert seen == [result]

    engine.remove_hook(seen.append)
    engine.build_contextual_prompt_header(
        {"tone": "friendly", "language": "en", "genre": "Romance"}, {"arc": "setup"}
    )
    assert len(seen) == 1


def test_update_config_applies_to_components(engine):
    engine.update_config(enable_memoization=False, max_fallback_logs=5, debug=True)
    assert engine.cache.enabled is False
    assert engine.diagnostics.max_entries == 5
    assert engine.config.debug is True


def test_update_config_rejects_invalid_bound(engine):
    with pytest.raises(ValueError):
        engine.update_config(max_memoized_entries=0)


def test_log_fallback_warning_uses_config_debug(monkeypatch):
    from prompt_engine import diagnostics as diagnostics_module

    recorder = RecordingLogger()
    monkeypatch.setattr(diagnostics_module, "logger", recorder)
    engine = ContextualPromptEngine(EngineConfig(debug=True), library=PatternLibrary())
    assert engine.log_fallback_warning("Noir", "setup", "manual") is True
    assert engine.log_fallback_warning("Noir", "setup", "manual", debug=True) is False
    assert len([m for lvl, m in recorder.messages if lvl == "warning"]) == 1


def test_reset_clears_state(engine):
    engine.add_hook(lambda _r: None)
    engine.build_contextual_prompt_header(
        {"tone": "friendly", "language": "en", "genre": "Noir"}, {"arc": "climax"}
    )
    engine.reset()
    assert engine.get_cache_stats().size == 0
    assert engine.get_diagnostics() == []
    assert engine._hooks == []


def test_independent_engines_do_not_share_state():
    first = ContextualPromptEngine(EngineConfig(), library=PatternLibrary())
    second = ContextualPromptEngine(EngineConfig(), library=PatternLibrary())
    first.build_contextual_prompt_header(
        {"tone": "friendly", "language": "en", "genre": "Noir"}, {"arc": "climax"}
    )
    assert second.get_cache_stats().size == 0
    assert second.get_diagnostics() == []


@pytest.mark.parametrize("genre", GENRES)
@pytest.mark.parametrize("arc", ARCS)
def test_every_builtin_genre_arc_resolves_exactly(engine, genre, arc):
    result = engine.build_contextual_prompt_header(
        {"tone": "friendly", "language": "en", "genre": genre},
        {"scene": "Test", "arc": arc},
    )
    assert result.genre == genre
    assert result.pattern_used
    assert engine.get_diagnostics() == []


def test_specific_patterns_selected(engine):
    romance = engine.build_contextual_prompt_header(
        {"tone": "friendly", "language": "en", "genre": "Romance"},
        {"scene": "Test", "arc": "climax", "character_name": "Sarah"},
    )
    assert "Reveal a secret" in romance.pattern_used
    assert "another character" in romance.pattern_used

    scifi = engine.build_contextual_prompt_header(
        {"tone": "professional", "language": "en", "genre": "Sci-Fi"},
        {"scene": "Test", "arc": "rising"},
    )
    assert "understanding of reality" in scifi.pattern_used


def test_result_accepts_pydantic_inputs(engine):
    result = engine.build_contextual_prompt_header(
        UserPrefs(tone="creative", language="ja", genre="Fantasy"),
        {"arc": "resolution"},
    )
    assert result.header.startswith("/* Tone: creative | Language: ja | Genre: Fantasy */")


def test_module_level_function_uses_default_engine():
    result = build_contextual_prompt_header(
        {"tone": "friendly", "language": "en", "genre": "Romance"},
        {"scene": "A coffee shop", "arc": "setup"},
    )
    assert "/* Tone: friendly | Language: en | Genre: Romance */" in result.header
