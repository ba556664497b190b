# prompt_engine/constants.py
"""Allow-lists, defaults and reserved keys shared by the prompt engine."""

from models.prompt_models import ArcStage

# Tones accepted from writer preferences. Anything else becomes DEFAULT_TONE.
SAFE_TONES = (
    "friendly",
    "formal",
    "casual",
    "professional",
    "creative",
    "dramatic",
)
DEFAULT_TONE = "friendly"

# ISO 639-1 codes supported by the generation backend.
SAFE_LANGUAGES = ("en", "es", "fr", "de", "it", "pt", "ja", "ko", "zh")
DEFAULT_LANGUAGE = "en"

DEFAULT_GENRE = "General"

ARC_STAGES = tuple(stage.value for stage in ArcStage)
SETUP_ARC = ArcStage.SETUP.value

# Reserved genre namespace holding the generic patterns
DEFAULT_GENRE_KEY = "DEFAULT"

# Used when even the generic namespace has nothing to offer
GENERIC_PATTERN = "Create an engaging scene that advances the story"

# Placeholder markers and what they become when a name is known
CHARACTER_MARKER = "[CHARACTER]"
THEY_MARKER = "[THEY]"
THEIR_MARKER = "[THEIR]"
OTHER_MARKER = "[OTHER]"

OTHER_CHARACTER_PHRASE = "another character"
UNNAMED_CHARACTER_PHRASE = "the main character"

FALLBACK_WARNING_PREFIX = "[PromptEngine]"
RECENT_FALLBACK_WINDOW_SECONDS = 24 * 60 * 60
MOST_COMMON_FALLBACK_LIMIT = 10
