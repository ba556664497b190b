# config.py
"""Configuration settings for the contextual prompt engine.
Uses Pydantic BaseSettings for automatic environment variable loading.
"""

from __future__ import annotations

import os

import structlog
from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

logger = structlog.get_logger()


class EngineSettings(BaseSettings):
    """Full configuration for the prompt engine."""

    # Engine behaviour
    PROMPT_ENGINE_DEBUG: bool = False
    ENABLE_MEMOIZATION: bool = True
    MAX_MEMOIZED_ENTRIES: int = 100
    ENABLE_FALLBACK_LOGGING: bool = True
    MAX_FALLBACK_LOGS: int = 1000

    # Optional YAML file with extra or overriding genre/arc patterns
    PATTERN_LIBRARY_FILE: str | None = None

    # Logging & UI
    LOG_LEVEL_STR: str = Field("INFO", alias="ENGINE_LOG_LEVEL")
    # Level for the prompt_engine.* loggers only (per-call pipeline traces)
    PROMPT_ENGINE_LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = (
        "%(asctime)s - %(levelname)s - [%(name)s:%(funcName)s:%(lineno)d] - %(message)s"
    )
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    LOG_DIR: str = "engine_output"
    LOG_FILE: str | None = None
    ENABLE_RICH_PROGRESS: bool = True

    @model_validator(mode="after")
    def clamp_bounds(self) -> EngineSettings:
        if self.MAX_MEMOIZED_ENTRIES < 1:
            logger.warning(
                "MAX_MEMOIZED_ENTRIES must be positive. Using 1.",
                configured=self.MAX_MEMOIZED_ENTRIES,
            )
            self.MAX_MEMOIZED_ENTRIES = 1
        if self.MAX_FALLBACK_LOGS < 1:
            logger.warning(
                "MAX_FALLBACK_LOGS must be positive. Using 1.",
                configured=self.MAX_FALLBACK_LOGS,
            )
            self.MAX_FALLBACK_LOGS = 1
        return self

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", extra="ignore", populate_by_name=True
    )


settings = EngineSettings()

PATTERN_LIBRARY_FILE_PATH = (
    os.path.abspath(settings.PATTERN_LIBRARY_FILE)
    if settings.PATTERN_LIBRARY_FILE
    else None
)
