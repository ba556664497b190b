# utils/logging.py

"""Logging helpers for the prompt engine.

Everything is written to stderr or a log file. stdout carries only the
generated header, which callers prepend to prompts verbatim.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys

import structlog
from config import settings
from rich.console import Console
from rich.logging import RichHandler

logger = structlog.get_logger(__name__)

ENGINE_LOGGER_NAME = "prompt_engine"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5


__all__ = ["ENGINE_LOGGER_NAME", "setup_logging_engine"]


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            # Drop per-call debug traces before any rendering work is done.
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _resolve_log_path(log_file: str) -> str:
    if os.path.isabs(log_file):
        return log_file
    return os.path.join(settings.LOG_DIR, log_file)


def _file_handler(log_file: str) -> logging.Handler | None:
    file_path = _resolve_log_path(log_file)
    try:
        log_dir = os.path.dirname(file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            file_path,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            mode="a",
            encoding="utf-8",
        )
    except Exception as e:  # pragma: no cover - path issues
        logger.error("Error setting up file logger: %s", e)
        return None
    handler.setFormatter(
        logging.Formatter(settings.LOG_FORMAT, datefmt=settings.LOG_DATE_FORMAT)
    )
    return handler


def _console_handler() -> logging.Handler:
    if settings.ENABLE_RICH_PROGRESS:
        return RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
            markup=False,
        )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(settings.LOG_FORMAT, datefmt=settings.LOG_DATE_FORMAT)
    )
    return handler


def setup_logging_engine() -> None:
    """Route structlog through stdlib logging to stderr and an optional file.

    ``ENGINE_LOG_LEVEL`` sets the root level. ``PROMPT_ENGINE_LOG_LEVEL`` sets
    the level of the ``prompt_engine.*`` loggers on its own, so the pipeline's
    debug traces can be switched on without flooding the rest of the process.
    """
    _configure_structlog()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(settings.LOG_LEVEL_STR)
    logging.getLogger(ENGINE_LOGGER_NAME).setLevel(settings.PROMPT_ENGINE_LOG_LEVEL)

    if settings.LOG_FILE:
        file_handler = _file_handler(settings.LOG_FILE)
        if file_handler is not None:
            root_logger.addHandler(file_handler)
    root_logger.addHandler(_console_handler())

    logger.info(
        "Prompt engine logging setup complete.",
        log_level=settings.LOG_LEVEL_STR,
        engine_log_level=settings.PROMPT_ENGINE_LOG_LEVEL,
    )
