# utils/__init__.py
"""General utility functions for the prompt engine."""

from .logging import setup_logging_engine

__all__ = ["setup_logging_engine"]
