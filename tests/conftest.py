# tests/conftest.py
import os
import sys

import pytest
import structlog

# Ensure repository root is on PYTHONPATH for tests
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

# Keep a developer's .env from changing engine defaults during tests
os.environ.setdefault("PROMPT_ENGINE_DEBUG", "false")
os.environ.setdefault("ENABLE_MEMOIZATION", "true")
os.environ.setdefault("MAX_MEMOIZED_ENTRIES", "100")
os.environ.setdefault("MAX_FALLBACK_LOGS", "1000")


@pytest.fixture(autouse=True)
def structlog_to_stderr():
    """Unconfigured structlog prints to stdout; keep stdout for headers only."""
    structlog.configure(logger_factory=structlog.PrintLoggerFactory(file=sys.stderr))
    yield
