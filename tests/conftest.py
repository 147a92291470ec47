"""
Pytest configuration and shared fixtures for hashtree tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

from hashtree.config.runtime import set_default_config  # noqa: E402


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture(autouse=True)
def _reset_default_config():
    set_default_config(None)
    yield
    set_default_config(None)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every HASHTREE_* variable from the environment."""
    import os
    for key in list(os.environ):
        if key.startswith("HASHTREE_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
