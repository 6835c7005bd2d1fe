"""
Root test configuration and fixtures for assigngroups.

Note: sys.path manipulation is handled here so the package imports without
an editable install.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from assigngroups.settings import Settings, get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep ASSIGNGROUPS_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("ASSIGNGROUPS_") or key == "LOG_LEVEL":
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of any .env file."""
    return Settings(_env_file=None)
