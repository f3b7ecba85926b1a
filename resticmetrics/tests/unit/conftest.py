"""
Minimal conftest for unit tests.

Unit tests never talk to a real push gateway and never read the caller's
RESTICMETRICS_* environment or .env file.
"""

import os
import sys

# Ensure the package can be found without installation
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "..", ".."))

import pytest

from resticmetrics.core.config import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test with a clean environment and an empty working directory."""
    for key in list(os.environ):
        if key.startswith("RESTICMETRICS_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def backup_summary():
    """Summary of a small backup run."""
    from resticmetrics.domain.models import Summary

    return Summary(
        files_new=5,
        files_changed=2,
        files_unmodified=10,
        dirs_new=1,
        dirs_changed=0,
        dirs_unmodified=3,
        files_total=17,
        bytes_added=1024,
        bytes_added_packed=512,
        bytes_total=2048,
        duration=12.5,
    )
