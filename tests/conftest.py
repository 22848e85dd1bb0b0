"""Root test configuration: session-level cleanup of runtime artifacts"""

import os
import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_DIRS = [".mdblocks", "dist"]


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove staging and output directories created during the test session."""
    yield
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch):
    """Keep MDBLOCKS_* variables from the developer's shell out of the tests."""
    for name in list(os.environ):
        if name.startswith("MDBLOCKS_"):
            monkeypatch.delenv(name)
