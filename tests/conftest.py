"""Shared fixtures: isolated settings and a session-wide QApplication."""
from __future__ import annotations

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from settings import SettingsManager, set_settings


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def settings_manager(tmp_path):
    """Point the global settings at a throwaway directory for each test."""
    sm = SettingsManager(settings_dir=tmp_path / "config")
    set_settings(sm)
    yield sm
    set_settings(None)


@pytest.fixture(scope="session")
def qapp():
    """Provide a single QApplication for the entire test session."""
    from PyQt6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication(sys.argv)
    yield app
