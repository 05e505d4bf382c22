"""Shared test fixtures for the ScriptRunner test suite.

Provides a centralized QApplication, a Python-backed language so process
tests do not need a Swift or Kotlin toolchain, and settings isolation.
"""

import os
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtWidgets import QApplication

from scriptrunner.core import settings
from scriptrunner.core.language import SCRIPT_PLACEHOLDER, LanguageDescriptor
from scriptrunner.core.sinks import EventChannel


@pytest.fixture(scope="session")
def qapp():
    """Session-scoped QApplication shared by all tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the settings file at a per-test directory."""
    settings_dir = tmp_path / "config"
    monkeypatch.setattr(settings, "SETTINGS_DIR", settings_dir)
    monkeypatch.setattr(settings, "SETTINGS_PATH", settings_dir / "settings.json")
    return settings_dir / "settings.json"


@pytest.fixture
def python_language():
    """The running interpreter as a script toolchain (unbuffered output)."""
    return LanguageDescriptor(
        id="python",
        display_name="Python",
        extension="py",
        command_template=(sys.executable, "-u", SCRIPT_PLACEHOLDER),
    )


@pytest.fixture
def missing_language():
    """A language whose toolchain executable does not exist."""
    return LanguageDescriptor(
        id="missing",
        display_name="Missing",
        extension="swift",
        command_template=("/nonexistent/toolchain-binary", SCRIPT_PLACEHOLDER),
    )


@pytest.fixture
def channel():
    return EventChannel()
