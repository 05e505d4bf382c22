"""Smoke tests that verify the package layout and entry points."""

import importlib


def test_all_subpackages_importable():
    """Every scriptrunner subpackage must be importable."""
    modules = [
        "scriptrunner",
        "scriptrunner.core.coordinator",
        "scriptrunner.core.supervisor",
        "scriptrunner.core.diagnostics",
        "scriptrunner.core.navigation",
        "scriptrunner.core.highlighting",
        "scriptrunner.core.settings",
        "scriptrunner.languages",
        "scriptrunner.gui.main_window",
        "scriptrunner.gui.app",
    ]
    for name in modules:
        importlib.import_module(name)


def test_console_entry_point_exists():
    from scriptrunner.__main__ import main

    assert callable(main)
