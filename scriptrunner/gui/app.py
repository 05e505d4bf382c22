"""
Application entry point and setup.
"""

import sys
from typing import Optional
from PyQt6.QtWidgets import QApplication
from PyQt6.QtCore import Qt

from .main_window import MainWindow


def create_app() -> QApplication:
    """Create and configure the QApplication."""
    # Enable high DPI scaling
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName("Script Runner")
    app.setOrganizationName("ScriptRunner")
    return app


def run_app(
    script_path: Optional[str] = None,
    language_id: Optional[str] = None,
    auto_run: bool = False,
) -> int:
    """Run the Script Runner application."""
    app = create_app()

    window = MainWindow(
        script_path=script_path,
        language_id=language_id,
        auto_run=auto_run,
    )
    window.show()

    return app.exec()
