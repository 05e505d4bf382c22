"""
Main application window.
"""

import os
from typing import Optional
from PyQt6.QtWidgets import (
    QMainWindow, QSplitter, QStatusBar, QFileDialog
)
from PyQt6.QtCore import Qt, pyqtSlot
from PyQt6.QtGui import QKeySequence, QShortcut

from scriptrunner.logging import get_logger
logger = get_logger(__name__)

from .control_bar import ControlBar
from .output_console import OutputConsole
from .run_relay import RunRelay
from .script_editor import ScriptEditor
from ..core.coordinator import DEFAULT_DRAIN_TIMEOUT, RunCoordinator
from ..core.diagnostics import DiagnosticRecord
from ..core.language import LanguageDescriptor
from ..core.settings import get_setting, set_setting
from ..core.sinks import TERMINATED_NOTICE
from ..languages import DEFAULT_LANGUAGE_ID, available_languages, language_for_path


class MainWindow(QMainWindow):
    """
    Script editor window.

    Layout:
    - Top: control bar (open, language, run/stop, status, exit code)
    - Center: vertical splitter with the editor above the output console
    - Bottom: status bar
    """

    def __init__(
        self,
        script_path: Optional[str] = None,
        language_id: Optional[str] = None,
        auto_run: bool = False,
        coordinator: Optional[RunCoordinator] = None,
    ):
        super().__init__()

        self._languages = available_languages()
        if coordinator is None:
            coordinator = RunCoordinator(
                extensions=[lang.extension for lang in self._languages.values()],
                drain_timeout=self._configured_drain_timeout(),
            )
        self._relay = RunRelay(coordinator, parent=self)

        self._setup_ui()
        self._setup_signals()
        self._setup_shortcuts()
        self._select_initial_language(language_id, script_path)

        if script_path:
            self._load_script(script_path)
            if auto_run:
                self._on_run_script()

    @staticmethod
    def _configured_drain_timeout() -> float:
        value = get_setting("drain_timeout", DEFAULT_DRAIN_TIMEOUT)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            logger.warning(f"Ignoring invalid drain_timeout setting: {value!r}")
            return DEFAULT_DRAIN_TIMEOUT
        return float(value)

    def _setup_ui(self):
        """Create the UI layout."""
        self.setWindowTitle("Script Runner")
        self.setMinimumSize(900, 700)

        splitter = QSplitter(Qt.Orientation.Vertical)
        self._editor = ScriptEditor()
        self._console = OutputConsole()
        splitter.addWidget(self._editor)
        splitter.addWidget(self._console)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 2)
        splitter.setChildrenCollapsible(False)
        self.setCentralWidget(splitter)

        self._control_bar = ControlBar()
        self._control_bar.set_languages(self._languages.values())
        self.addToolBar(self._control_bar)

        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)
        self._status_bar.showMessage("Ready")

    def _setup_signals(self):
        """Connect widgets to the run relay."""
        self._control_bar.open_clicked.connect(self._on_open_script)
        self._control_bar.run_clicked.connect(self._on_run_script)
        self._control_bar.stop_clicked.connect(self._on_stop_script)
        self._control_bar.language_changed.connect(self._on_language_changed)

        self._relay.output_received.connect(self._console.append_output)
        self._relay.diagnostic_received.connect(self._console.append_diagnostic)
        self._relay.terminated.connect(self._on_terminated)
        self._relay.failed.connect(self._on_run_failed)
        self._relay.finished.connect(self._on_run_finished)
        self._relay.running_changed.connect(self._control_bar.set_running)

        self._console.diagnostic_activated.connect(self._on_diagnostic_activated)

    def _setup_shortcuts(self):
        QShortcut(QKeySequence("F5"), self, activated=self._on_run_script)
        QShortcut(QKeySequence("Shift+F5"), self, activated=self._on_stop_script)
        QShortcut(QKeySequence.StandardKey.Open, self, activated=self._on_open_script)

    def _select_initial_language(self, language_id: Optional[str], script_path: Optional[str]):
        if language_id is None and script_path:
            detected = language_for_path(script_path)
            language_id = detected.id if detected is not None else None
        if language_id is None:
            language_id = get_setting("language", DEFAULT_LANGUAGE_ID)
        if language_id not in self._languages:
            logger.warning(f"Unknown language '{language_id}', using {DEFAULT_LANGUAGE_ID}")
            language_id = DEFAULT_LANGUAGE_ID

        self._control_bar.select_language(language_id)
        self._editor.set_language(self._languages[language_id])

    @property
    def editor(self) -> ScriptEditor:
        return self._editor

    @property
    def console(self) -> OutputConsole:
        return self._console

    @property
    def control_bar(self) -> ControlBar:
        return self._control_bar

    @property
    def relay(self) -> RunRelay:
        return self._relay

    def _load_script(self, path: str) -> bool:
        if not self._editor.load_file(path):
            self._status_bar.showMessage(f"Could not open {path}")
            return False

        detected = language_for_path(path)
        if detected is not None:
            self._control_bar.select_language(detected.id)
        self.setWindowTitle(f"Script Runner - {os.path.basename(path)}")
        self._status_bar.showMessage(f"Loaded: {path}")
        return True

    @pyqtSlot()
    def _on_open_script(self):
        """Open file dialog to select a script."""
        patterns = " ".join(f"*.{lang.extension}" for lang in self._languages.values())
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Open Script",
            "",
            f"Scripts ({patterns});;All Files (*)"
        )
        if path:
            self._load_script(path)

    @pyqtSlot()
    def _on_run_script(self):
        language = self._control_bar.current_language()
        if language is None or self._relay.is_running:
            return

        self._console.clear()
        if self._relay.run(self._editor.source_text(), language):
            self._status_bar.showMessage(f"Running {language.display_name} script...")

    @pyqtSlot()
    def _on_stop_script(self):
        if self._relay.is_running:
            self._relay.stop()

    @pyqtSlot(object)
    def _on_language_changed(self, language: LanguageDescriptor):
        self._editor.set_language(language)
        try:
            set_setting("language", language.id)
        except OSError as e:
            logger.warning(f"Could not save language setting: {e}")
        self._status_bar.showMessage(f"Language: {language.display_name}")

    def _on_terminated(self):
        self._console.append_notice(TERMINATED_NOTICE)
        self._status_bar.showMessage("Stopping...")

    def _on_run_failed(self, kind: str, message: str):
        self._console.append_error(message)
        self._control_bar.set_failure(message)
        self._status_bar.showMessage(f"Run failed ({kind})")

    def _on_run_finished(self, exit_code: int):
        self._control_bar.set_exit_code(exit_code)
        self._status_bar.showMessage(f"Finished with exit code {exit_code}")

    def _on_diagnostic_activated(self, record: DiagnosticRecord):
        logger.debug(f"Navigating to {record.location_label()}")
        self._editor.navigate_to(record)
        self._status_bar.showMessage(f"{record.severity.value}:{record.message}")

    def closeEvent(self, event):
        """Handle window close."""
        self._relay.shutdown()
        super().closeEvent(event)
