"""
Control bar with Run/Stop buttons, language selection and run status.
"""

from typing import Iterable, Optional
from PyQt6.QtWidgets import QComboBox, QLabel, QToolBar, QToolButton, QWidget
from PyQt6.QtCore import pyqtSignal

from scriptrunner.core.language import LanguageDescriptor
from scriptrunner.core.sinks import format_exit_status

SUCCESS_COLOR = "#2e7d32"
FAILURE_COLOR = "#c62828"


class ControlBar(QToolBar):
    """
    Toolbar with run controls for the script editor.
    """

    # Signals
    open_clicked = pyqtSignal()
    run_clicked = pyqtSignal()
    stop_clicked = pyqtSignal()
    language_changed = pyqtSignal(object)  # LanguageDescriptor

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._is_running = False
        self._setup_ui()

    def _setup_ui(self):
        """Create the toolbar UI."""
        self.setMovable(False)

        self._open_btn = QToolButton()
        self._open_btn.setText("Open")
        self._open_btn.setToolTip("Open script (Ctrl+O)")
        self._open_btn.clicked.connect(self.open_clicked.emit)
        self.addWidget(self._open_btn)

        self.addSeparator()

        self._language_combo = QComboBox()
        self._language_combo.setObjectName("languageCombo")
        self._language_combo.setToolTip("Script language")
        self._language_combo.currentIndexChanged.connect(self._on_language_index_changed)
        self.addWidget(self._language_combo)

        self.addSeparator()

        self._run_btn = QToolButton()
        self._run_btn.setText("Run")
        self._run_btn.setObjectName("runButton")
        self._run_btn.setToolTip("Run script (F5)")
        self._run_btn.clicked.connect(self.run_clicked.emit)
        self.addWidget(self._run_btn)

        self._stop_btn = QToolButton()
        self._stop_btn.setText("Stop")
        self._stop_btn.setObjectName("stopButton")
        self._stop_btn.setToolTip("Stop execution (Shift+F5)")
        self._stop_btn.setEnabled(False)
        self._stop_btn.clicked.connect(self.stop_clicked.emit)
        self.addWidget(self._stop_btn)

        self.addSeparator()

        self._status_label = QLabel("Idle")
        self._status_label.setObjectName("statusLabel")
        self.addWidget(self._status_label)

        self.addSeparator()

        self._exit_label = QLabel("")
        self._exit_label.setObjectName("exitLabel")
        self.addWidget(self._exit_label)

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def status_text(self) -> str:
        return self._status_label.text()

    @property
    def exit_text(self) -> str:
        return self._exit_label.text()

    def set_languages(self, languages: Iterable[LanguageDescriptor], current_id: Optional[str] = None):
        """Fill the language combo; selects ``current_id`` when present."""
        self._language_combo.blockSignals(True)
        self._language_combo.clear()
        for language in languages:
            self._language_combo.addItem(language.display_name, language)
        if current_id is not None:
            for index in range(self._language_combo.count()):
                if self._language_combo.itemData(index).id == current_id:
                    self._language_combo.setCurrentIndex(index)
                    break
        self._language_combo.blockSignals(False)

    def current_language(self) -> Optional[LanguageDescriptor]:
        return self._language_combo.currentData()

    def select_language(self, language_id: str) -> bool:
        """Select a language by id; emits language_changed if it changes."""
        for index in range(self._language_combo.count()):
            if self._language_combo.itemData(index).id == language_id:
                self._language_combo.setCurrentIndex(index)
                return True
        return False

    def set_running(self, running: bool):
        """Update UI when a script starts/stops running."""
        self._is_running = running
        self._run_btn.setEnabled(not running)
        self._stop_btn.setEnabled(running)
        self._language_combo.setEnabled(not running)
        if running:
            self._status_label.setText("Running")
            self._exit_label.setText("")
            self._exit_label.setToolTip("")
            self._exit_label.setStyleSheet("")
        else:
            self._status_label.setText("Idle")

    def set_exit_code(self, exit_code: int):
        """Show the finished run's exit code."""
        color = SUCCESS_COLOR if exit_code == 0 else FAILURE_COLOR
        self._exit_label.setText(format_exit_status(exit_code))
        self._exit_label.setStyleSheet(f"color: {color}; font-weight: bold;")

    def set_failure(self, message: str):
        """Show that the run never produced an exit code."""
        self._exit_label.setText("✗ Failed")
        self._exit_label.setToolTip(message)
        self._exit_label.setStyleSheet(f"color: {FAILURE_COLOR}; font-weight: bold;")

    def _on_language_index_changed(self, index: int):
        language = self._language_combo.itemData(index)
        if language is not None:
            self.language_changed.emit(language)
