"""
Script editor widget.

This widget provides:
- Plain text editing with a monospace font
- Keyword/string/comment highlighting for the selected language
- Caret positioning and selection for diagnostic navigation
"""

import os
from typing import Optional
from PyQt6.QtWidgets import QPlainTextEdit, QWidget
from PyQt6.QtGui import QFont, QTextCursor

from scriptrunner.core.diagnostics import DiagnosticRecord
from scriptrunner.core.language import LanguageDescriptor
from scriptrunner.core.navigation import navigate
from scriptrunner.gui.syntax_highlighter import ScriptHighlighter
from scriptrunner.languages import keywords_for
from scriptrunner.logging import get_logger

logger = get_logger(__name__)


class ScriptEditor(QPlainTextEdit):
    """QPlainTextEdit that satisfies the navigation EditorSurface protocol."""

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._file_path: Optional[str] = None
        self._language: Optional[LanguageDescriptor] = None
        self._highlighter = ScriptHighlighter(self.document())
        self._setup_ui()

    def _setup_ui(self) -> None:
        # Code should scroll horizontally, not wrap
        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)

        font = QFont()
        font.setFamilies(["JetBrains Mono", "Menlo", "Consolas", "Courier New", "monospace"])
        font.setPointSize(12)
        font.setStyleHint(QFont.StyleHint.Monospace)
        font.setFixedPitch(True)
        self.setFont(font)
        self.setTabStopDistance(4 * self.fontMetrics().horizontalAdvance(' '))

    @property
    def file_path(self) -> Optional[str]:
        """Return the currently loaded file path."""
        return self._file_path

    @property
    def language(self) -> Optional[LanguageDescriptor]:
        return self._language

    def set_language(self, language: LanguageDescriptor) -> None:
        """Switch highlighting to ``language``'s keyword table."""
        self._language = language
        self._highlighter.set_keywords(keywords_for(language.id))

    def load_file(self, file_path: str) -> bool:
        """Load a script file into the editor.

        Returns:
            True if file was loaded successfully
        """
        file_path = os.path.abspath(file_path)
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                source = f.read()
        except (IOError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot load {file_path}: {e}")
            return False

        self._file_path = file_path
        self.setPlainText(source)
        return True

    def source_text(self) -> str:
        return self.toPlainText()

    # ── EditorSurface ─────────────────────────────────────────────────────

    def line_count(self) -> int:
        return self.document().blockCount()

    def line_length(self, index: int) -> int:
        block = self.document().findBlockByNumber(index)
        if not block.isValid():
            return 0
        # block.length() counts the trailing separator
        return block.length() - 1

    def set_caret(self, position: int) -> None:
        cursor = self.textCursor()
        cursor.setPosition(self._clamp(position))
        self.setTextCursor(cursor)
        self.ensureCursorVisible()
        self.setFocus()

    def select_range(self, start: int, end: int) -> None:
        cursor = self.textCursor()
        cursor.setPosition(self._clamp(start))
        cursor.setPosition(self._clamp(end), QTextCursor.MoveMode.KeepAnchor)
        self.setTextCursor(cursor)

    def _clamp(self, position: int) -> int:
        last = max(self.document().characterCount() - 1, 0)
        return min(max(position, 0), last)

    def navigate_to(self, record: DiagnosticRecord) -> int:
        """Move the caret to a diagnostic's location and select it."""
        return navigate(self, record.line, record.column)
