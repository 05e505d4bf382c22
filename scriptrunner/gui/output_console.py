"""
Read-only output console.

Plain output is appended as text; diagnostic lines render their
'file:line:column' location as a link. Clicking a link emits
diagnostic_activated with the record so the editor can jump there.
"""

import html
from typing import List, Optional, Tuple
from PyQt6.QtWidgets import QTextBrowser, QWidget
from PyQt6.QtGui import QFont, QTextCharFormat, QTextCursor
from PyQt6.QtCore import QUrl, pyqtSignal

from scriptrunner.core.diagnostics import DiagnosticRecord, Severity
from scriptrunner.logging import get_logger

logger = get_logger(__name__)

_LINK_SCHEME = "diagnostic"

_SEVERITY_COLORS = {
    Severity.ERROR: "#c62828",
    Severity.WARNING: "#ef6c00",
    Severity.NOTE: "#1565c0",
}
_ERROR_TEXT_COLOR = "#c62828"


def _escape(text: str) -> str:
    """HTML-escape program output, keeping every space."""
    return html.escape(text).replace(" ", "&nbsp;")


class OutputConsole(QTextBrowser):
    """Console pane for a run's output."""

    diagnostic_activated = pyqtSignal(object)  # DiagnosticRecord

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._records: List[DiagnosticRecord] = []
        self._has_lines = False

        self.setOpenLinks(False)
        self.setOpenExternalLinks(False)
        self.setLineWrapMode(QTextBrowser.LineWrapMode.NoWrap)

        font = QFont()
        font.setFamilies(["JetBrains Mono", "Menlo", "Consolas", "Courier New", "monospace"])
        font.setPointSize(11)
        font.setStyleHint(QFont.StyleHint.Monospace)
        self.setFont(font)

        self.anchorClicked.connect(self._on_anchor_clicked)

    @property
    def records(self) -> List[DiagnosticRecord]:
        """Diagnostics shown since the last clear()."""
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()
        self._has_lines = False
        super().clear()

    def append_output(self, text: str) -> None:
        """Append one line of plain output."""
        self._append_html(_escape(text))

    def append_error(self, text: str) -> None:
        self._append_html(self._colored(_escape(text), _ERROR_TEXT_COLOR))

    def append_notice(self, text: str) -> None:
        """Append a bold console notice such as a termination marker."""
        self._append_html(f"<b>{_escape(text)}</b>")

    def append_diagnostic(
        self,
        record: DiagnosticRecord,
        raw_line: str,
        span: Optional[Tuple[int, int]] = None,
    ) -> None:
        """Append a diagnostic line with its location rendered as a link.

        ``span`` is the (start, end) range of the location in ``raw_line``.
        Without it the first occurrence of the record's location text is
        linked.
        """
        index = len(self._records)
        self._records.append(record)

        if span is None:
            label = record.location_label()
            start = raw_line.find(label)
            span = (start, start + len(label)) if start >= 0 else None

        if span is None or not 0 <= span[0] < span[1] <= len(raw_line):
            # Location text not found verbatim; link the whole line
            prefix, location, rest = "", raw_line, ""
        else:
            start, end = span
            prefix = raw_line[:start]
            location = raw_line[start:end]
            rest = raw_line[end:]

        color = _SEVERITY_COLORS[record.severity]
        link = f'<a href="{_LINK_SCHEME}:{index}">{_escape(location)}</a>'
        self._append_html(_escape(prefix) + link + self._colored(_escape(rest), color))

    def activate_diagnostic(self, index: int) -> bool:
        """Emit diagnostic_activated for the index-th diagnostic shown."""
        if not 0 <= index < len(self._records):
            logger.debug(f"No diagnostic at index {index}")
            return False
        self.diagnostic_activated.emit(self._records[index])
        return True

    @staticmethod
    def _colored(text: str, color: str) -> str:
        return f'<span style="color: {color};">{text}</span>' if text else ""

    def _append_html(self, fragment: str) -> None:
        cursor = self.textCursor()
        cursor.movePosition(QTextCursor.MoveOperation.End)
        if self._has_lines:
            cursor.insertBlock()
        self._has_lines = True
        # Links and colors must not bleed into the next line
        cursor.setCharFormat(QTextCharFormat())
        cursor.insertHtml(fragment)
        self.setTextCursor(cursor)
        self.ensureCursorVisible()

    def _on_anchor_clicked(self, url: QUrl) -> None:
        if url.scheme() != _LINK_SCHEME:
            return
        try:
            index = int(url.path())
        except ValueError:
            logger.debug(f"Ignoring malformed console link {url.toString()}")
            return
        self.activate_diagnostic(index)
