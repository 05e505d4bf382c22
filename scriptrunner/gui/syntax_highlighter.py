"""
Keyword/string/comment highlighter for the script editor.

Color scheme:
- Keywords: Blue bold (#0000ff)
- Strings: Green (#008000)
- Numbers: Dark cyan (#008080)
- Comments: Gray italic (#808080)
"""

from typing import AbstractSet, Dict
from PyQt6.QtGui import (
    QSyntaxHighlighter, QTextDocument, QTextCharFormat, QColor, QFont
)

from ..core.highlighting import COMMENT, KEYWORD, NUMBER, STRING, tokenize_line

# Block states
_NORMAL = 0
_IN_BLOCK_COMMENT = 1


class ScriptHighlighter(QSyntaxHighlighter):
    """Applies core.highlighting spans to a QTextDocument, one block at a time.

    Block comments spanning several lines are tracked through the block
    state, the same way Qt highlighters track multi-line strings.
    """

    def __init__(self, document: QTextDocument, keywords: AbstractSet[str] = frozenset()):
        super().__init__(document)
        self._keywords = frozenset(keywords)
        self._formats = self._create_formats()

    def set_keywords(self, keywords: AbstractSet[str]) -> None:
        """Switch keyword table (language change) and re-highlight."""
        self._keywords = frozenset(keywords)
        self.rehighlight()

    @staticmethod
    def _create_formats() -> Dict[str, QTextCharFormat]:
        formats = {}

        keyword_format = QTextCharFormat()
        keyword_format.setForeground(QColor("#0000ff"))
        keyword_format.setFontWeight(QFont.Weight.Bold)
        formats[KEYWORD] = keyword_format

        string_format = QTextCharFormat()
        string_format.setForeground(QColor("#008000"))
        formats[STRING] = string_format

        number_format = QTextCharFormat()
        number_format.setForeground(QColor("#008080"))
        formats[NUMBER] = number_format

        comment_format = QTextCharFormat()
        comment_format.setForeground(QColor("#808080"))
        comment_format.setFontItalic(True)
        formats[COMMENT] = comment_format

        return formats

    def highlightBlock(self, text: str) -> None:
        """Apply syntax highlighting to a block of text."""
        in_comment = self.previousBlockState() == _IN_BLOCK_COMMENT
        spans, still_open = tokenize_line(text, self._keywords, in_comment)
        for span in spans:
            self.setFormat(span.start, span.length, self._formats[span.kind])
        self.setCurrentBlockState(_IN_BLOCK_COMMENT if still_open else _NORMAL)
