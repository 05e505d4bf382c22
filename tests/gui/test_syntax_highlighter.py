"""Unit tests for ScriptHighlighter block-comment state and formats."""

import pytest
from PyQt6.QtGui import QTextDocument

from scriptrunner.gui.syntax_highlighter import ScriptHighlighter
from scriptrunner.languages import KEYWORDS


@pytest.fixture
def document(qapp):
    return QTextDocument()


def formatted_ranges(block):
    return [(r.start, r.length) for r in block.layout().formats()]


class TestScriptHighlighter:
    """Highlighting applied per block through QSyntaxHighlighter."""

    def test_keyword_and_string_formatted(self, document):
        highlighter = ScriptHighlighter(document, KEYWORDS["swift"])
        document.setPlainText('let s = "x"')

        assert formatted_ranges(document.firstBlock()) == [(0, 3), (8, 3)]
        assert highlighter.document() is document

    def test_block_comment_state_carries_over(self, document):
        ScriptHighlighter(document, KEYWORDS["swift"])
        document.setPlainText("/* open\nstill inside\nclosed */ let")

        first = document.findBlockByNumber(0)
        middle = document.findBlockByNumber(1)
        last = document.findBlockByNumber(2)
        assert first.userState() == 1
        assert middle.userState() == 1
        assert last.userState() == 0
        assert formatted_ranges(middle) == [(0, len("still inside"))]
        assert formatted_ranges(last) == [(0, 9), (10, 3)]

    def test_switching_keywords_rehighlights(self, document):
        highlighter = ScriptHighlighter(document, KEYWORDS["swift"])
        document.setPlainText("fun main")
        assert formatted_ranges(document.firstBlock()) == []

        highlighter.set_keywords(KEYWORDS["kotlin"])
        assert formatted_ranges(document.firstBlock()) == [(0, 3)]
