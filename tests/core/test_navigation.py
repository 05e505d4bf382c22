from scriptrunner.core.navigation import (
    SELECTION_WIDTH, navigate, resolve_offset, selection_range,
)


class FakeEditor:
    """Records caret/selection calls over a fixed document."""

    def __init__(self, text: str):
        self.lines = text.split("\n")
        self.caret = None
        self.selection = None

    def line_count(self) -> int:
        return len(self.lines)

    def line_length(self, index: int) -> int:
        return len(self.lines[index])

    def set_caret(self, position: int) -> None:
        self.caret = position

    def select_range(self, start: int, end: int) -> None:
        self.selection = (start, end)


def test_offset_sums_previous_lines_plus_separators() -> None:
    # Line 3 starts at 6 + 6, column 10 clamps to the 3-char line
    assert resolve_offset(3, 10, [5, 5, 3]) == 15


def test_offset_first_line() -> None:
    assert resolve_offset(1, 1, [5, 5, 3]) == 0
    assert resolve_offset(1, 3, [5, 5, 3]) == 2


def test_line_past_end_clamps_to_last_line() -> None:
    assert resolve_offset(99, 1, [5, 5, 3]) == 12


def test_line_and_column_below_one_clamp() -> None:
    assert resolve_offset(0, 0, [5, 5, 3]) == 0
    assert resolve_offset(2, -4, [5, 5, 3]) == 6


def test_empty_document() -> None:
    assert resolve_offset(5, 5, []) == 0
    assert selection_range(5, 5, []) == (0, 0)


def test_selection_width_limited_by_line() -> None:
    assert selection_range(1, 1, [5]) == (0, SELECTION_WIDTH)
    assert selection_range(1, 4, [5]) == (3, 5)
    assert selection_range(1, 6, [5]) == (5, 5)


def test_navigate_moves_caret_and_selects() -> None:
    editor = FakeEditor("let a = 1\nlet b = a +\nprint(b)")

    offset = navigate(editor, 2, 5)

    assert offset == 14
    assert editor.caret == 14
    assert editor.selection == (14, 17)


def test_navigate_at_line_end_only_moves_caret() -> None:
    editor = FakeEditor("abc\nde")

    offset = navigate(editor, 2, 40)

    assert offset == 6
    assert editor.caret == 6
    assert editor.selection is None
