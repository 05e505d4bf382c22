"""
Map diagnostic locations to editor character offsets.

Diagnostics may point past the end of the current document (the user kept
typing after the run), so every lookup is clamped instead of raising.
"""

from typing import Protocol, Sequence, Tuple

from scriptrunner.logging import get_logger

logger = get_logger(__name__)

# Number of characters selected at a navigated location
SELECTION_WIDTH = 3


class EditorSurface(Protocol):
    """What navigation needs from a text editor widget."""

    def line_count(self) -> int: ...

    def line_length(self, index: int) -> int: ...

    def set_caret(self, position: int) -> None: ...

    def select_range(self, start: int, end: int) -> None: ...


def _clamp_line(line: int, line_count: int) -> int:
    """Convert a 1-indexed line to a valid 0-indexed one."""
    return min(max(line - 1, 0), line_count - 1)


def resolve_offset(line: int, column: int, line_lengths: Sequence[int]) -> int:
    """Convert a 1-indexed (line, column) into a 0-indexed document offset.

    Lines past the end clamp to the last line, columns past the end of a
    line clamp to its length. Each preceding line contributes its length
    plus one separator character.
    """
    if not line_lengths:
        return 0
    target = _clamp_line(line, len(line_lengths))
    offset = sum(length + 1 for length in line_lengths[:target])
    return offset + min(max(column - 1, 0), line_lengths[target])


def selection_range(line: int, column: int, line_lengths: Sequence[int]) -> Tuple[int, int]:
    """Half-open range highlighting up to SELECTION_WIDTH characters at a location.

    Returns an empty range at the caret when the location is at (or past)
    the end of its line.
    """
    start = resolve_offset(line, column, line_lengths)
    if not line_lengths:
        return (start, start)
    target = _clamp_line(line, len(line_lengths))
    target_col = max(column - 1, 0)
    remaining = line_lengths[target] - target_col
    if remaining <= 0:
        return (start, start)
    return (start, start + min(SELECTION_WIDTH, remaining))


def navigate(editor: EditorSurface, line: int, column: int) -> int:
    """Move the editor caret to a location and select it.

    Returns:
        The resolved caret offset.
    """
    lengths = [editor.line_length(i) for i in range(editor.line_count())]
    start, end = selection_range(line, column, lengths)
    logger.debug(f"Navigating to {line}:{column} -> offset {start} (selection {start}-{end})")
    editor.set_caret(start)
    if end > start:
        editor.select_range(start, end)
    return start
