"""
Regex tokenizer for syntax highlighting.

Pure functions from text to ordered styled spans; no Qt, no shared state,
safe to call from any thread.
"""

import re
from dataclasses import dataclass
from typing import AbstractSet, List, Tuple

KEYWORD = 'keyword'
STRING = 'string'
NUMBER = 'number'
COMMENT = 'comment'

_TOKEN_PATTERN = re.compile(
    r'(?P<comment>//[^\n]*|/\*.*?(?:\*/|\Z))'
    r'|(?P<string>"(?:[^"\\\n]|\\.)*")'
    r'|(?P<number>\b\d+(?:\.\d+)?\b)'
    r'|(?P<word>\b[A-Za-z_]\w*\b)',
    re.DOTALL,
)

_BLOCK_COMMENT_END = re.compile(r'\*/')


@dataclass(frozen=True)
class Span:
    start: int
    length: int
    kind: str

    @property
    def end(self) -> int:
        return self.start + self.length


def _scan(text: str, keywords: AbstractSet[str], pos: int, spans: List[Span]) -> bool:
    """Append spans from ``pos`` on; return True if a block comment is left open."""
    open_comment = False
    for match in _TOKEN_PATTERN.finditer(text, pos):
        kind = match.lastgroup
        if kind == 'word':
            if match.group() not in keywords:
                continue
            kind = KEYWORD
        spans.append(Span(match.start(), match.end() - match.start(), kind))
        if kind == COMMENT:
            token = match.group()
            open_comment = token.startswith('/*') and not (len(token) >= 4 and token.endswith('*/'))
    return open_comment


def tokenize(text: str, keywords: AbstractSet[str]) -> List[Span]:
    """Return highlighted spans of ``text`` in document order."""
    spans: List[Span] = []
    _scan(text, keywords, 0, spans)
    return spans


def tokenize_line(
    text: str,
    keywords: AbstractSet[str],
    in_block_comment: bool = False,
) -> Tuple[List[Span], bool]:
    """Tokenize one line that may start inside a block comment.

    Returns:
        (spans, still_in_block_comment) so line-based highlighters can carry
        block-comment state to the next line.
    """
    spans: List[Span] = []
    pos = 0
    if in_block_comment:
        end = _BLOCK_COMMENT_END.search(text)
        if end is None:
            if text:
                spans.append(Span(0, len(text), COMMENT))
            return spans, True
        spans.append(Span(0, end.end(), COMMENT))
        pos = end.end()
    return spans, _scan(text, keywords, pos, spans)
