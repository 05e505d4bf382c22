"""
Compiler-style diagnostic recognition.

Recognizes single lines of the shape::

    <prefix><identifier>.<ext>:<line>:<column>: <severity>:<message>

where ``<ext>`` is one of the configured source extensions and ``<severity>``
is exactly ``error``, ``warning`` or ``note``. Anything else is plain output.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from scriptrunner.logging import get_logger

logger = get_logger(__name__)

# Largest line/column accepted; bigger values degrade to plain text
MAX_POSITION = 2**31 - 1


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


@dataclass(frozen=True)
class DiagnosticRecord:
    """A navigable location extracted from one output line."""
    file_name: str
    line: int       # 1-indexed
    column: int     # 1-indexed
    severity: Severity
    message: str

    def location_label(self) -> str:
        """Return 'file:line:column'."""
        return f"{self.file_name}:{self.line}:{self.column}"


@dataclass(frozen=True)
class DiagnosticMatch:
    """A parsed record plus where its location text sits in the line."""
    record: DiagnosticRecord
    location_start: int
    location_end: int

    @property
    def span(self) -> Tuple[int, int]:
        return (self.location_start, self.location_end)


def _build_pattern(extensions: Iterable[str]) -> re.Pattern:
    # Longest first so 'kts' is tried before a hypothetical 'kt'
    exts = sorted({e.lstrip('.') for e in extensions if e}, key=len, reverse=True)
    if not exts:
        raise ValueError("DiagnosticParser needs at least one source extension")
    alternation = '|'.join(re.escape(e) for e in exts)
    return re.compile(
        r'(?P<file>\w+\.(?:' + alternation + r')):'
        r'(?P<line>[0-9]+):(?P<column>[0-9]+): '
        r'(?P<severity>error|warning|note):'
        r'(?P<message>.*)'
    )


class DiagnosticParser:
    """Stateless line classifier for a fixed set of source extensions."""

    def __init__(self, extensions: Iterable[str]):
        self._extensions = frozenset(e.lstrip('.') for e in extensions if e)
        self._pattern = _build_pattern(self._extensions)

    @property
    def extensions(self) -> frozenset:
        return self._extensions

    def with_extension(self, extension: str) -> 'DiagnosticParser':
        """Return a parser that also recognizes ``extension``."""
        if extension in self._extensions:
            return self
        return DiagnosticParser(self._extensions | {extension})

    def match(self, line: str) -> Optional[DiagnosticMatch]:
        """Classify a line, keeping the location span for rendering."""
        m = self._pattern.search(line)
        if m is None:
            return None

        line_no = int(m.group('line'))
        column = int(m.group('column'))
        if not (1 <= line_no <= MAX_POSITION and 1 <= column <= MAX_POSITION):
            logger.debug(f"Diagnostic-shaped line with out-of-range position: {line!r}")
            return None

        record = DiagnosticRecord(
            file_name=m.group('file'),
            line=line_no,
            column=column,
            severity=Severity(m.group('severity')),
            message=m.group('message'),
        )
        return DiagnosticMatch(
            record=record,
            location_start=m.start('file'),
            location_end=m.end('column'),
        )

    def parse(self, line: str) -> Optional[DiagnosticRecord]:
        """Return the DiagnosticRecord for ``line`` or None if it is plain output."""
        found = self.match(line)
        return found.record if found is not None else None
