"""Output events delivered from a run to its sink.

Every accepted run produces zero or more PlainText/Diagnostic events, at most
one Terminated notification, and ends with exactly one terminal event
(ProcessExited or ExecutionFailed).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from .diagnostics import DiagnosticRecord


class FailureKind(str, Enum):
    """Why a run ended without a process exit code."""
    LAUNCH = "launch"
    IO = "io"
    CANCELLED = "cancelled"
    INTERNAL = "internal"


@dataclass(frozen=True)
class PlainText:
    """One line of process output with no diagnostic location."""
    text: str


@dataclass(frozen=True)
class Diagnostic:
    """One line of process output carrying a navigable location."""
    record: DiagnosticRecord
    raw_line: str
    # (start, end) of the 'file:line:col' text within raw_line
    span: Optional[Tuple[int, int]] = None


@dataclass(frozen=True)
class Terminated:
    """Synthetic notification: stop() was requested for the running process."""


@dataclass(frozen=True)
class ProcessExited:
    """The process ended; always the last event of a run that launched."""
    exit_code: int

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class ExecutionFailed:
    """The run could not produce a process; last event of that run."""
    kind: FailureKind
    message: str


OutputEvent = Union[PlainText, Diagnostic, Terminated, ProcessExited, ExecutionFailed]

TERMINAL_EVENTS = (ProcessExited, ExecutionFailed)


def is_terminal(event: OutputEvent) -> bool:
    """Return True if no further events follow this one."""
    return isinstance(event, TERMINAL_EVENTS)
