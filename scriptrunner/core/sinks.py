"""
Event sinks - receivers for the output events of a run.

A sink is any callable taking one OutputEvent. Sinks are invoked from worker
threads; EventChannel hands events over to whichever thread consumes it.
"""

import queue
from typing import Callable, Iterator, List, Optional

from .events import (
    Diagnostic, ExecutionFailed, OutputEvent, PlainText, ProcessExited,
    Terminated, is_terminal,
)

EventSink = Callable[[OutputEvent], None]

# Exit code reported to CallbackSink.on_complete when no process ran
NO_EXIT_CODE = -1

TERMINATED_NOTICE = "[PROCESS TERMINATED]"


class EventChannel:
    """Thread-safe FIFO of events, written by workers and read by the consumer."""

    def __init__(self):
        self._queue: queue.Queue = queue.Queue()

    def __call__(self, event: OutputEvent) -> None:
        self._queue.put(event)

    def get(self, timeout: Optional[float] = None) -> Optional[OutputEvent]:
        """Return the next event, or None if none arrived within ``timeout``.

        ``timeout=0`` never blocks.
        """
        try:
            if timeout == 0:
                return self._queue.get(block=False)
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self, limit: Optional[int] = None) -> List[OutputEvent]:
        """Return the events available right now, oldest first."""
        events: List[OutputEvent] = []
        while limit is None or len(events) < limit:
            event = self.get(timeout=0)
            if event is None:
                break
            events.append(event)
        return events

    def iter_run(self, timeout: Optional[float] = None) -> Iterator[OutputEvent]:
        """Yield events until (and including) a terminal event.

        Raises:
            TimeoutError: if no event arrives within ``timeout`` seconds.
        """
        while True:
            event = self.get(timeout=timeout)
            if event is None:
                raise TimeoutError(f"No event within {timeout}s")
            yield event
            if is_terminal(event):
                return


class CallbackSink:
    """Adapt the event stream to output / error / completion callbacks.

    on_complete fires exactly once per run; runs that never started a
    process complete with NO_EXIT_CODE after their error text.
    """

    def __init__(
        self,
        on_output: Callable[[str], None],
        on_error: Callable[[str], None],
        on_complete: Callable[[int], None],
    ):
        self._on_output = on_output
        self._on_error = on_error
        self._on_complete = on_complete

    def __call__(self, event: OutputEvent) -> None:
        if isinstance(event, PlainText):
            self._on_output(event.text + "\n")
        elif isinstance(event, Diagnostic):
            self._on_error(event.raw_line + "\n")
        elif isinstance(event, Terminated):
            self._on_error(f"\n{TERMINATED_NOTICE}\n")
        elif isinstance(event, ExecutionFailed):
            self._on_error(event.message + "\n")
            self._on_complete(NO_EXIT_CODE)
        elif isinstance(event, ProcessExited):
            self._on_complete(event.exit_code)


def format_exit_status(exit_code: int) -> str:
    """Exit code summary, e.g. '✓ Exit: 0' or '✗ Exit: 1'."""
    mark = "✓" if exit_code == 0 else "✗"
    return f"{mark} Exit: {exit_code}"
