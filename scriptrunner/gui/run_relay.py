"""
Bridge between the RunCoordinator's worker threads and the GUI thread.

Handles: starting runs, polling the event channel from a QTimer on the GUI
thread, dispatching events as Qt signals.
"""

from typing import Optional
from PyQt6.QtCore import QObject, pyqtSignal, QTimer

from scriptrunner.logging import get_logger
logger = get_logger(__name__)

from ..core.coordinator import RunCoordinator
from ..core.events import (
    Diagnostic, ExecutionFailed, OutputEvent, PlainText, ProcessExited, Terminated,
)
from ..core.language import LanguageDescriptor
from ..core.sinks import EventChannel


class RunRelay(QObject):
    """
    Runs scripts through a RunCoordinator and re-emits events on the GUI thread.

    Signals:
        started: Emitted when a run was accepted
        output_received: Plain output line (str)
        diagnostic_received: Diagnostic line (DiagnosticRecord, raw line, location span or None)
        terminated: Stop was requested for the running process
        failed: The run could not start a process (kind, message)
        finished: The process exited (exit code); last signal of a run
        running_changed: Idle/running transitions (bool)
    """

    started = pyqtSignal()
    output_received = pyqtSignal(str)
    diagnostic_received = pyqtSignal(object, str, object)
    terminated = pyqtSignal()
    failed = pyqtSignal(str, str)
    finished = pyqtSignal(int)
    running_changed = pyqtSignal(bool)

    # Events dispatched per timer tick, keeps the GUI responsive under floods
    MAX_EVENTS_PER_POLL = 200

    def __init__(
        self,
        coordinator: Optional[RunCoordinator] = None,
        parent: Optional[QObject] = None,
        interval_ms: int = 16,
    ):
        super().__init__(parent)
        self._coordinator = coordinator or RunCoordinator()
        self._channel: Optional[EventChannel] = None
        self._is_running = False

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(interval_ms)
        self._poll_timer.timeout.connect(self._poll)

    @property
    def coordinator(self) -> RunCoordinator:
        return self._coordinator

    @property
    def is_running(self) -> bool:
        return self._is_running

    def run(self, source_text: str, language: LanguageDescriptor) -> bool:
        """
        Start running ``source_text``.

        Returns:
            True if started, False if a run is already in progress.
        """
        if self._is_running:
            logger.debug("RunRelay.run ignored, already running")
            return False

        channel = EventChannel()
        if not self._coordinator.execute(source_text, language, channel):
            return False

        self._channel = channel
        self._set_running(True)
        self._poll_timer.start()
        self.started.emit()
        return True

    def stop(self) -> None:
        """Request termination; the Terminated event arrives via polling."""
        self._coordinator.stop()

    def shutdown(self) -> None:
        """Stop polling and release the coordinator's resources."""
        self._poll_timer.stop()
        self._coordinator.shutdown()
        self._channel = None
        self._is_running = False

    def _poll(self) -> None:
        """Dispatch pending events without blocking."""
        if self._channel is None:
            self._poll_timer.stop()
            return

        for event in self._channel.drain(limit=self.MAX_EVENTS_PER_POLL):
            self._dispatch(event)
            if not self._is_running:
                break

    def _dispatch(self, event: OutputEvent) -> None:
        if isinstance(event, PlainText):
            self.output_received.emit(event.text)

        elif isinstance(event, Diagnostic):
            self.diagnostic_received.emit(event.record, event.raw_line, event.span)

        elif isinstance(event, Terminated):
            logger.debug("Terminated notification received")
            self.terminated.emit()

        elif isinstance(event, ExecutionFailed):
            logger.error(f"Run failed ({event.kind.value}): {event.message}")
            self._end_run()
            self.failed.emit(event.kind.value, event.message)

        elif isinstance(event, ProcessExited):
            logger.debug(f"Process exited with {event.exit_code}")
            self._end_run()
            self.finished.emit(event.exit_code)

    def _end_run(self) -> None:
        self._poll_timer.stop()
        self._channel = None
        self._set_running(False)

    def _set_running(self, running: bool) -> None:
        if running != self._is_running:
            self._is_running = running
            self.running_changed.emit(running)
