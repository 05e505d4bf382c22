"""
Run coordination: one asynchronous unit of work per run request.

Sequences scratch-file writing, process launch, output relay and completion
notification, and turns every failure into an event on the run's sink.

Threads per run:
- run worker: write script, launch, wait for exit, emit the terminal event
- output worker: consume the supervisor's line stream, classify, emit
(plus the supervisor's pump thread that keeps the pipe drained)

State machine: IDLE -> RUNNING -> IDLE. A run leaves RUNNING right before
its terminal event is delivered.
"""

import itertools
import threading
from typing import Iterable, Iterator, Optional

from scriptrunner.logging import get_logger

from .diagnostics import DiagnosticParser
from .errors import LaunchError, ScratchWriteError
from .events import (
    Diagnostic, ExecutionFailed, FailureKind, OutputEvent, PlainText,
    ProcessExited, Terminated,
)
from .language import LanguageDescriptor
from .sinks import EventSink
from .supervisor import ExecutionHandle, OutputLine, OutputStreamError, ProcessSupervisor
from .workspace import Workspace

logger = get_logger(__name__)

# Seconds to wait for the output pipe to close after the process exited
# (children may still hold it open) before completion is reported. Lines
# already read are always delivered.
DEFAULT_DRAIN_TIMEOUT = 2.0


class _Run:
    """Bookkeeping for one accepted execute() call."""

    def __init__(self, run_id: int, language: LanguageDescriptor, sink: EventSink):
        self.id = run_id
        self.language = language
        self.sink = sink
        # Guards emission order between the workers and stop()
        self.lock = threading.RLock()
        self.stopped = False
        self.finished = False
        self.handle: Optional[ExecutionHandle] = None
        self.worker: Optional[threading.Thread] = None
        self.done = threading.Event()

    def __repr__(self) -> str:
        return f"Run#{self.id}({self.language.id})"


class RunCoordinator:
    """
    Mediates between a front end and the ProcessSupervisor.

    Overlapping runs are rejected: execute() returns False while a run is
    in progress.
    """

    def __init__(
        self,
        supervisor: Optional[ProcessSupervisor] = None,
        workspace: Optional[Workspace] = None,
        extensions: Optional[Iterable[str]] = None,
        drain_timeout: float = DEFAULT_DRAIN_TIMEOUT,
    ):
        if extensions is None:
            from scriptrunner.languages import known_extensions
            extensions = known_extensions()

        self._supervisor = supervisor or ProcessSupervisor()
        self._workspace = workspace or Workspace()
        self._parser = DiagnosticParser(extensions)
        self._drain_timeout = drain_timeout

        self._state_lock = threading.Lock()
        self._active: Optional[_Run] = None
        self._run_ids = itertools.count(1)
        self._shut_down = False

    @property
    def is_running(self) -> bool:
        with self._state_lock:
            return self._active is not None

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    @property
    def supervisor(self) -> ProcessSupervisor:
        return self._supervisor

    def execute(self, source_text: str, language: LanguageDescriptor, sink: EventSink) -> bool:
        """
        Start running ``source_text`` with ``language``'s toolchain.

        Returns immediately. Events are delivered to ``sink`` from worker
        threads, strictly in order, ending with exactly one ProcessExited
        or ExecutionFailed.

        Returns:
            True if the run was accepted, False if another run is active or
            the coordinator was shut down.
        """
        with self._state_lock:
            if self._shut_down:
                logger.warning("execute() after shutdown, ignoring")
                return False
            if self._active is not None:
                logger.warning(f"execute() while {self._active!r} is running, rejecting")
                return False
            run = _Run(next(self._run_ids), language, sink)
            self._active = run

        run.worker = threading.Thread(
            target=self._run_worker,
            args=(run, source_text),
            name=f"run-{run.id}",
            daemon=True,
        )
        logger.info(f"Starting {run!r}")
        run.worker.start()
        return True

    def stop(self) -> bool:
        """
        Request forced termination of the active run, if any.

        Emits Terminated to the run's sink right away; no output events are
        delivered after it. Completion arrives later as ProcessExited.

        Returns:
            True if a running execution was stopped.
        """
        with self._state_lock:
            run = self._active
        if run is None:
            return False

        with run.lock:
            if run.stopped or run.finished:
                return False
            run.stopped = True
            self._deliver(run, Terminated())
            handle = run.handle

        logger.info(f"Stop requested for {run!r}")
        if handle is not None:
            self._supervisor.terminate(handle)
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the active run (if any) delivered its terminal event.

        Returns:
            True if no run is active anymore.
        """
        with self._state_lock:
            run = self._active
        if run is None:
            return True
        return run.done.wait(timeout)

    def shutdown(self) -> None:
        """Stop the active run, release worker threads and remove the workspace."""
        with self._state_lock:
            if self._shut_down:
                return
            self._shut_down = True
            run = self._active

        self.stop()
        if run is not None and run.worker is not None:
            run.worker.join(timeout=self._drain_timeout + 1.0)
            if run.worker.is_alive():
                logger.warning(f"{run!r} worker still alive at shutdown")
        self._workspace.cleanup()
        logger.info("Coordinator shut down")

    # ── workers ───────────────────────────────────────────────────────────

    def _run_worker(self, run: _Run, source_text: str) -> None:
        try:
            self._execute_run(run, source_text)
        except Exception as e:
            logger.exception(f"Unexpected failure in {run!r}")
            self._finish(run, ExecutionFailed(FailureKind.INTERNAL, f"Unexpected error: {e}"))

    def _execute_run(self, run: _Run, source_text: str) -> None:
        try:
            script_path = self._workspace.write_script(source_text, run.language)
        except ScratchWriteError as e:
            logger.error(f"{run!r}: {e}")
            self._finish(run, ExecutionFailed(FailureKind.IO, f"Failed to write script: {e}"))
            return

        command = run.language.build_command(script_path)

        # Launch under the run lock so stop() sees either the handle or
        # prevents the launch
        with run.lock:
            if run.stopped:
                self._finish(run, ExecutionFailed(
                    FailureKind.CANCELLED, "Run stopped before the process started"
                ))
                return
            try:
                handle = self._supervisor.launch(command)
            except LaunchError as e:
                self._finish(run, ExecutionFailed(FailureKind.LAUNCH, str(e)))
                return
            run.handle = handle

        parser = self._parser.with_extension(run.language.extension)
        # Claim the stream here so the pump is running before exit is awaited
        lines = self._supervisor.stream_output(handle)
        relay = threading.Thread(
            target=self._relay_output,
            args=(run, lines, parser),
            name=f"run-{run.id}-output",
            daemon=True,
        )
        relay.start()

        exit_code = self._supervisor.await_exit(handle)
        if self._supervisor.await_output_closed(handle, self._drain_timeout):
            # Every line is read; deliver all of them before completion
            relay.join()
        else:
            logger.warning(
                f"{run!r}: output still open {self._drain_timeout}s after exit, "
                "dropping the rest"
            )
        logger.info(f"{run!r} finished with exit code {exit_code}")
        self._finish(run, ProcessExited(exit_code))

    def _relay_output(self, run: _Run, lines: Iterator[OutputLine], parser: DiagnosticParser) -> None:
        try:
            for line in lines:
                self._emit(run, self._classify(line, parser))
        except OutputStreamError as e:
            self._emit(run, PlainText(str(e)))

    @staticmethod
    def _classify(line: OutputLine, parser: DiagnosticParser) -> OutputEvent:
        if line.lossy:
            return PlainText(line.text)
        found = parser.match(line.text)
        if found is None:
            return PlainText(line.text)
        return Diagnostic(found.record, line.text, found.span)

    # ── emission ──────────────────────────────────────────────────────────

    def _emit(self, run: _Run, event: OutputEvent) -> None:
        """Deliver a non-terminal event unless the run was stopped or ended."""
        with run.lock:
            if run.stopped or run.finished:
                return
            self._deliver(run, event)

    def _finish(self, run: _Run, event: OutputEvent) -> None:
        """Deliver the terminal event exactly once and return to IDLE."""
        with run.lock:
            if run.finished:
                return
            run.finished = True
            with self._state_lock:
                if self._active is run:
                    self._active = None
            self._deliver(run, event)
        run.done.set()

    @staticmethod
    def _deliver(run: _Run, event: OutputEvent) -> None:
        try:
            run.sink(event)
        except Exception:
            # A broken sink must not stop the pipe from draining
            logger.exception(f"{run!r}: event sink raised on {event!r}")
