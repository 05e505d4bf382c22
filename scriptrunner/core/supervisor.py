"""
External process lifecycle management.

Owns at most one toolchain process at a time and exposes
launch / stream / await-exit / terminate operations that are safe to call
from different threads.

Threading model:
- launch() and await_exit() run on the caller's worker thread
- stream_output() starts a daemon pump thread that drains the merged
  stdout/stderr pipe into a bounded queue, so the child never stalls on a
  full pipe while the consumer is busy
- terminate() may be called from any thread, including concurrently with
  await_exit()
"""

import queue
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from scriptrunner.logging import get_logger

from .errors import LaunchError, ScriptRunnerError

logger = get_logger(__name__)

# Lines buffered between the pump thread and the consumer
DEFAULT_QUEUE_SIZE = 10000

# Seconds between end-of-output checks in await_output_closed()
_CLOSE_POLL_INTERVAL = 0.05

_END_OF_STREAM = object()


class OutputStreamError(ScriptRunnerError, OSError):
    """Reading the process output pipe failed."""


@dataclass(frozen=True)
class OutputLine:
    """One decoded line of combined output, without its line terminator.

    ``lossy`` is True when the bytes were not valid UTF-8 and undecodable
    sequences were replaced with U+FFFD.
    """
    text: str
    lossy: bool = False


@dataclass(frozen=True)
class _ReadFailure:
    reason: str


def decode_line(raw: bytes) -> OutputLine:
    """Strip one line terminator and decode as UTF-8, degrading on bad bytes."""
    if raw.endswith(b'\r\n'):
        raw = raw[:-2]
    elif raw.endswith(b'\n'):
        raw = raw[:-1]
    try:
        return OutputLine(raw.decode('utf-8'))
    except UnicodeDecodeError as e:
        logger.warning(f"Malformed UTF-8 in process output ({e.reason}), replacing")
        return OutputLine(raw.decode('utf-8', errors='replace'), lossy=True)


class ExecutionHandle:
    """A launched toolchain process."""

    def __init__(self, process: subprocess.Popen, command: Sequence[str]):
        self.process = process
        self.command = tuple(command)
        self.kill_requested = False
        # Set by the pump thread once the pipe reached end of file
        self.output_closed = threading.Event()
        self._stream_claimed = False
        self._hand_off: Optional[queue.Queue] = None

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self.process.returncode

    def is_alive(self) -> bool:
        return self.process.poll() is None

    def __repr__(self) -> str:
        return f"ExecutionHandle(pid={self.pid}, command={self.command!r})"


class ProcessSupervisor:
    """
    Owns the single "current" external process.

    All transitions into and out of having a current process happen under
    one lock shared by launch(), terminate() and await_exit(). For any
    handle, exactly one of terminate() and await_exit() clears it.
    """

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE):
        self._lock = threading.Lock()
        self._current: Optional[ExecutionHandle] = None
        self._queue_size = queue_size

    @property
    def current(self) -> Optional[ExecutionHandle]:
        with self._lock:
            return self._current

    def launch(self, command: Sequence[str]) -> ExecutionHandle:
        """
        Start ``command`` with stderr merged into stdout and register it as current.

        Arguments are passed straight to process creation, never through a
        shell. A process that is still current is killed first.

        Raises:
            LaunchError: if the executable cannot be found or started.
        """
        command = tuple(command)
        with self._lock:
            previous = self._current
            if previous is not None:
                logger.warning(f"Launching while {previous!r} is current, killing it first")
                self._current = None
                self._kill(previous)

            try:
                process = subprocess.Popen(
                    list(command),
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                )
            except (OSError, ValueError, IndexError) as e:
                logger.error(f"Launch failed for {command!r}: {e}")
                raise LaunchError(command, str(e)) from e

            handle = ExecutionHandle(process, command)
            self._current = handle

        logger.info(f"Launched {handle!r}")
        return handle

    def stream_output(self, handle: ExecutionHandle) -> Iterator[OutputLine]:
        """
        Lazily yield the process's combined output line by line.

        The iterator ends when the pipe closes. It can only be obtained once
        per handle.

        Raises:
            RuntimeError: if the stream of ``handle`` was already claimed.
        """
        if handle._stream_claimed:
            raise RuntimeError(f"Output of {handle!r} is already being streamed")
        handle._stream_claimed = True

        hand_off: queue.Queue = queue.Queue(maxsize=self._queue_size)
        handle._hand_off = hand_off
        pump = threading.Thread(
            target=self._pump,
            args=(handle, hand_off),
            name=f"output-pump-{handle.pid}",
            daemon=True,
        )
        pump.start()
        return self._drain(hand_off)

    def await_exit(self, handle: ExecutionHandle) -> int:
        """Block until the process ends and return its exit code."""
        exit_code = handle.process.wait()
        with self._lock:
            if self._current is handle:
                self._current = None
                logger.debug(f"{handle!r} exited with {exit_code}, cleared current")
            else:
                logger.debug(f"{handle!r} exited with {exit_code}, already cleared")
        return exit_code

    def await_output_closed(self, handle: ExecutionHandle, timeout: float) -> bool:
        """
        Wait until the pump thread read the end of ``handle``'s output pipe.

        ``timeout`` only runs while the pump waits on the pipe (e.g. a
        grandchild holding it open). Time the pump spends blocked on a full
        hand-off queue, i.e. waiting for a slow consumer, restarts it.

        Returns:
            True if the end of output was reached.
        """
        deadline = time.monotonic() + timeout
        while not handle.output_closed.wait(_CLOSE_POLL_INTERVAL):
            hand_off = handle._hand_off
            if hand_off is not None and hand_off.full():
                deadline = time.monotonic() + timeout
            elif time.monotonic() >= deadline:
                return False
        return True

    def terminate(self, handle: Optional[ExecutionHandle] = None) -> bool:
        """
        Forcefully kill ``handle`` (default: the current process).

        Idempotent: absent or already-exited processes are ignored. OS errors
        are logged, not raised.

        Returns:
            True if a kill signal was sent.
        """
        with self._lock:
            target = handle if handle is not None else self._current
            if target is None:
                return False
            if self._current is target:
                self._current = None
            return self._kill(target)

    def _kill(self, handle: ExecutionHandle) -> bool:
        """Send the kill signal. Caller holds the lock."""
        if handle.process.poll() is not None:
            logger.debug(f"{handle!r} already exited, nothing to kill")
            return False
        handle.kill_requested = True
        try:
            handle.process.kill()
        except OSError as e:
            # Exit detection in await_exit still runs
            logger.warning(f"Failed to kill {handle!r}: {e}")
            return False
        logger.info(f"Kill signal sent to {handle!r}")
        return True

    def _pump(self, handle: ExecutionHandle, hand_off: queue.Queue) -> None:
        """Pump-thread body: move raw lines from the pipe into the queue."""
        stream = handle.process.stdout
        try:
            for raw in iter(stream.readline, b''):
                hand_off.put(raw)
        except (OSError, ValueError) as e:
            logger.warning(f"Reading output of {handle!r} failed: {e}")
            hand_off.put(_ReadFailure(str(e)))
        finally:
            try:
                stream.close()
            except OSError as e:
                logger.debug(f"Closing output pipe of {handle!r}: {e}")
            hand_off.put(_END_OF_STREAM)
            handle.output_closed.set()

    @staticmethod
    def _drain(hand_off: queue.Queue) -> Iterator[OutputLine]:
        while True:
            item = hand_off.get()
            if item is _END_OF_STREAM:
                return
            if isinstance(item, _ReadFailure):
                raise OutputStreamError(f"Error reading output: {item.reason}")
            yield decode_line(item)
