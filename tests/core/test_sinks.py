import threading

import pytest

from scriptrunner.core.diagnostics import DiagnosticRecord, Severity
from scriptrunner.core.events import (
    Diagnostic, ExecutionFailed, FailureKind, PlainText, ProcessExited, Terminated,
)
from scriptrunner.core.sinks import (
    NO_EXIT_CODE, TERMINATED_NOTICE, CallbackSink, EventChannel, format_exit_status,
)


class Recorder:
    def __init__(self):
        self.calls = []

    def sink(self):
        return CallbackSink(
            on_output=lambda text: self.calls.append(("output", text)),
            on_error=lambda text: self.calls.append(("error", text)),
            on_complete=lambda code: self.calls.append(("complete", code)),
        )


def test_callback_sink_routes_events() -> None:
    recorder = Recorder()
    sink = recorder.sink()
    record = DiagnosticRecord("main.swift", 1, 2, Severity.ERROR, " boom")

    sink(PlainText("hello"))
    sink(Diagnostic(record, "main.swift:1:2: error: boom"))
    sink(Terminated())
    sink(ProcessExited(137))

    assert recorder.calls == [
        ("output", "hello\n"),
        ("error", "main.swift:1:2: error: boom\n"),
        ("error", f"\n{TERMINATED_NOTICE}\n"),
        ("complete", 137),
    ]


def test_callback_sink_completes_failed_runs() -> None:
    recorder = Recorder()
    recorder.sink()(ExecutionFailed(FailureKind.LAUNCH, "Failed to start swift: not found"))

    assert recorder.calls == [
        ("error", "Failed to start swift: not found\n"),
        ("complete", NO_EXIT_CODE),
    ]


def test_channel_preserves_order_across_threads() -> None:
    channel = EventChannel()

    def produce():
        for i in range(100):
            channel(PlainText(str(i)))
        channel(ProcessExited(0))

    worker = threading.Thread(target=produce)
    worker.start()
    events = list(channel.iter_run(timeout=5))
    worker.join()

    assert events == [PlainText(str(i)) for i in range(100)] + [ProcessExited(0)]


def test_channel_get_and_drain_do_not_block() -> None:
    channel = EventChannel()
    assert channel.get(timeout=0) is None
    assert channel.drain() == []

    for i in range(5):
        channel(PlainText(str(i)))

    assert channel.drain(limit=2) == [PlainText("0"), PlainText("1")]
    assert len(channel.drain()) == 3


def test_iter_run_times_out() -> None:
    channel = EventChannel()
    with pytest.raises(TimeoutError):
        list(channel.iter_run(timeout=0.05))


def test_format_exit_status() -> None:
    assert format_exit_status(0) == "✓ Exit: 0"
    assert format_exit_status(1) == "✗ Exit: 1"
    assert format_exit_status(-9) == "✗ Exit: -9"
