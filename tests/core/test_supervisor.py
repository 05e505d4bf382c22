import sys
import threading
import time

import pytest

from scriptrunner.core.errors import LaunchError
from scriptrunner.core.supervisor import OutputLine, ProcessSupervisor, decode_line


def python_command(code):
    return [sys.executable, "-u", "-c", code]


@pytest.fixture
def supervisor():
    sup = ProcessSupervisor()
    yield sup
    sup.terminate()


def test_decode_line_strips_terminators() -> None:
    assert decode_line(b"hello\n") == OutputLine("hello")
    assert decode_line(b"hello\r\n") == OutputLine("hello")
    assert decode_line(b"no newline") == OutputLine("no newline")


def test_decode_line_replaces_malformed_utf8() -> None:
    line = decode_line(b"bad \xff byte\n")

    assert line.lossy
    assert line.text == "bad � byte"


def test_streams_merged_output_in_order(supervisor) -> None:
    handle = supervisor.launch(python_command(
        "import sys\n"
        "print('one')\n"
        "print('two', file=sys.stderr)\n"
        "print('three')\n"
    ))

    lines = [line.text for line in supervisor.stream_output(handle)]
    exit_code = supervisor.await_exit(handle)

    assert lines == ["one", "two", "three"]
    assert exit_code == 0


def test_exit_code_reported(supervisor) -> None:
    handle = supervisor.launch(python_command("raise SystemExit(3)"))
    list(supervisor.stream_output(handle))

    assert supervisor.await_exit(handle) == 3
    assert supervisor.current is None


def test_stream_can_only_be_claimed_once(supervisor) -> None:
    handle = supervisor.launch(python_command("pass"))
    list(supervisor.stream_output(handle))

    with pytest.raises(RuntimeError):
        supervisor.stream_output(handle)
    supervisor.await_exit(handle)


def test_launch_missing_executable_raises(supervisor) -> None:
    with pytest.raises(LaunchError) as excinfo:
        supervisor.launch(["/nonexistent/toolchain-binary", "script.swift"])

    assert excinfo.value.command == ("/nonexistent/toolchain-binary", "script.swift")
    assert "/nonexistent/toolchain-binary" in str(excinfo.value)
    assert supervisor.current is None


def test_launch_empty_command_raises(supervisor) -> None:
    with pytest.raises(LaunchError):
        supervisor.launch([])


def test_terminate_kills_current_process(supervisor) -> None:
    handle = supervisor.launch(python_command("import time; time.sleep(30)"))
    assert supervisor.current is handle

    assert supervisor.terminate() is True
    assert supervisor.current is None
    assert handle.kill_requested

    exit_code = supervisor.await_exit(handle)
    assert exit_code != 0


def test_terminate_without_process_is_noop(supervisor) -> None:
    assert supervisor.terminate() is False


def test_terminate_after_exit_is_noop(supervisor) -> None:
    handle = supervisor.launch(python_command("pass"))
    supervisor.await_exit(handle)

    assert supervisor.terminate(handle) is False
    assert not handle.kill_requested


def test_launch_replaces_previous_process(supervisor) -> None:
    first = supervisor.launch(python_command("import time; time.sleep(30)"))
    second = supervisor.launch(python_command("pass"))

    assert supervisor.current is second
    assert first.kill_requested
    assert supervisor.await_exit(first) != 0
    supervisor.await_exit(second)


def test_terminate_while_another_thread_awaits_exit(supervisor) -> None:
    handle = supervisor.launch(python_command("import time; time.sleep(30)"))
    exit_codes = []
    waiter = threading.Thread(target=lambda: exit_codes.append(supervisor.await_exit(handle)))
    waiter.start()
    time.sleep(0.1)

    assert supervisor.terminate(handle) is True
    waiter.join(timeout=10)

    assert not waiter.is_alive()
    assert supervisor.current is None
    assert len(exit_codes) == 1
    assert exit_codes[0] != 0
    assert supervisor.terminate(handle) is False


def test_output_closed_after_stream_ends(supervisor) -> None:
    handle = supervisor.launch(python_command("print('done')"))
    lines = supervisor.stream_output(handle)
    supervisor.await_exit(handle)

    assert supervisor.await_output_closed(handle, timeout=5.0)
    assert [line.text for line in lines] == ["done"]


def test_output_held_open_by_child_times_out(supervisor) -> None:
    # The grandchild inherits the pipe and outlives its parent
    handle = supervisor.launch(python_command(
        "import subprocess, sys\n"
        "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(5)'])\n"
    ))
    supervisor.stream_output(handle)
    assert supervisor.await_exit(handle) == 0

    started = time.monotonic()
    assert supervisor.await_output_closed(handle, timeout=0.3) is False
    assert time.monotonic() - started < 3


def test_full_queue_does_not_count_against_close_timeout() -> None:
    sup = ProcessSupervisor(queue_size=4)
    handle = sup.launch(python_command("for i in range(50):\n    print(i)\n"))
    lines = sup.stream_output(handle)
    sup.await_exit(handle)
    received = []

    def slow_consumer():
        for line in lines:
            time.sleep(0.02)
            received.append(line.text)

    consumer = threading.Thread(target=slow_consumer)
    consumer.start()

    # Draining takes about a second, well past the timeout
    assert sup.await_output_closed(handle, timeout=0.2)
    consumer.join(timeout=10)

    assert received == [str(i) for i in range(50)]
