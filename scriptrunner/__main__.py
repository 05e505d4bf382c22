"""
Script Runner entry point.

Usage:
    python -m scriptrunner [script.swift]
    python -m scriptrunner --run examples/hello.kts
    python -m scriptrunner --no-gui --loglevel DEBUG main.swift
"""

import sys
import os
import argparse
from typing import Optional, TextIO

from .logging import DEFAULT_LOG_FILE

# Process exit code when the script never ran
FAILED_RUN_EXIT_CODE = 1


def run_headless(
    script_path: str,
    language_id: Optional[str] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """Run a script file without the GUI, printing its events.

    Returns:
        The script's exit code, or FAILED_RUN_EXIT_CODE if it never ran.
    """
    from .core.coordinator import RunCoordinator
    from .core.events import (
        Diagnostic, ExecutionFailed, PlainText, ProcessExited, Terminated, is_terminal,
    )
    from .core.sinks import EventChannel, TERMINATED_NOTICE, format_exit_status
    from .languages import DEFAULT_LANGUAGE_ID, available_languages, language_for_path
    from .logging import get_logger

    logger = get_logger(__name__)
    out = out or sys.stdout
    err = err or sys.stderr

    languages = available_languages()
    if language_id is None:
        detected = language_for_path(script_path)
        language_id = detected.id if detected is not None else DEFAULT_LANGUAGE_ID
    language = languages.get(language_id)
    if language is None:
        print(f"Unknown language '{language_id}' (known: {', '.join(sorted(languages))})", file=err)
        return FAILED_RUN_EXIT_CODE

    try:
        with open(script_path, 'r', encoding='utf-8') as f:
            source = f.read()
    except (OSError, UnicodeDecodeError) as e:
        print(f"Cannot read {script_path}: {e}", file=err)
        return FAILED_RUN_EXIT_CODE

    coordinator = RunCoordinator(extensions=[lang.extension for lang in languages.values()])
    channel = EventChannel()
    exit_code = FAILED_RUN_EXIT_CODE
    try:
        if not coordinator.execute(source, language, channel):
            return FAILED_RUN_EXIT_CODE
        while True:
            try:
                event = channel.get()
            except KeyboardInterrupt:
                logger.info("Interrupted, stopping script")
                coordinator.stop()
                continue

            if isinstance(event, PlainText):
                print(event.text, file=out, flush=True)
            elif isinstance(event, Diagnostic):
                print(event.raw_line, file=out, flush=True)
            elif isinstance(event, Terminated):
                print(TERMINATED_NOTICE, file=err, flush=True)
            elif isinstance(event, ExecutionFailed):
                print(event.message, file=err, flush=True)
            elif isinstance(event, ProcessExited):
                print(format_exit_status(event.exit_code), file=err, flush=True)
                exit_code = event.exit_code
            if is_terminal(event):
                break
    finally:
        coordinator.shutdown()

    return exit_code


def main():
    """Main entry point for Script Runner."""
    parser = argparse.ArgumentParser(
        description="Script Runner - edit and run Swift/Kotlin scripts with clickable diagnostics"
    )
    parser.add_argument(
        "script",
        nargs="?",
        help="Script file to open (optional, can be loaded from GUI)"
    )
    parser.add_argument(
        "--language",
        default=None,
        help="Language id to run the script with (default: from file extension, else swift)"
    )
    parser.add_argument(
        "--run",
        action="store_true",
        help="Run the script right after loading it"
    )
    parser.add_argument(
        "--no-gui",
        action="store_true",
        help="Run the script headless and print its output"
    )
    parser.add_argument(
        "-l", "--loglevel",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help=f"Set logging level (default: WARNING). DEBUG writes to {DEFAULT_LOG_FILE}"
    )
    parser.add_argument(
        "--logfile",
        default=DEFAULT_LOG_FILE,
        help=f"Log file path (default: {DEFAULT_LOG_FILE})"
    )
    parser.add_argument(
        "--log-console",
        action="store_true",
        help="Also log to console (stderr)"
    )

    args = parser.parse_args()

    # Setup logging before importing anything else
    from .logging import setup_logging
    setup_logging(
        level=args.loglevel,
        log_file=args.logfile,
        console=args.log_console
    )

    if args.no_gui:
        if not args.script:
            parser.error("--no-gui requires a script file")
        sys.exit(run_headless(os.path.abspath(args.script), args.language))

    # Import here to avoid slow startup for --help
    from .gui.app import run_app

    sys.exit(run_app(
        script_path=args.script,
        language_id=args.language,
        auto_run=args.run,
    ))


if __name__ == "__main__":
    main()
