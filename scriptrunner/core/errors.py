"""Exception types raised by the execution pipeline."""


class ScriptRunnerError(Exception):
    """Base class for all ScriptRunner errors."""


class LaunchError(ScriptRunnerError):
    """The toolchain executable could not be found or started."""

    def __init__(self, command, reason: str):
        self.command = tuple(command)
        self.reason = reason
        program = self.command[0] if self.command else "<empty command>"
        super().__init__(f"Failed to start {program}: {reason}")


class ScratchWriteError(ScriptRunnerError, OSError):
    """The scratch script file could not be written."""


class SettingsError(ScriptRunnerError):
    """The settings file holds data that does not match its schema."""
