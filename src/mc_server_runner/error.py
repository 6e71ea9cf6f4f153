# mc_server_runner/error.py
"""
Exception hierarchy for MC Server Runner.

Every error the core raises derives from :class:`RunnerError`, so the CLI layer
can catch a single type, print a readable message and exit with status 1.
The subclasses follow the failure categories of the runner:

- environment-missing: :class:`CommandNotFoundError`, :class:`PrerequisiteError`
- upstream-data-missing: :class:`UpstreamDataError`, :class:`DownloadError`
- subprocess-failure: :class:`BuildError`
- precondition-violation: :class:`ServerAlreadyRunningError`,
  :class:`AppFileNotFoundError`, :class:`ConfigurationError`
"""

from typing import Optional


class RunnerError(Exception):
    """Base class for all errors raised by mc_server_runner."""

    pass


class ConfigurationError(RunnerError):
    """The effective configuration is unusable (e.g. unknown flavor)."""

    pass


class MissingArgumentError(RunnerError, ValueError):
    """A required argument was empty or missing."""

    pass


class CommandNotFoundError(RunnerError):
    """A required external command is not on PATH."""

    def __init__(self, command_name: str, message: str = "Command not found"):
        self.command_name = command_name
        self.message = message
        super().__init__(f"{self.message}: {self.command_name}")


class PrerequisiteError(RunnerError):
    """A required tool exists but is unusable (permissions, wrong version)."""

    pass


class UpstreamDataError(RunnerError):
    """An upstream API answered but without the data we need."""

    pass


class DownloadError(RunnerError):
    """A network request or file download failed."""

    pass


class BuildError(RunnerError):
    """An external build step (git, docker, BuildTools) failed."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        self.returncode = returncode
        super().__init__(message)


class AppFileNotFoundError(RunnerError, FileNotFoundError):
    """An expected file or directory does not exist."""

    def __init__(self, path: str, description: str = "File"):
        self.path = path
        self.description = description
        super().__init__(f"{description} not found at path: {path}")

    def __str__(self) -> str:
        return f"{self.description} not found at path: {self.path}"


class FileOperationError(RunnerError):
    """A filesystem operation (copy, move, write, delete) failed."""

    pass


class ServerAlreadyRunningError(RunnerError):
    """A session with the target name is already live."""

    def __init__(self, session_name: str):
        self.session_name = session_name
        super().__init__(
            f"tmux session '{session_name}' exists! Aborting start to avoid "
            "launching twice against the same world data."
        )


class ServerStartError(RunnerError):
    """Launching the server failed."""

    pass


class ServerStopError(RunnerError):
    """Stopping the server failed."""

    pass
