"""Errors raised while preparing to run a wrapped command.

Only problems on herald's side are raised. Once a command has been
resolved, everything that goes wrong with it is reported through the task
instead: an unknown executable becomes an internal error line and exit code
127, a file without execute permission exit code 126, and a non-zero exit
is simply the task's status.
"""

from __future__ import annotations

from pathlib import Path

from herald.exceptions.base import HeraldError


class RunnerError(HeraldError):
    """Base class for CommandRunner failures."""


class WorkingDirectoryError(RunnerError):
    """The configured working directory is missing or not a directory.

    Raised before the child is spawned, so no task output exists yet. The CLI
    reports it on stderr and exits with 1.

    Attributes:
        path: The directory the command was meant to run in.
    """

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = path
        super().__init__(message)


class CommandNotFoundError(RunnerError):
    """The command is neither an existing path nor found on PATH.

    Used inside the runner to produce the ``Command not found`` internal
    line and exit code 127; callers of ``CommandRunner.run`` never see it.

    Attributes:
        executable: The command name as given on the command line.
    """

    def __init__(self, message: str, executable: str | None = None) -> None:
        self.executable = executable
        super().__init__(message)
