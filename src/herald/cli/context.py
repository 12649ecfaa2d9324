"""Exit codes herald produces on its own behalf."""

from __future__ import annotations

from enum import IntEnum

__all__ = ["ExitCode"]


class ExitCode(IntEnum):
    """Exit codes herald itself produces.

    Otherwise herald exits with the wrapped command's own exit code:
    - 1 for herald failures (bad configuration, missing working directory)
    - 2 for usage errors (no command given)
    - 126 / 127 when the command cannot be executed / is not found
    - 130 for keyboard interrupt (128 + SIGINT=2)
    """

    SUCCESS = 0
    FAILURE = 1
    USAGE = 2
    NOT_EXECUTABLE = 126
    NOT_FOUND = 127
    INTERRUPTED = 130
