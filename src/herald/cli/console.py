"""Shared Rich Console instances for herald CLI output.

``console`` renders task output on stdout; ``err_console`` carries herald's
own error messages on stderr. Rich handles TTY detection: styled output in
terminals, plain text when piped.
"""

from __future__ import annotations

from rich.console import Console

__all__ = ["console", "err_console", "make_console"]

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def make_console(no_color: bool = False) -> Console:
    """Build the stdout console for one invocation.

    Args:
        no_color: Strip all styling (``--no-color``, ``--ci``).

    Returns:
        The shared console, or a monochrome one when colors are disabled.
    """
    if not no_color:
        return console
    return Console(no_color=True, highlight=False)
