"""Subprocess execution for wrapped commands."""

from __future__ import annotations

from herald.runners.command import (
    EXIT_NOT_FOUND,
    EXIT_PERMISSION_DENIED,
    CommandRunner,
)

__all__ = [
    "CommandRunner",
    "EXIT_NOT_FOUND",
    "EXIT_PERMISSION_DENIED",
]
