"""CLI utilities for herald.

This module provides CLI-specific utilities: exit codes and message
formatting.
"""

from __future__ import annotations

from herald.cli.context import ExitCode
from herald.cli.output import format_config_error, format_error

__all__ = [
    "ExitCode",
    "format_config_error",
    "format_error",
]
