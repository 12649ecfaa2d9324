"""herald exception hierarchy.

All exceptions can be imported from this package:
    from herald.exceptions import ConfigError, RunnerError
"""

from __future__ import annotations

# Base exception
from herald.exceptions.base import HeraldError

# Configuration exceptions
from herald.exceptions.config import ConfigError

# Runner-related exceptions
from herald.exceptions.runner import (
    CommandNotFoundError,
    RunnerError,
    WorkingDirectoryError,
)

__all__ = [
    # Base
    "HeraldError",
    # Config
    "ConfigError",
    # Runner
    "CommandNotFoundError",
    "RunnerError",
    "WorkingDirectoryError",
]
