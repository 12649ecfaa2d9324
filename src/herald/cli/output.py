"""Formatting helpers for herald's own CLI messages."""

from __future__ import annotations

from herald.exceptions import ConfigError

__all__ = ["format_error", "format_config_error"]


def format_error(
    message: str, details: list[str] | None = None, suggestion: str | None = None
) -> str:
    """Format an error message with optional details and suggestion.

    Args:
        message: Primary error message.
        details: Optional list of detail lines to include.
        suggestion: Optional suggestion for resolving the error.

    Returns:
        Formatted error string with details and suggestion if provided.

    Example:
        >>> print(format_error(
        ...     "Invalid configuration",
        ...     details=["Field: style.spinner_interval_ms"],
        ...     suggestion="Check .herald.yaml",
        ... ))
        Error: Invalid configuration
          Field: style.spinner_interval_ms
        Suggestion: Check .herald.yaml
    """
    lines = [f"Error: {message}"]

    if details:
        for detail in details:
            lines.append(f"  {detail}")

    if suggestion:
        lines.append(f"Suggestion: {suggestion}")

    return "\n".join(lines)


def format_config_error(error: ConfigError) -> str:
    """Format a ConfigError with its field and offending value."""
    details: list[str] = []
    if error.field:
        details.append(f"Field: {error.field}")
    if error.value is not None:
        details.append(f"Value: {error.value}")
    return format_error(error.message, details=details or None)
