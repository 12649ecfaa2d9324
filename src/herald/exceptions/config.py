from __future__ import annotations

from typing import Any

from herald.exceptions.base import HeraldError


class ConfigError(HeraldError):
    """Exception for configuration loading, parsing, and validation errors.

    Raised when configuration cannot be loaded, parsed, or validated. This
    includes YAML parsing failures, Pydantic validation errors, and invalid
    environment variable values.

    An invalid regular expression inside the pattern dictionaries is not a
    ConfigError: the classifier skips such patterns and logs a warning.

    Attributes:
        message: Human-readable error message describing the configuration issue.
        field: Optional field name that caused the error
            (e.g., "complexity_thresholds.high").
        value: Optional value that failed validation (for debugging).

    Examples:
        ```python
        raise ConfigError("Invalid YAML in .herald.yaml: mapping values not allowed")

        raise ConfigError(
            "Invalid configuration value",
            field="style.spinner_interval_ms",
            value=-1,
        )
        ```
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        """Initialize the ConfigError.

        Args:
            message: Human-readable error message.
            field: Optional field name that caused the error.
            value: Optional value that failed validation.
        """
        self.field = field
        self.value = value
        super().__init__(message)
