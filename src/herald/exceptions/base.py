from __future__ import annotations


class HeraldError(Exception):
    """Base exception class for all herald-specific errors.

    All custom exceptions in herald inherit from this class. This allows
    catching herald errors at the CLI boundary while letting system
    exceptions propagate naturally.

    A wrapped command that fails is not an error in this sense: its failure
    is reported through the task status, never raised.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            config = load_config(path)
        except HeraldError as e:
            click.echo(format_error(e.message), err=True)
            sys.exit(1)
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the HeraldError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
