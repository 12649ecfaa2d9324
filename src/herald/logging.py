"""Structured logging for herald's own diagnostics.

herald's stdout belongs to the wrapped command's status frames and summary,
so every log record goes to stderr (or an explicit stream). Records are
rendered by structlog, either for a human (colored only when the stream is a
terminal) or as one JSON object per line when ``HERALD_LOG_FORMAT=json``.

The level defaults to WARNING: a normal run logs nothing. ``-v`` / ``-vv``
on the command line, the ``verbosity`` setting or ``HERALD_LOG_LEVEL`` raise
it to see classification and spinner events.

Usage:
    from herald.logging import configure_logging, get_logger

    configure_logging(level=logging.DEBUG)

    log = get_logger(__name__).bind(label="unit tests")
    log.debug("line_classified", line_type="error", importance=5)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO, Any

import structlog
from structlog.types import Processor

__all__ = [
    "get_logger",
    "configure_logging",
    "parse_level",
    "bind_context",
    "clear_context",
]

LOG_FORMAT_ENV_VAR = "HERALD_LOG_FORMAT"
LOG_LEVEL_ENV_VAR = "HERALD_LOG_LEVEL"

DEFAULT_LOG_LEVEL = logging.WARNING


def parse_level(name: str | None, default: int = DEFAULT_LOG_LEVEL) -> int:
    """Turn a level name such as ``"debug"`` into a logging constant.

    Unknown or empty names give ``default``.

    >>> parse_level("info") == logging.INFO
    True
    >>> parse_level("chatty") == logging.WARNING
    True
    """
    if not name:
        return default
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default


def _wants_json() -> bool:
    return os.environ.get(LOG_FORMAT_ENV_VAR, "").lower() == "json"


def _pre_chain() -> list[Processor]:
    """Processors applied to structlog and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(use_json: bool, colors: bool) -> Processor:
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=colors, exception_formatter=structlog.dev.plain_traceback
    )


def configure_logging(
    *,
    force_json: bool = False,
    level: int | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Route herald's logs to stderr at the requested level.

    Safe to call more than once: the CLI calls it before loading the config
    (so config warnings already land on stderr) and again once the level from
    flags and settings is known. Each call replaces the previous handler.

    Args:
        force_json: Render JSON lines even without ``HERALD_LOG_FORMAT=json``.
        level: Log level; when None, ``HERALD_LOG_LEVEL`` or WARNING.
        stream: Destination, ``sys.stderr`` by default.
    """
    use_json = force_json or _wants_json()
    if level is None:
        level = parse_level(os.environ.get(LOG_LEVEL_ENV_VAR))
    if stream is None:
        stream = sys.stderr
    colors = not use_json and stream.isatty() and "NO_COLOR" not in os.environ

    exc_processor: Processor = (
        structlog.processors.dict_tracebacks
        if use_json
        else structlog.processors.format_exc_info
    )
    structlog.configure(
        processors=[
            *_pre_chain(),
            exc_processor,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(use_json, colors),
            ],
            foreign_pre_chain=_pre_chain(),
        )
    )

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, usually ``get_logger(__name__)``."""
    log: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return log


def bind_context(**context: Any) -> None:
    """Attach ``context`` to every record logged from this context.

    The CLI binds the wrapped command for the duration of a run:

        bind_context(command="make")
        try:
            console.run(None, "make", "all")
        finally:
            clear_context()
    """
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    """Drop everything bound with ``bind_context``."""
    structlog.contextvars.clear_contextvars()
