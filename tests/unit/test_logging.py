"""Tests for the herald.logging module."""

from __future__ import annotations

import io
import json
import logging
import os
from unittest.mock import patch

import pytest
import structlog

from herald.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    parse_level,
)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_default_level_is_warning(self) -> None:
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("HERALD_LOG_LEVEL", None)
            configure_logging()

        assert logging.getLogger().level == logging.WARNING

    def test_level_from_env(self) -> None:
        with patch.dict(os.environ, {"HERALD_LOG_LEVEL": "debug"}):
            configure_logging()

        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_env_level_falls_back_to_warning(self) -> None:
        with patch.dict(os.environ, {"HERALD_LOG_LEVEL": "chatty"}):
            configure_logging()

        assert logging.getLogger().level == logging.WARNING

    def test_explicit_level_wins_over_env(self) -> None:
        with patch.dict(os.environ, {"HERALD_LOG_LEVEL": "ERROR"}):
            configure_logging(level=logging.INFO)

        assert logging.getLogger().level == logging.INFO

    def test_reconfigure_keeps_single_handler(self) -> None:
        configure_logging()
        configure_logging()

        assert len(logging.getLogger().handlers) == 1


class TestParseLevel:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            (" warning ", logging.WARNING),
            ("error", logging.ERROR),
            ("chatty", logging.WARNING),
            ("", logging.WARNING),
            (None, logging.WARNING),
        ],
    )
    def test_names(self, name: str | None, expected: int) -> None:
        assert parse_level(name) == expected

    def test_custom_default(self) -> None:
        assert parse_level("nope", default=logging.ERROR) == logging.ERROR


class TestLogOutput:
    """Logs go to stderr, never into rendered stdout."""

    def test_logs_go_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level=logging.INFO)

        get_logger("herald.test").info("task_started", command="make")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "task_started" in captured.err

    def test_explicit_stream(self, capsys: pytest.CaptureFixture[str]) -> None:
        buffer = io.StringIO()
        configure_logging(level=logging.INFO, stream=buffer)

        get_logger("herald.test.stream").info("spinner_started", interval_ms=180)

        assert "spinner_started" in buffer.getvalue()
        assert "\x1b[" not in buffer.getvalue()
        assert capsys.readouterr().err == ""

    def test_json_output_via_env(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch.dict(os.environ, {"HERALD_LOG_FORMAT": "json"}):
            configure_logging(level=logging.INFO)

        get_logger("herald.test.json").info("line_classified", importance=5)

        err = capsys.readouterr().err
        assert "line_classified" in err
        assert "importance" in err

    def test_force_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(force_json=True, level=logging.WARNING)

        get_logger("herald.test.forced").warning("invalid_output_pattern", pattern="([")

        last_line = capsys.readouterr().err.strip().splitlines()[-1]
        payload = json.loads(last_line)
        assert "invalid_output_pattern" in payload["event"]

    def test_below_level_is_dropped(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level=logging.WARNING)

        get_logger("herald.test.quiet").debug("spinner_stopped", reason="cancelled")

        assert "spinner_stopped" not in capsys.readouterr().err


class TestContextBinding:
    """Tests for context binding functions."""

    def test_bind_and_clear(self) -> None:
        clear_context()

        bind_context(label="build", command="make")
        assert structlog.contextvars.get_contextvars() == {
            "label": "build",
            "command": "make",
        }

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_bound_context_appears_in_output(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(level=logging.INFO)
        clear_context()
        bind_context(label="unit tests")
        try:
            get_logger("herald.test.ctx").info("task_completed")
        finally:
            clear_context()

        assert "unit tests" in capsys.readouterr().err
