"""Tests for the herald command-line entry point."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import sys
import time
from pathlib import Path

import pytest
from click.testing import CliRunner

from herald import __version__
from herald.cli.context import ExitCode
from herald.config import HeraldConfig
from herald.main import _apply_flags, _log_level, cli


@pytest.fixture
def workdir(temp_dir: Path, clean_env: None) -> Path:
    os.chdir(temp_dir)
    return temp_dir


def test_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["-h"])

    assert result.exit_code == 0
    assert "--show-output" in result.output


def test_no_command_is_usage_error(cli_runner: CliRunner, workdir: Path) -> None:
    result = cli_runner.invoke(cli, [])

    assert result.exit_code == ExitCode.USAGE
    assert "No command given" in result.output


class TestRun:
    """End-to-end runs of a Python child process."""

    def test_success(self, cli_runner: CliRunner, workdir: Path) -> None:
        result = cli_runner.invoke(
            cli, ["-l", "hello", "--", sys.executable, "-c", "print('hi')"]
        )

        assert result.exit_code == 0
        assert "[OK] hello [" in result.output

    def test_exit_code_passes_through(self, cli_runner: CliRunner, workdir: Path) -> None:
        result = cli_runner.invoke(
            cli, ["--", sys.executable, "-c", "import sys; sys.exit(3)"]
        )

        assert result.exit_code == 3

    def test_command_options_are_not_parsed(
        self, cli_runner: CliRunner, workdir: Path
    ) -> None:
        """Everything after the command belongs to the command."""
        result = cli_runner.invoke(
            cli, ["-l", "inline", sys.executable, "-c", "import sys; sys.exit(5)"]
        )

        assert result.exit_code == 5
        assert "[ERROR] inline [" in result.output

    def test_failure_shows_captured_output(
        self, cli_runner: CliRunner, workdir: Path
    ) -> None:
        result = cli_runner.invoke(
            cli,
            [
                "--ci",
                "--",
                sys.executable,
                "-c",
                "import sys; print('Error: disk full'); sys.exit(1)",
            ],
        )

        assert result.exit_code == 1
        assert "SUMMARY:" in result.output
        assert "--- Captured output: ---" in result.output
        assert "> Error: disk full" in result.output

    def test_show_output_always(self, cli_runner: CliRunner, workdir: Path) -> None:
        result = cli_runner.invoke(
            cli,
            ["--show-output", "always", "--", sys.executable, "-c", "print('quiet line')"],
        )

        assert result.exit_code == 0
        assert "quiet line" in result.output

    def test_show_output_from_config_file(
        self, cli_runner: CliRunner, workdir: Path
    ) -> None:
        (workdir / "custom.yaml").write_text("show_output: always\n")

        result = cli_runner.invoke(
            cli,
            ["-c", "custom.yaml", "--", sys.executable, "-c", "print('quiet line')"],
        )

        assert result.exit_code == 0
        assert "quiet line" in result.output

    def test_command_not_found(self, cli_runner: CliRunner, workdir: Path) -> None:
        result = cli_runner.invoke(cli, ["--", "herald-no-such-command-xyz"])

        assert result.exit_code == ExitCode.NOT_FOUND
        assert "Command not found: herald-no-such-command-xyz" in result.output

    def test_invalid_config(self, cli_runner: CliRunner, workdir: Path) -> None:
        (workdir / ".herald.yaml").write_text("style:\n  spinner_interval_ms: 0\n")

        result = cli_runner.invoke(cli, ["--", sys.executable, "-c", "pass"])

        assert result.exit_code == ExitCode.FAILURE
        assert "Error: Invalid configuration" in result.output
        assert "Field: style.spinner_interval_ms" in result.output


class TestLogLevel:
    @pytest.mark.parametrize(
        ("verbose", "quiet", "expected"),
        [
            (0, False, logging.WARNING),
            (1, False, logging.INFO),
            (2, False, logging.DEBUG),
            (3, False, logging.DEBUG),
            (2, True, logging.ERROR),
        ],
    )
    def test_flags(self, verbose: int, quiet: bool, expected: int) -> None:
        assert _log_level(HeraldConfig(verbosity="warning"), verbose, quiet) == expected

    def test_config_verbosity(self) -> None:
        assert _log_level(HeraldConfig(verbosity="info"), 0, False) == logging.INFO


class TestApplyFlags:
    """CLI flags overlay the loaded configuration."""

    FLAGS = {
        "stream": False,
        "show_output": None,
        "ci": False,
        "no_color": False,
        "no_spinner": False,
        "no_timer": False,
    }

    def test_no_flags_returns_same_config(self) -> None:
        config = HeraldConfig(show_output="always")

        assert _apply_flags(config, **self.FLAGS) is config

    def test_flags_switch_settings_on(self) -> None:
        config = HeraldConfig()

        updated = _apply_flags(
            config,
            **{**self.FLAGS, "stream": True, "ci": True, "no_spinner": True},
            verbose=2,
        )

        assert updated.stream is True
        assert updated.ci is True
        assert updated.is_monochrome is True
        assert updated.style.no_spinner is True
        assert updated.verbosity == "debug"
        assert config.style.no_spinner is False

    def test_unset_flag_keeps_config_value(self) -> None:
        config = HeraldConfig(no_timer=True, show_output="never")

        updated = _apply_flags(config, **{**self.FLAGS, "ci": True})

        assert updated.no_timer is True
        assert updated.show_output == "never"


@pytest.mark.slow
class TestProcess:
    """herald run as its own process, as a pipeline would run it."""

    def herald(self, *args: str) -> list[str]:
        return [sys.executable, "-m", "herald.main", *args]

    def test_stdout_holds_only_frames(self, workdir: Path) -> None:
        completed = subprocess.run(
            self.herald("--ci", "--", sys.executable, "-c", "print('hi')"),
            cwd=workdir,
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert completed.returncode == 0
        lines = completed.stdout.splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("[BUSY] ")
        assert lines[1].startswith("[OK] ")
        assert "project_config_not_found" not in completed.stdout

    def test_config_warnings_go_to_stderr(self, workdir: Path) -> None:
        (workdir / ".herald.yaml").write_text("")

        completed = subprocess.run(
            self.herald("--ci", "--", sys.executable, "-c", "pass"),
            cwd=workdir,
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert "config_file_empty" not in completed.stdout
        assert "config_file_empty" in completed.stderr

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
    def test_sigterm_stops_child_and_renders_outcome(self, workdir: Path) -> None:
        pid_file = workdir / "child.pid"
        script = (
            "import os, time; "
            f"open({str(pid_file)!r}, 'w').write(str(os.getpid())); "
            "time.sleep(30)"
        )
        process = subprocess.Popen(
            self.herald("--ci", "--", sys.executable, "-c", script),
            cwd=workdir,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
        try:
            deadline = time.monotonic() + 30
            while not pid_file.exists() or not pid_file.read_text():
                assert time.monotonic() < deadline, "child never started"
                time.sleep(0.05)

            process.send_signal(signal.SIGTERM)
            stdout, _ = process.communicate(timeout=30)
        finally:
            if process.poll() is None:
                process.kill()
                process.communicate()

        assert process.returncode == 128 + signal.SIGTERM
        assert "[ERROR] " in stdout
        with pytest.raises(ProcessLookupError):
            os.kill(int(pid_file.read_text()), 0)
