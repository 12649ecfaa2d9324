from __future__ import annotations

import logging
import os
import sys
import tempfile
from collections.abc import Generator, Iterator
from io import StringIO
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from rich.console import Console as RichConsole

if TYPE_CHECKING:
    from click.testing import CliRunner


@pytest.fixture(autouse=True)
def configure_test_logging() -> Generator[None, None, None]:
    """Configure structlog for test environment.

    This fixture runs automatically for all tests to ensure logging
    is properly configured to output to stderr (not stdout) and
    suppress verbose log output during tests.
    """
    from herald.logging import configure_logging

    configure_logging(level=logging.WARNING)
    yield


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files.

    Also saves and restores the current working directory to prevent
    tests that use os.chdir() from affecting other tests.
    """
    original_cwd = os.getcwd()
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
    os.chdir(original_cwd)


@pytest.fixture
def clean_env(temp_dir: Path) -> Generator[None, None, None]:
    """Remove all HERALD_ environment variables and hide the user config.

    HOME points at an empty directory so ~/.config/herald/config.yaml of the
    developer running the tests is never read.
    """
    original_env = os.environ.copy()
    for key in list(os.environ.keys()):
        if key.startswith("HERALD_"):
            del os.environ[key]
    home = temp_dir / "home"
    home.mkdir()
    os.environ["HOME"] = str(home)
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def sample_config_yaml() -> str:
    """Return sample .herald.yaml content for testing."""
    return """
patterns:
  intent:
    testing: ["go test", "pytest"]
  output:
    error: ["^Error:", "FAILED"]
    warning: ["deprecated"]

tools:
  pytest:
    label: "Unit tests"
    intent: "testing"
    output_patterns:
      success: ["passed"]

complexity_thresholds:
  medium: 10

style:
  spinner_chars: "abc"
  spinner_interval_ms: 50

show_output: always
verbosity: "info"
"""


@pytest.fixture
def output() -> StringIO:
    """Buffer receiving everything a test console prints."""
    return StringIO()


@pytest.fixture
def plain_console(output: StringIO) -> RichConsole:
    """A non-terminal rich console writing into ``output``."""
    return RichConsole(
        file=output, force_terminal=False, no_color=True, highlight=False, width=200
    )


@pytest.fixture
def terminal_console(output: StringIO) -> RichConsole:
    """A rich console that believes it is a color terminal."""
    return RichConsole(
        file=output,
        force_terminal=True,
        color_system="standard",
        highlight=False,
        width=200,
    )


@pytest.fixture
def python_cmd() -> str:
    """The running interpreter, used as a portable child process."""
    return sys.executable


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner.

    Returns:
        CliRunner instance for testing Click commands.

    Example:
        >>> def test_version(cli_runner):
        ...     from herald.main import cli
        ...     result = cli_runner.invoke(cli, ["--version"])
        ...     assert result.exit_code == 0
    """
    from click.testing import CliRunner

    return CliRunner()
