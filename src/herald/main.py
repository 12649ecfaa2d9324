"""CLI entry point for herald.

This module defines the Click-based command-line interface:

    herald [OPTIONS] -- COMMAND [ARGS]...

herald exits with the wrapped command's exit code.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from dotenv import load_dotenv

from herald.logging import (
    bind_context,
    clear_context,
    configure_logging,
    parse_level,
)

# Load environment variables from .env in the current directory before any
# HERALD_* setting is read
load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

from herald import __version__  # noqa: E402
from herald.cli.console import err_console, make_console  # noqa: E402
from herald.cli.context import ExitCode  # noqa: E402
from herald.cli.output import format_config_error, format_error  # noqa: E402
from herald.config import HeraldConfig, load_config  # noqa: E402
from herald.console import Console  # noqa: E402
from herald.exceptions import ConfigError, WorkingDirectoryError  # noqa: E402


def _log_level(config: HeraldConfig, verbose: int, quiet: bool) -> int:
    """Resolve the log level. Priority: quiet > verbose > config."""
    if quiet:
        return logging.ERROR
    if verbose > 0:
        return logging.INFO if verbose == 1 else logging.DEBUG
    return parse_level(config.verbosity)


def _apply_flags(
    config: HeraldConfig,
    *,
    stream: bool,
    show_output: str | None,
    ci: bool,
    no_color: bool,
    no_spinner: bool,
    no_timer: bool,
    verbose: int = 0,
) -> HeraldConfig:
    """Overlay command-line flags on the loaded configuration.

    Flags only ever switch a setting on, so an unset flag leaves the value
    from the config files or environment alone.
    """
    update: dict[str, object] = {}
    if stream:
        update["stream"] = True
    if show_output is not None:
        update["show_output"] = show_output
    if ci:
        update["ci"] = True
    if no_color:
        update["no_color"] = True
    if no_timer:
        update["no_timer"] = True
    if no_spinner:
        update["style"] = config.style.model_copy(update={"no_spinner": True})
    if verbose >= 2:
        update["verbosity"] = "debug"
    if not update:
        return config
    return config.model_copy(update=update)


@click.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
        "help_option_names": ["-h", "--help"],
    }
)
@click.version_option(version=__version__, prog_name="herald")
@click.option("-l", "--label", default=None, help="Label shown for the task.")
@click.option(
    "-s",
    "--stream",
    is_flag=True,
    default=False,
    help="Stream the command's stdout instead of capturing it.",
)
@click.option(
    "--show-output",
    type=click.Choice(["on-fail", "always", "never"]),
    default=None,
    help="When to print captured output (default: on-fail).",
)
@click.option("--ci", is_flag=True, default=False, help="Plain output for CI logs.")
@click.option("--no-color", is_flag=True, default=False, help="Disable colors.")
@click.option(
    "--no-spinner", is_flag=True, default=False, help="Disable the spinner."
)
@click.option(
    "--no-timer", is_flag=True, default=False, help="Hide durations in end lines."
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=False, path_type=str),
    default=None,
    help="Path to config file (overrides ./.herald.yaml).",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase log verbosity (-v for INFO, -vv for DEBUG).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Only log errors.",
)
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def cli(
    ctx: click.Context,
    label: str | None,
    stream: bool,
    show_output: str | None,
    ci: bool,
    no_color: bool,
    no_spinner: bool,
    no_timer: bool,
    config_file: str | None,
    verbose: int,
    quiet: bool,
    command: tuple[str, ...],
) -> None:
    """herald - run a command and show what matters in its output."""
    if not command:
        raise click.UsageError("No command given. Usage: herald [OPTIONS] -- COMMAND")

    # Config loading may log; route it to stderr before the real level is known
    configure_logging()
    config_path = Path(config_file) if config_file else None
    try:
        config = load_config(config_path)
    except ConfigError as e:
        err_console.print(format_config_error(e), markup=False, highlight=False)
        ctx.exit(ExitCode.FAILURE)

    config = _apply_flags(
        config,
        stream=stream,
        show_output=show_output,
        ci=ci,
        no_color=no_color,
        no_spinner=no_spinner,
        no_timer=no_timer,
        verbose=verbose,
    )
    configure_logging(level=_log_level(config, verbose, quiet))

    console = Console(config, out=make_console(no_color=config.is_monochrome))
    bind_context(command=command[0])
    try:
        result = console.run(label, command[0], *command[1:])
    except WorkingDirectoryError as e:
        err_console.print(format_error(e.message), markup=False, highlight=False)
        ctx.exit(ExitCode.FAILURE)
    except KeyboardInterrupt:
        err_console.print("Interrupted", markup=False, highlight=False)
        ctx.exit(ExitCode.INTERRUPTED)
    finally:
        clear_context()

    ctx.exit(result.exit_code)


if __name__ == "__main__":
    cli()
