"""Run a command and render its progress and output.

Console is the entry point for library users and the CLI. It wires a
LineClassifier, a TaskState, a CommandRunner and a LiveProgress together:

    console = Console(load_config())
    result = console.run("unit tests", "pytest", "-q")
    sys.exit(result.exit_code)

Two output modes exist. In capture mode (default) output is collected,
classified and shown after the command according to ``show_output``. In
stream mode stdout goes straight to the terminal while stderr is echoed and
recorded.
"""

from __future__ import annotations

import os
import signal
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from types import FrameType

from rich.console import Console as RichConsole
from rich.text import Text

from herald.config import HeraldConfig
from herald.design.models import OutputLine, TaskStatus
from herald.design.progress import LiveProgress
from herald.design.recognition import LineClassifier
from herald.design.render import (
    render_end_line,
    render_output_line,
    render_start_line,
    render_summary,
)
from herald.design.task import TaskState
from herald.logging import get_logger
from herald.runners import CommandRunner

__all__ = ["Console", "TaskResult", "cancel_on_signals"]

logger = get_logger(__name__)

#: Seconds to wait for the spinner thread after the final frame
_SPINNER_JOIN_TIMEOUT = 1.0

#: Signals that stop the wrapped command instead of herald itself
_CANCEL_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@contextmanager
def cancel_on_signals(cancel: threading.Event) -> Iterator[None]:
    """Set ``cancel`` when SIGINT or SIGTERM arrives, for the duration of the block.

    herald then stops the child, draws the final frame and restores the
    terminal before exiting. The previous handlers are reinstalled on exit.
    Handlers can only be installed from the main thread; elsewhere this does
    nothing and the caller keeps the default behaviour.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def handle(signum: int, frame: FrameType | None) -> None:
        cancel.set()

    previous = {sig: signal.signal(sig, handle) for sig in _CANCEL_SIGNALS}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            # None means the handler was not installed from Python
            signal.signal(sig, signal.SIG_DFL if handler is None else handler)


@dataclass(frozen=True, slots=True)
class TaskResult:
    """Outcome of one wrapped command.

    Attributes:
        label: Display label.
        intent: Detected purpose of the command.
        status: Final status.
        duration: Run time.
        exit_code: Exit code of the command (127/126 on startup failures).
        lines: Classified output, in arrival order.
    """

    label: str
    intent: str
    status: TaskStatus
    duration: timedelta
    exit_code: int
    lines: tuple[OutputLine, ...]

    @property
    def success(self) -> bool:
        """True when the command exited with code 0."""
        return self.exit_code == 0


class Console:
    """Orchestrates running, classifying and rendering one command at a time.

    Attributes:
        config: Effective configuration.
        out: Destination rich console.
        classifier: Classifier built from ``config``; reused across runs.
        cwd: Working directory for wrapped commands.
        env: Extra environment variables for wrapped commands.
    """

    def __init__(
        self,
        config: HeraldConfig | None = None,
        out: RichConsole | None = None,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config or HeraldConfig()
        self.out = out or RichConsole(
            no_color=self.config.is_monochrome, highlight=False
        )
        self.classifier = LineClassifier.from_config(self.config)
        self.cwd = cwd
        self.env = dict(env or {})

    def run(
        self,
        label: str | None,
        command: str,
        *args: str,
        cancel: threading.Event | None = None,
    ) -> TaskResult:
        """Run ``command`` with ``args`` and render the result.

        Failures of the wrapped command are reported through the returned
        status and exit code, never raised.

        Args:
            label: Display label; falls back to the tool config label, then
                the command's base name.
            command: Executable to run.
            *args: Its arguments.
            cancel: Set from another thread to stop the command. SIGINT and
                SIGTERM set it too while the command runs.

        Returns:
            The task outcome.

        Raises:
            WorkingDirectoryError: If ``cwd`` does not exist.
        """
        config = self.config
        name = os.path.basename(command)
        tool = config.find_tool(name, args)
        if not label:
            label = tool.label if tool and tool.label else name
        stream = config.stream or bool(tool and tool.stream)
        intent = self.classifier.detect_command_intent(command, args)

        task = TaskState(
            label, intent, command, args, thresholds=config.complexity_thresholds
        )
        runner = CommandRunner(
            self.classifier,
            cwd=self.cwd,
            env=self.env,
            max_line_length=config.max_line_length,
        )
        progress = LiveProgress(
            task,
            self.out,
            config.style,
            ci=config.ci,
            monochrome=config.is_monochrome,
            debug=config.verbosity == "debug",
        )
        monochrome = config.is_monochrome or not progress.is_interactive
        use_progress = config.style.use_inline_progress and not stream
        enable_spinner = not config.style.no_spinner
        hide_cursor = use_progress and enable_spinner and progress.is_interactive

        log = logger.bind(label=label, command=command)
        log.debug("task_starting", intent=intent, stream=stream)

        if not use_progress:
            self.out.print(render_start_line(task, monochrome))

        if cancel is None:
            cancel = threading.Event()
        spinner_stop = threading.Event()
        if hide_cursor:
            self.out.show_cursor(False)
        try:
            if use_progress:
                progress.start(spinner_stop, enable_spinner=enable_spinner)
            with cancel_on_signals(cancel):
                exit_code = runner.run(task, cancel=cancel, stream=stream)
            if cancel.is_set():
                log.info("task_cancelled", exit_code=exit_code)
            task.complete(exit_code)
            task.update_context()
            if use_progress:
                progress.complete(task.status)
            else:
                self.out.print(
                    render_end_line(task, monochrome, show_timer=not config.no_timer)
                )
        finally:
            spinner_stop.set()
            if progress.is_active:
                progress.complete(TaskStatus.ERROR)
            progress.join(_SPINNER_JOIN_TIMEOUT)
            if hide_cursor:
                self.out.show_cursor(True)

        if not stream:
            self._render_captured_output(task, exit_code, monochrome)
        else:
            self._print_summary(task, monochrome)

        log.debug(
            "task_finished",
            status=task.status.value,
            exit_code=exit_code,
            lines=task.line_count,
        )
        return TaskResult(
            label=task.label,
            intent=task.intent,
            status=task.status,
            duration=task.duration,
            exit_code=exit_code,
            lines=tuple(task.snapshot()),
        )

    def _render_captured_output(
        self, task: TaskState, exit_code: int, monochrome: bool
    ) -> None:
        """Apply the ``show_output`` mode after the task completed.

        ``always`` prints the summary and captured output. ``on-fail`` does the
        same for a non-zero exit code. Otherwise only tasks ending in error or
        warning get a summary.
        """
        mode = self.config.show_output
        show_captured = mode == "always" or (mode == "on-fail" and exit_code != 0)
        has_issues = task.status in (TaskStatus.ERROR, TaskStatus.WARNING)

        if not show_captured:
            if has_issues:
                self._print_summary(task, monochrome)
            return

        self._print_summary(task, monochrome)
        lines = task.snapshot()
        if not any(not line.context.is_internal for line in lines):
            # Only herald's own lines, e.g. a startup failure.
            for line in lines:
                self.out.print(render_output_line(line, monochrome))
            return

        header = "--- Captured output: ---"
        self.out.print(Text(header) if monochrome else Text(header, style="dim"))
        for line in lines:
            self.out.print(render_output_line(line, monochrome))

    def _print_summary(self, task: TaskState, monochrome: bool) -> None:
        summary = render_summary(task, self.classifier, monochrome)
        if summary is not None:
            self.out.print(summary)
