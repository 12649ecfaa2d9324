"""Command runner feeding classified output into a TaskState.

This module provides the CommandRunner class, which spawns the wrapped
command, reads stdout and stderr on one thread each, classifies every line
and appends it to the task. The calling thread waits for the process and
handles cancellation.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import IO

from herald.constants import (
    DEFAULT_MAX_LINE_LENGTH,
    INTERNAL_LINE_PREFIX,
    TERMINATION_GRACE_PERIOD,
)
from herald.design.models import CognitiveLoad, LineContext, LineType
from herald.design.recognition import LineClassifier
from herald.design.task import TaskState
from herald.exceptions import CommandNotFoundError, WorkingDirectoryError
from herald.logging import get_logger

__all__ = ["CommandRunner", "EXIT_NOT_FOUND", "EXIT_PERMISSION_DENIED"]

logger = get_logger(__name__)

EXIT_NOT_FOUND = 127
EXIT_PERMISSION_DENIED = 126
EXIT_INTERNAL_ERROR = 1

#: Seconds between cancellation checks while waiting for the child
_POLL_INTERVAL = 0.05

_INTERNAL_CONTEXT = LineContext(
    cognitive_load=CognitiveLoad.HIGH, importance=5, is_internal=True
)


class CommandRunner:
    """Run a command and record its classified output.

    Provides:
    - Two reader threads, one per captured stream, so neither pipe can fill
      up and block the child
    - Line decoding (UTF-8, invalid bytes replaced) and truncation
    - Cancellation with graceful termination (SIGTERM + grace period + SIGKILL)
    - Startup failures reported as internal error lines, never raised

    Attributes:
        classifier: Classifier applied to every captured line.
        cwd: Working directory for the command.
        env: Additional environment variables merged over os.environ.
        max_line_length: Lines longer than this are truncated.

    Example:
        ```python
        classifier = LineClassifier()
        task = TaskState("tests", "testing", "pytest", ["-q"])
        exit_code = CommandRunner(classifier).run(task)
        task.complete(exit_code)
        ```
    """

    def __init__(
        self,
        classifier: LineClassifier,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
    ) -> None:
        self.classifier = classifier
        self.cwd = cwd
        self.env = dict(env or {})
        self.max_line_length = max_line_length

    def _validate_cwd(self) -> None:
        """Raise WorkingDirectoryError if ``cwd`` is not a directory."""
        if self.cwd is not None and not self.cwd.is_dir():
            raise WorkingDirectoryError(
                f"Working directory does not exist: {self.cwd}",
                path=self.cwd,
            )

    def _build_env(self) -> dict[str, str]:
        env = os.environ.copy()
        env.update(self.env)
        return env

    def _resolve_executable(self, command: str, env: Mapping[str, str]) -> str:
        """Resolve ``command`` against PATH.

        Raises:
            CommandNotFoundError: If no executable is found.
        """
        if os.path.dirname(command) and os.path.exists(command):
            return command
        resolved = shutil.which(command, path=env.get("PATH"))
        if resolved is None:
            raise CommandNotFoundError(
                f"Command not found: {command}", executable=command
            )
        return resolved

    def run(
        self,
        task: TaskState,
        cancel: threading.Event | None = None,
        stream: bool = False,
    ) -> int:
        """Run the task's command to completion.

        The task is not completed here; the caller passes the returned exit
        code to ``TaskState.complete()``.

        Args:
            task: Task whose command and args are run and which receives the
                output lines.
            cancel: When set, the child is terminated.
            stream: Pass stdout straight through to the terminal. stderr is
                still captured, echoed, and recorded as detail lines.

        Returns:
            The exit code. 127 when the command is not found, 126 when it
            cannot be executed, 128 + N when killed by signal N.

        Raises:
            WorkingDirectoryError: If ``cwd`` does not exist.
        """
        self._validate_cwd()
        env = self._build_env()
        log = logger.bind(label=task.label, command=task.command)

        try:
            executable = self._resolve_executable(task.command, env)
            process = subprocess.Popen(
                [executable, *task.args],
                stdin=None if stream else subprocess.DEVNULL,
                stdout=None if stream else subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=self.cwd,
                env=env,
            )
        except CommandNotFoundError as e:
            log.debug("command_not_found", executable=e.executable)
            self._add_internal_line(task, e.message)
            return EXIT_NOT_FOUND
        except PermissionError as e:
            log.debug("command_permission_denied", error=str(e))
            self._add_internal_line(task, f"Permission denied: {task.command}")
            return EXIT_PERMISSION_DENIED
        except OSError as e:
            log.warning("command_start_failed", error=str(e))
            self._add_internal_line(task, f"Error starting command: {e}")
            return EXIT_INTERNAL_ERROR

        log.debug("command_started", pid=process.pid, stream=stream)

        readers: list[threading.Thread] = []
        if process.stdout is not None:
            readers.append(self._start_reader(task, process.stdout, "stdout"))
        if process.stderr is not None:
            readers.append(
                self._start_reader(task, process.stderr, "stderr", echo=stream)
            )

        returncode = self._wait(process, cancel)
        for reader in readers:
            reader.join()

        exit_code = returncode if returncode >= 0 else 128 - returncode
        log.debug("command_exited", exit_code=exit_code)
        return exit_code

    def _wait(
        self,
        process: subprocess.Popen[bytes],
        cancel: threading.Event | None,
    ) -> int:
        """Wait for the child, stopping it when ``cancel`` is set.

        The child is also stopped when the wait itself is interrupted, e.g. by
        KeyboardInterrupt, so it never outlives herald.
        """
        try:
            while True:
                try:
                    return process.wait(timeout=_POLL_INTERVAL)
                except subprocess.TimeoutExpired:
                    if cancel is not None and cancel.is_set():
                        return self._terminate(process)
        except BaseException:
            if process.poll() is None:
                self._terminate(process)
            raise

    def _terminate(self, process: subprocess.Popen[bytes]) -> int:
        """Stop the child: SIGTERM, then SIGKILL after the grace period."""
        logger.info("command_cancelled", pid=process.pid)
        process.terminate()
        try:
            return process.wait(timeout=TERMINATION_GRACE_PERIOD)
        except subprocess.TimeoutExpired:
            logger.warning("command_killed", pid=process.pid)
            process.kill()
            return process.wait()

    def _start_reader(
        self,
        task: TaskState,
        pipe: IO[bytes],
        stream_name: str,
        echo: bool = False,
    ) -> threading.Thread:
        thread = threading.Thread(
            target=self._read_stream,
            args=(task, pipe, stream_name, echo),
            name=f"herald-{stream_name}-reader",
            daemon=True,
        )
        thread.start()
        return thread

    def _read_stream(
        self,
        task: TaskState,
        pipe: IO[bytes],
        stream_name: str,
        echo: bool,
    ) -> None:
        """Classify and record every line of ``pipe`` until EOF."""
        try:
            with pipe:
                for raw in iter(pipe.readline, b""):
                    content = raw.decode("utf-8", errors="replace").rstrip("\r\n")
                    if len(content) > self.max_line_length:
                        content = content[: self.max_line_length]
                    if echo:
                        sys.stderr.write(content + "\n")
                        sys.stderr.flush()
                        task.add_output_line(content, LineType.DETAIL)
                        continue
                    line_type, context = self.classifier.classify_output_line(
                        content, task.command, task.args
                    )
                    task.add_output_line(content, line_type, context)
        except (OSError, ValueError) as e:
            logger.warning("stream_read_failed", stream=stream_name, error=str(e))
            self._add_internal_line(task, f"Error reading {stream_name}: {e}")

    @staticmethod
    def _add_internal_line(task: TaskState, message: str) -> None:
        task.add_output_line(
            f"{INTERNAL_LINE_PREFIX}{message}", LineType.ERROR, _INTERNAL_CONTEXT
        )
