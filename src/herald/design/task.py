"""Concurrency-safe record of one wrapped command.

TaskState accumulates classified output lines from the stdout and stderr
reader threads while a renderer reads them. A single lock covers the line
list, the error/warning counters and the derived context, so appends and
context updates are atomic with respect to each other.

Readers never touch the list directly: they take a ``snapshot()`` copy or
run a callback under ``with_lock()``.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import TypeVar

from herald.config import ComplexityThresholds
from herald.design.cognitive import complexity_for, load_for
from herald.design.models import (
    LineContext,
    LineType,
    OutputLine,
    TaskContext,
    TaskStatus,
)
from herald.logging import get_logger

__all__ = ["TaskState"]

logger = get_logger(__name__)

T = TypeVar("T")


class TaskState:
    """A command execution and its classified output.

    Attributes:
        label: Display label.
        intent: Detected purpose of the command (e.g. "testing").
        command: Executable as given by the caller.
        args: Arguments, immutable.
        start_time: Wall-clock creation time.
        end_time: Wall-clock completion time, None while running.
        duration: Run time, computed at completion.
        exit_code: Exit code, set exactly once at completion.
        status: Derived status; only ``complete()`` changes it.
        context: Cognitive context, refreshed by ``update_context()``.

    Example:
        ```python
        task = TaskState("tests", "testing", "pytest", ["-q"])
        task.add_output_line("1 passed", LineType.SUCCESS, LineContext(importance=3))
        task.complete(0)
        assert task.status is TaskStatus.SUCCESS
        ```
    """

    def __init__(
        self,
        label: str,
        intent: str,
        command: str,
        args: Sequence[str] = (),
        thresholds: ComplexityThresholds | None = None,
    ) -> None:
        self._label = label
        self._intent = intent
        self._command = command
        self._args = tuple(args)
        self._thresholds = thresholds or ComplexityThresholds()

        self.start_time: datetime = datetime.now()
        self._start_monotonic = time.monotonic()
        self.end_time: datetime | None = None
        self.duration: timedelta = timedelta(0)
        self.exit_code: int | None = None
        self.status: TaskStatus = TaskStatus.RUNNING

        self._lock = threading.Lock()
        self._lines: list[OutputLine] = []
        self._error_count = 0
        self._warning_count = 0
        self._context = TaskContext()

    @property
    def label(self) -> str:
        return self._label

    @property
    def intent(self) -> str:
        return self._intent

    @property
    def command(self) -> str:
        return self._command

    @property
    def args(self) -> tuple[str, ...]:
        return self._args

    @property
    def is_complete(self) -> bool:
        """True once ``complete()`` has run."""
        return self.status is not TaskStatus.RUNNING

    @property
    def context(self) -> TaskContext:
        with self._lock:
            return self._context

    @property
    def line_count(self) -> int:
        with self._lock:
            return len(self._lines)

    def elapsed(self) -> timedelta:
        """Time since start, or the final duration once complete."""
        if self.is_complete:
            return self.duration
        return timedelta(seconds=time.monotonic() - self._start_monotonic)

    def add_output_line(
        self,
        content: str,
        line_type: LineType,
        context: LineContext | None = None,
        indentation: int = 0,
    ) -> None:
        """Append a classified line.

        Classification must happen before this call; the lock is held only
        for the append and the counter update.

        Args:
            content: Raw line text.
            line_type: Category assigned by the classifier.
            context: Per-line metadata.
            indentation: Indent level for rendering.
        """
        line = OutputLine(
            content=content,
            type=line_type,
            timestamp=datetime.now(),
            indentation=indentation,
            context=context or LineContext(),
        )
        with self._lock:
            self._lines.append(line)
            if line_type is LineType.ERROR:
                self._error_count += 1
            elif line_type is LineType.WARNING:
                self._warning_count += 1

    def complete(self, exit_code: int) -> TaskStatus:
        """Finalize the task.

        A non-zero exit code is an error. With a zero exit code, any error
        line still makes the task an error, then any warning line makes it a
        warning; otherwise it succeeded. Only the first call has an effect,
        even when several threads race to complete the task.

        Args:
            exit_code: Exit code of the wrapped command.

        Returns:
            The final status.
        """
        error_count = warning_count = 0
        with self._lock:
            already_complete = self.status is not TaskStatus.RUNNING
            if not already_complete:
                end = time.monotonic()
                self.end_time = datetime.now()
                self.duration = timedelta(seconds=end - self._start_monotonic)
                self.exit_code = exit_code
                error_count = self._error_count
                warning_count = self._warning_count

                if exit_code != 0:
                    self.status = TaskStatus.ERROR
                elif error_count > 0:
                    self.status = TaskStatus.ERROR
                elif warning_count > 0:
                    self.status = TaskStatus.WARNING
                else:
                    self.status = TaskStatus.SUCCESS
            status = self.status

        if already_complete:
            logger.debug(
                "task_already_complete",
                label=self._label,
                status=status.value,
                exit_code=exit_code,
            )
            return status

        logger.debug(
            "task_completed",
            label=self._label,
            exit_code=exit_code,
            status=status.value,
            errors=error_count,
            warnings=warning_count,
        )
        return status

    def update_context(self) -> TaskContext:
        """Recompute complexity and cognitive load from the output so far.

        Returns:
            The new task context.
        """
        with self._lock:
            complexity = complexity_for(len(self._lines), self._thresholds)
            load = load_for(
                self._error_count, self._warning_count, complexity, self._thresholds
            )
            self._context = TaskContext(
                cognitive_load=load,
                complexity=complexity,
                is_detail_view=self._context.is_detail_view,
            )
            return self._context

    def set_detail_view(self, enabled: bool) -> None:
        with self._lock:
            self._context = TaskContext(
                cognitive_load=self._context.cognitive_load,
                complexity=self._context.complexity,
                is_detail_view=enabled,
            )

    def counts(self) -> tuple[int, int]:
        """Return ``(error_count, warning_count)``."""
        with self._lock:
            return self._error_count, self._warning_count

    def snapshot(self) -> list[OutputLine]:
        """Return an independent copy of the output lines.

        The copy can be iterated for as long as rendering takes without
        blocking the reader threads.
        """
        with self._lock:
            return list(self._lines)

    def with_lock(self, fn: Callable[[Sequence[OutputLine]], T]) -> T:
        """Call ``fn`` with a read-only view of the lines while holding the lock.

        Args:
            fn: Callback receiving the lines. It must not call back into this
                task.

        Returns:
            Whatever ``fn`` returns.
        """
        with self._lock:
            return fn(tuple(self._lines))
