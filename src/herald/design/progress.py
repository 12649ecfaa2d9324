"""Live progress line for a running task.

LiveProgress is a two-state machine (inactive / active) driven by
``start()`` and ``complete()``. While active, an optional ticker thread
redraws a single status line with a spinner glyph and the elapsed time.

The active flag is the only state shared with the ticker. It is read and
written under ``_lock``, and every frame is rendered while holding that same
lock, so once ``complete()`` has drawn the final frame no running frame can
follow it. The spinner frame index belongs to the ticker thread alone.
"""

from __future__ import annotations

import os
import threading
import time
from datetime import timedelta

from rich.console import Console
from rich.control import Control, ControlType
from rich.text import Text

from herald.config import StyleConfig
from herald.design.models import TaskStatus
from herald.design.render import format_duration, status_icon, status_style
from herald.design.task import TaskState
from herald.logging import get_logger

__all__ = ["LiveProgress"]

logger = get_logger(__name__)


class LiveProgress:
    """Spinner and status line for one task.

    The display mode is fixed at construction. Interactive mode redraws one
    line in place; plain mode (no terminal, CI, monochrome) prints a line
    when the task starts and another when it ends.

    Attributes:
        task: The task being displayed.
        console: Destination console.
        style: Spinner glyphs and interval.
        ci: Force plain output.
        monochrome: Colors disabled.
        debug: Log spinner lifecycle events.
    """

    def __init__(
        self,
        task: TaskState,
        console: Console,
        style: StyleConfig | None = None,
        ci: bool = False,
        monochrome: bool = False,
        debug: bool = False,
    ) -> None:
        self.task = task
        self.console = console
        self.style = style or StyleConfig()
        self.ci = ci
        self.monochrome = monochrome
        self.debug = debug

        self._is_interactive = console.is_terminal and not ci and not monochrome
        self._lock = threading.Lock()
        self._active = False
        self._start_monotonic = time.monotonic()
        self._ticker: threading.Thread | None = None

    @property
    def is_interactive(self) -> bool:
        """True when frames are redrawn in place."""
        return self._is_interactive

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._active

    def start(self, cancel: threading.Event, enable_spinner: bool = True) -> None:
        """Begin displaying progress.

        Args:
            cancel: Set to stop the ticker; checked on every interval.
            enable_spinner: Animate in interactive mode.
        """
        with self._lock:
            self._active = True
            self._start_monotonic = time.monotonic()
            self._render_running(0)

        if enable_spinner and self._is_interactive:
            self._ticker = threading.Thread(
                target=self._run_ticker,
                args=(cancel,),
                name=f"herald-spinner-{self.task.label}",
                daemon=True,
            )
            self._ticker.start()
            if self.debug:
                logger.debug(
                    "spinner_started",
                    glyphs=self.style.spinner_chars,
                    interval_ms=self.style.spinner_interval_ms,
                )

    def complete(self, status: TaskStatus) -> None:
        """Stop the spinner and draw the final frame.

        Call exactly once, after ``TaskState.complete()`` so the final
        duration is known.
        """
        with self._lock:
            self._active = False
            self._render_final(status)

    def join(self, timeout: float | None = None) -> None:
        """Wait for the ticker thread to exit."""
        if self._ticker is not None:
            self._ticker.join(timeout)

    def running_frame(self, frame_index: int) -> str:
        """Text of a running frame without control sequences."""
        label = self._label()
        if not self._is_interactive:
            return f"[BUSY] {label} [Working...]"
        glyphs = self.style.spinner_chars
        glyph = glyphs[frame_index % len(glyphs)]
        elapsed = timedelta(seconds=time.monotonic() - self._start_monotonic)
        return f"{glyph} {label} [Working {format_duration(elapsed)}]"

    def final_frame(self, status: TaskStatus) -> str:
        """Text of the final frame for ``status``."""
        icon = status_icon(status, not self._is_interactive)
        command = os.path.basename(self.task.command)
        duration = format_duration(self.task.elapsed())
        return f"{icon} {self._label()} [{command}, {duration}]"

    def _label(self) -> str:
        return self.task.label or os.path.basename(self.task.command)

    def _run_ticker(self, cancel: threading.Event) -> None:
        frame_index = 0
        interval = self.style.spinner_interval
        while True:
            if cancel.wait(interval):
                if self.debug:
                    logger.debug("spinner_stopped", reason="cancelled")
                return
            with self._lock:
                if not self._active:
                    if self.debug:
                        logger.debug("spinner_stopped", reason="inactive")
                    return
                frame_index = (frame_index + 1) % len(self.style.spinner_chars)
                self._render_running(frame_index)

    # Callers hold _lock.

    def _render_running(self, frame_index: int) -> None:
        message = self.running_frame(frame_index)
        if not self._is_interactive:
            self.console.print(message, markup=False, highlight=False)
            return
        glyph, _, rest = message.partition(" ")
        text = Text()
        text.append(glyph, style="bright_blue")
        text.append(f" {rest}")
        self._erase_line()
        self.console.print(text, end="", highlight=False)

    def _render_final(self, status: TaskStatus) -> None:
        message = self.final_frame(status)
        if not self._is_interactive:
            self.console.print(message, markup=False, highlight=False)
            return
        icon, _, rest = message.partition(" ")
        label, _, details = rest.rpartition(" [")
        text = Text()
        text.append(icon, style=status_style(status))
        text.append(f" {label} ")
        text.append(f"[{details}", style="dim")
        self._erase_line()
        self.console.print(text, highlight=False)

    def _erase_line(self) -> None:
        self.console.control(
            Control.move_to_column(0),
            Control((ControlType.ERASE_IN_LINE, 2)),
        )
