"""Minimal text rendering for a wrapped command.

Every function returns a rich ``Text`` so callers decide where it goes.
In monochrome mode icons fall back to bracketed ASCII tags and no styles are
applied, which keeps output stable when piped or captured by CI.
"""

from __future__ import annotations

from datetime import timedelta

from rich.text import Text

from herald.design.models import (
    CognitiveLoad,
    LineType,
    OutputLine,
    TaskStatus,
)
from herald.design.recognition import LineClassifier
from herald.design.task import TaskState

__all__ = [
    "format_duration",
    "process_label",
    "status_icon",
    "status_style",
    "render_start_line",
    "render_end_line",
    "render_output_line",
    "render_summary",
]

INDENT = "  "

_ICONS: dict[TaskStatus, str] = {
    TaskStatus.SUCCESS: "✓",
    TaskStatus.WARNING: "⚠",
    TaskStatus.ERROR: "✗",
    TaskStatus.RUNNING: "ℹ",
}

_PLAIN_ICONS: dict[TaskStatus, str] = {
    TaskStatus.SUCCESS: "[OK]",
    TaskStatus.WARNING: "[WARNING]",
    TaskStatus.ERROR: "[ERROR]",
    TaskStatus.RUNNING: "[INFO]",
}

_STATUS_STYLES: dict[TaskStatus, str] = {
    TaskStatus.SUCCESS: "green",
    TaskStatus.WARNING: "yellow",
    TaskStatus.ERROR: "bold red",
    TaskStatus.RUNNING: "cyan",
}

_LINE_STYLES: dict[LineType, str] = {
    LineType.ERROR: "red",
    LineType.WARNING: "yellow",
    LineType.SUCCESS: "green",
    LineType.INFO: "cyan",
    LineType.SUMMARY: "bold",
    LineType.PROGRESS: "dim",
    LineType.DETAIL: "",
}


def format_duration(duration: timedelta) -> str:
    """Format a duration for display.

    Examples:
        >>> format_duration(timedelta(microseconds=250))
        '250µs'
        >>> format_duration(timedelta(milliseconds=42))
        '42ms'
        >>> format_duration(timedelta(seconds=3.5))
        '3.5s'
        >>> format_duration(timedelta(minutes=1, seconds=5, milliseconds=7))
        '1:05.007s'
    """
    micros = duration // timedelta(microseconds=1)
    if micros < 1_000:
        return f"{micros}µs"
    if micros < 1_000_000:
        return f"{micros // 1_000}ms"
    if micros < 60_000_000:
        return f"{duration.total_seconds():.1f}s"
    millis = micros // 1_000
    minutes = millis // 60_000
    seconds = (millis // 1_000) % 60
    return f"{minutes}:{seconds:02d}.{millis % 1_000:03d}s"


def process_label(intent: str) -> str:
    """Capitalize an intent for display ("testing" -> "Testing")."""
    if not intent:
        return "Running"
    return intent[0].upper() + intent[1:].lower()


def status_icon(status: TaskStatus, monochrome: bool) -> str:
    """Icon for a final status; running maps to the info icon."""
    icons = _PLAIN_ICONS if monochrome else _ICONS
    return icons[status]


def status_style(status: TaskStatus) -> str:
    return _STATUS_STYLES[status]


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def render_start_line(task: TaskState, monochrome: bool) -> Text:
    """Line printed before the command runs when inline progress is off."""
    if monochrome:
        return Text(f"[START] {task.label}...")
    text = Text()
    text.append(task.label, style="bold")
    text.append("\n")
    text.append(f"{INDENT}▶ {process_label(task.intent)}...", style="cyan")
    return text


def render_end_line(task: TaskState, monochrome: bool, show_timer: bool = True) -> Text:
    """Line printed after the command finishes when inline progress is off."""
    duration = f" ({format_duration(task.duration)})" if show_timer else ""
    icon = status_icon(task.status, monochrome)
    if monochrome:
        return Text(f"{icon} {task.label}{duration}")
    text = Text(INDENT)
    text.append(f"{icon} ", style=status_style(task.status))
    text.append(process_label(task.intent), style=status_style(task.status))
    text.append(duration, style="dim")
    return text


def render_output_line(line: OutputLine, monochrome: bool) -> Text:
    """Render one captured line, indented under the task."""
    indent = INDENT * (1 + line.indentation)
    if line.context.is_internal:
        prefix = ""
    elif line.type in (LineType.ERROR, LineType.WARNING):
        prefix = "> "
    else:
        prefix = INDENT

    if monochrome:
        return Text(f"{indent}{prefix}{line.content}")

    style = _LINE_STYLES[line.type]
    if line.context.is_highlighted:
        style = f"{style} bold".strip()
    text = Text(indent)
    text.append(prefix, style=style)
    text.append(line.content, style=style)
    return text


def render_summary(
    task: TaskState, classifier: LineClassifier, monochrome: bool
) -> Text | None:
    """Summarize errors and warnings of a finished task.

    Lines herald added itself are left out. Error lines are grouped by
    similarity so that a repeated error is listed once with its count. Tasks
    with high cognitive load and complexity get a note pointing at the
    captured output instead of a longer listing.

    Args:
        task: Finished task.
        classifier: Classifier used to group similar lines.
        monochrome: Render without styles.

    Returns:
        The summary block, or None when there is nothing to report.
    """
    lines = [line for line in task.snapshot() if not line.context.is_internal]
    errors = [line for line in lines if line.type is LineType.ERROR]
    warnings = [line for line in lines if line.type is LineType.WARNING]
    if not errors and not warnings:
        return None

    def styled(content: str, style: str) -> Text:
        return Text(content) if monochrome else Text(content, style=style)

    bullet = "-" if monochrome else "•"
    parts: list[Text] = [Text(), styled(f"{INDENT}SUMMARY:", "bold cyan")]
    if errors:
        parts.append(
            styled(f"{INDENT * 2}{bullet} {_plural(len(errors), 'error')}", "red")
        )
        for group in classifier.find_similar_lines(errors).values():
            repeat = f" (x{len(group)})" if len(group) > 1 else ""
            parts.append(styled(f"{INDENT * 3}{group[0].content}{repeat}", "red"))
    if warnings:
        parts.append(
            styled(f"{INDENT * 2}{bullet} {_plural(len(warnings), 'warning')}", "yellow")
        )

    context = task.context
    if context.cognitive_load is CognitiveLoad.HIGH and context.complexity >= 4:
        parts.append(
            styled(
                f"{INDENT * 2}({task.line_count} lines - see above for details)",
                "dim",
            )
        )
    parts.append(Text())
    return Text("\n").join(parts)
