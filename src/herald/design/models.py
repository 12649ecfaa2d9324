"""Value types shared by the classification and rendering engine.

This module defines:
- Enumerations for line categories, task status and cognitive load
- Frozen dataclasses for per-line context, output lines and compiled patterns
- The mutable-by-replacement TaskContext derived from a task's output

All line-level models are frozen dataclasses with slots so that snapshots
handed to a renderer can never be mutated behind the writer's back.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from herald.constants import DEFAULT_COMPLEXITY, DEFAULT_IMPORTANCE

__all__ = [
    "LineType",
    "TaskStatus",
    "CognitiveLoad",
    "LineContext",
    "OutputLine",
    "TaskContext",
    "CompiledPattern",
    "CATEGORY_PRIORITY",
]


class LineType(str, Enum):
    """Semantic category of a single output line."""

    DETAIL = "detail"
    ERROR = "error"
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"
    PROGRESS = "progress"
    SUMMARY = "summary"


class TaskStatus(str, Enum):
    """Overall status of a wrapped command."""

    RUNNING = "running"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class CognitiveLoad(str, Enum):
    """How much attention a task's output is likely to demand."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


#: Tie-break order when categories share the highest classification score
CATEGORY_PRIORITY: tuple[LineType, ...] = (
    LineType.ERROR,
    LineType.WARNING,
    LineType.SUCCESS,
    LineType.INFO,
    LineType.PROGRESS,
    LineType.SUMMARY,
    LineType.DETAIL,
)


@dataclass(frozen=True, slots=True)
class LineContext:
    """Per-line metadata used for styling and summarization.

    Attributes:
        cognitive_load: Load at the point this line was classified.
        importance: Rating from 1 (noise) to 5 (must read).
        is_highlighted: Whether the line deserves extra emphasis.
        is_summary: Whether the line belongs to a generated summary.
        is_internal: Whether herald produced the line itself rather than the
            wrapped command. Summaries exclude internal lines.
    """

    cognitive_load: CognitiveLoad = CognitiveLoad.MEDIUM
    importance: int = DEFAULT_IMPORTANCE
    is_highlighted: bool = False
    is_summary: bool = False
    is_internal: bool = False


@dataclass(frozen=True, slots=True)
class OutputLine:
    """A classified line of command output.

    Attributes:
        content: Raw text without trailing newline.
        type: Category assigned by the classifier.
        timestamp: Wall-clock time the line was appended.
        indentation: Indent level for rendering.
        context: Per-line metadata.
    """

    content: str
    type: LineType
    timestamp: datetime
    indentation: int = 0
    context: LineContext = field(default_factory=LineContext)


@dataclass(frozen=True, slots=True)
class TaskContext:
    """Cognitive context derived from a task's accumulated output.

    Attributes:
        cognitive_load: Overall load estimate.
        complexity: Heuristic from 1 to 5, driven by output volume.
        is_detail_view: Whether a detailed view is active.
    """

    cognitive_load: CognitiveLoad = CognitiveLoad.MEDIUM
    complexity: int = DEFAULT_COMPLEXITY
    is_detail_view: bool = False


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A precompiled output pattern and the category it votes for.

    Attributes:
        regex: Compiled regular expression.
        category: Category that receives ``weight`` when the regex matches.
        weight: Score contribution of a match.
    """

    regex: re.Pattern[str]
    category: LineType
    weight: int = 1

    def matches(self, line: str) -> bool:
        """True if the pattern matches anywhere in ``line``."""
        return self.regex.search(line) is not None
