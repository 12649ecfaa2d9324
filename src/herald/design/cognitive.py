"""Cognitive load estimation.

The estimator turns a batch of classified lines into a single load signal
(low / medium / high) used to adapt rendering verbosity. It is a pure
function of its input: a renderer may estimate load for the last screen of
output, or for the whole run, without touching task state.

The threshold table is shared with ``TaskState.update_context``.
"""

from __future__ import annotations

from collections.abc import Iterable

from herald.config import CognitiveLoadConfig, ComplexityThresholds
from herald.design.models import CognitiveLoad, LineType, OutputLine, TaskContext

__all__ = ["CognitiveLoadEstimator", "complexity_for", "load_for"]


def complexity_for(line_count: int, thresholds: ComplexityThresholds) -> int:
    """Map an output line count to a complexity rating from 2 to 5."""
    if line_count > thresholds.very_high:
        return 5
    if line_count > thresholds.high:
        return 4
    if line_count > thresholds.medium:
        return 3
    return 2


def load_for(
    error_count: int,
    warning_count: int,
    complexity: int,
    thresholds: ComplexityThresholds,
) -> CognitiveLoad:
    """Map issue counts and complexity to a cognitive load.

    High wins over medium, medium over low.
    """
    if error_count > thresholds.error_count_high or complexity >= 4:
        return CognitiveLoad.HIGH
    if (
        error_count > 0
        or warning_count > thresholds.warning_count_medium
        or complexity == 3
    ):
        return CognitiveLoad.MEDIUM
    return CognitiveLoad.LOW


class CognitiveLoadEstimator:
    """Estimate cognitive load over an arbitrary set of lines.

    Attributes:
        config: Auto-detection switch and default load.
        thresholds: Complexity and issue-count thresholds.
    """

    def __init__(
        self,
        config: CognitiveLoadConfig | None = None,
        thresholds: ComplexityThresholds | None = None,
    ) -> None:
        self.config = config or CognitiveLoadConfig()
        self.thresholds = thresholds or ComplexityThresholds()

    def estimate_context(self, lines: Iterable[OutputLine]) -> TaskContext:
        """Estimate load and complexity for ``lines``.

        When auto-detection is disabled the configured default load is
        returned together with the volume-based complexity.
        """
        error_count = 0
        warning_count = 0
        total = 0
        for line in lines:
            total += 1
            if line.type is LineType.ERROR:
                error_count += 1
            elif line.type is LineType.WARNING:
                warning_count += 1

        complexity = complexity_for(total, self.thresholds)
        if not self.config.auto_detect:
            return TaskContext(cognitive_load=self.config.default, complexity=complexity)
        return TaskContext(
            cognitive_load=load_for(
                error_count, warning_count, complexity, self.thresholds
            ),
            complexity=complexity,
        )

    def estimate(self, lines: Iterable[OutputLine]) -> CognitiveLoad:
        """Estimate the cognitive load for ``lines``."""
        if not self.config.auto_detect:
            return self.config.default
        return self.estimate_context(lines).cognitive_load
