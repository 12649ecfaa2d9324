"""Tests for CognitiveLoadEstimator."""

from __future__ import annotations

from datetime import datetime

import pytest

from herald.config import CognitiveLoadConfig, ComplexityThresholds
from herald.design.cognitive import CognitiveLoadEstimator, complexity_for, load_for
from herald.design.models import CognitiveLoad, LineType, OutputLine


def lines_of(*types: LineType) -> list[OutputLine]:
    now = datetime.now()
    return [OutputLine(content="x", type=t, timestamp=now) for t in types]


class TestThresholdTable:
    @pytest.mark.parametrize(
        ("count", "expected"), [(0, 2), (21, 3), (51, 4), (101, 5)]
    )
    def test_complexity_for(self, count: int, expected: int) -> None:
        assert complexity_for(count, ComplexityThresholds()) == expected

    @pytest.mark.parametrize(
        ("errors", "warnings", "complexity", "expected"),
        [
            (0, 0, 2, CognitiveLoad.LOW),
            (0, 2, 2, CognitiveLoad.LOW),
            (0, 3, 2, CognitiveLoad.MEDIUM),
            (1, 0, 2, CognitiveLoad.MEDIUM),
            (0, 0, 3, CognitiveLoad.MEDIUM),
            (5, 0, 2, CognitiveLoad.MEDIUM),
            (6, 0, 2, CognitiveLoad.HIGH),
            (0, 0, 4, CognitiveLoad.HIGH),
            (0, 0, 5, CognitiveLoad.HIGH),
        ],
    )
    def test_load_for(
        self, errors: int, warnings: int, complexity: int, expected: CognitiveLoad
    ) -> None:
        assert load_for(errors, warnings, complexity, ComplexityThresholds()) is expected


class TestCognitiveLoadEstimator:
    """Tests for load estimation over arbitrary line batches."""

    def test_empty_batch_is_low(self) -> None:
        assert CognitiveLoadEstimator().estimate([]) is CognitiveLoad.LOW

    def test_errors_raise_load(self) -> None:
        estimator = CognitiveLoadEstimator()

        assert estimator.estimate(lines_of(LineType.ERROR)) is CognitiveLoad.MEDIUM
        assert estimator.estimate(lines_of(*[LineType.ERROR] * 6)) is CognitiveLoad.HIGH

    def test_volume_raises_load(self) -> None:
        context = CognitiveLoadEstimator().estimate_context(
            lines_of(*[LineType.DETAIL] * 150)
        )

        assert context.complexity == 5
        assert context.cognitive_load is CognitiveLoad.HIGH

    def test_auto_detect_disabled_returns_default(self) -> None:
        estimator = CognitiveLoadEstimator(
            CognitiveLoadConfig(auto_detect=False, default=CognitiveLoad.LOW)
        )
        noisy = lines_of(*[LineType.ERROR] * 20)

        assert estimator.estimate(noisy) is CognitiveLoad.LOW
        assert estimator.estimate_context(noisy).cognitive_load is CognitiveLoad.LOW

    def test_accepts_generators(self) -> None:
        """Any iterable works; the estimator makes a single pass."""
        estimator = CognitiveLoadEstimator()
        lines = (line for line in lines_of(LineType.WARNING, LineType.WARNING))

        assert estimator.estimate(lines) is CognitiveLoad.LOW
