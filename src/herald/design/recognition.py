"""Command intent detection and output line classification.

This module provides the LineClassifier, which maps a raw output line plus
the identity of the command that printed it to a LineType and LineContext.

Classification runs in two phases:
- A fast path that checks a small set of conventional prefixes
  (``Error:``, ``WARNING:``, ``ok\\t`` ...) and returns immediately.
- A scored path that evaluates every applicable compiled regex, adds each
  match's weight to its category, folds in structural signals (a
  ``file:line`` token, a leading ``PASS:``/``FAIL:``) and picks the
  category with the highest score.

Patterns are compiled once when the classifier is built. A classifier is
immutable afterwards; build a new one to change its configuration.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Mapping, Sequence

from herald.config import (
    CognitiveLoadConfig,
    ComplexityThresholds,
    HeraldConfig,
    PatternsConfig,
    ToolConfig,
)
from herald.constants import (
    COMMON_VERBS,
    DEFAULT_IMPORTANCE,
    DEFAULT_INTENT,
    ERROR_PREFIXES,
    FILE_LINE_PATTERN,
    FILE_LINE_SCORE,
    INFO_PREFIXES,
    PASS_FAIL_PATTERN,
    PASS_FAIL_SCORE,
    SHORT_LINE_LENGTH,
    SUCCESS_PREFIXES,
    WARNING_PREFIXES,
)
from herald.design.cognitive import CognitiveLoadEstimator
from herald.design.models import (
    CATEGORY_PRIORITY,
    CognitiveLoad,
    CompiledPattern,
    LineContext,
    LineType,
    OutputLine,
)
from herald.logging import get_logger

__all__ = ["LineClassifier", "PatternMatcher", "has_prefix", "compile_patterns"]

logger = get_logger(__name__)

_FILE_LINE_RE = re.compile(FILE_LINE_PATTERN)
_PASS_FAIL_RE = re.compile(PASS_FAIL_PATTERN)


def has_prefix(line: str, prefixes: Iterable[str]) -> bool:
    """Check whether ``line`` starts with any prefix, ignoring case."""
    for prefix in prefixes:
        if line.startswith(prefix):
            return True
        if len(line) >= len(prefix) and line[: len(prefix)].lower() == prefix.lower():
            return True
    return False


def compile_patterns(
    patterns: Mapping[str, Sequence[str]], source: str
) -> dict[LineType, list[CompiledPattern]]:
    """Compile a category -> regex list dictionary.

    Empty patterns are ignored. Invalid regexes and unknown categories are
    logged and skipped so that one bad entry cannot break classification.

    Args:
        patterns: Category name -> regular expressions.
        source: Where the patterns came from, for log messages.

    Returns:
        Category -> compiled patterns, in configuration order. Categories
        left without a valid pattern are omitted.
    """
    compiled: dict[LineType, list[CompiledPattern]] = {}
    for category_name, regexes in patterns.items():
        try:
            category = LineType(category_name)
        except ValueError:
            logger.warning(
                "unknown_pattern_category", category=category_name, source=source
            )
            continue
        entries: list[CompiledPattern] = []
        for pattern in regexes:
            if not pattern:
                continue
            try:
                regex = re.compile(pattern)
            except re.error as e:
                logger.warning(
                    "invalid_output_pattern",
                    pattern=pattern,
                    category=category_name,
                    source=source,
                    error=str(e),
                )
                continue
            entries.append(CompiledPattern(regex=regex, category=category))
        if entries:
            compiled[category] = entries
    return compiled


class LineClassifier:
    """Heuristic classifier for command intent and output lines.

    Attributes:
        patterns: Intent and global output dictionaries.
        tools: Tool-specific configuration keyed by command name or
            ``"<command> <first arg>"``.
        cognitive_load: Default load and auto-detection switch.

    Example:
        ```python
        classifier = LineClassifier.from_config(load_config())
        line_type, ctx = classifier.classify_output_line(
            "main.go:42: undefined: x", "go", ["build"]
        )
        assert line_type is LineType.ERROR and ctx.importance == 4
        ```
    """

    def __init__(
        self,
        patterns: PatternsConfig | None = None,
        tools: Mapping[str, ToolConfig] | None = None,
        cognitive_load: CognitiveLoadConfig | None = None,
        thresholds: ComplexityThresholds | None = None,
    ) -> None:
        self.patterns = patterns or PatternsConfig()
        self.tools: dict[str, ToolConfig] = dict(tools or {})
        self.cognitive_load = cognitive_load or CognitiveLoadConfig()
        self._estimator = CognitiveLoadEstimator(self.cognitive_load, thresholds)

        self._output_patterns = compile_patterns(self.patterns.output, "global")
        self._tool_patterns: dict[str, dict[LineType, list[CompiledPattern]]] = {}
        for tool_name, tool in self.tools.items():
            compiled = compile_patterns(tool.output_patterns, tool_name)
            if compiled:
                self._tool_patterns[tool_name] = compiled

    @classmethod
    def from_config(cls, config: HeraldConfig) -> LineClassifier:
        """Build a classifier from the root configuration."""
        return cls(
            patterns=config.patterns,
            tools=config.tools,
            cognitive_load=config.cognitive_load,
            thresholds=config.complexity_thresholds,
        )

    def find_tool_config(self, cmd: str, args: Sequence[str]) -> ToolConfig | None:
        """Find the tool config for a command (bare name before name + first arg)."""
        name = os.path.basename(cmd)
        if name in self.tools:
            return self.tools[name]
        if args:
            return self.tools.get(f"{name} {args[0]}")
        return None

    def detect_command_intent(self, cmd: str, args: Sequence[str]) -> str:
        """Identify the purpose of a command.

        Args:
            cmd: Executable, possibly with a path.
            args: Its arguments.

        Returns:
            An intent such as "building" or "testing"; "running" when nothing
            more specific is found.
        """
        tool = self.find_tool_config(cmd, args)
        if tool is not None and tool.intent:
            return tool.intent

        name = os.path.basename(cmd)
        command_line = f"{name} {' '.join(args)}"
        for intent, substrings in self.patterns.intent.items():
            for substring in substrings:
                if substring and substring in command_line:
                    return intent

        name_lower = name.lower()
        for verb, intent in COMMON_VERBS.items():
            if name_lower.startswith(verb) or name_lower.endswith(verb):
                return intent

        for arg in args:
            arg_lower = arg.lower()
            for verb, intent in COMMON_VERBS.items():
                if verb in arg_lower:
                    return intent

        return DEFAULT_INTENT

    def classify_output_line(
        self, line: str, cmd: str, args: Sequence[str]
    ) -> tuple[LineType, LineContext]:
        """Determine the category of one output line.

        Args:
            line: Raw text without trailing newline.
            cmd: Command that produced the line.
            args: Its arguments.

        Returns:
            The category and per-line context.
        """
        default_load = self.cognitive_load.default

        fast = self._classify_fast_path(line, default_load)
        if fast is not None:
            return fast

        scores = self._score(line, cmd, args)
        importance = DEFAULT_IMPORTANCE
        load = default_load

        if _FILE_LINE_RE.search(line):
            scores[LineType.ERROR] = scores.get(LineType.ERROR, 0) + FILE_LINE_SCORE
            importance = 4

        verdict = _PASS_FAIL_RE.match(line)
        if verdict is not None:
            if verdict.group(1) == "PASS":
                scores[LineType.SUCCESS] = scores.get(LineType.SUCCESS, 0) + PASS_FAIL_SCORE
                importance = 3
            else:
                scores[LineType.ERROR] = scores.get(LineType.ERROR, 0) + PASS_FAIL_SCORE
                importance = 5
                load = CognitiveLoad.HIGH

        best = _best_category(scores)
        if best is None:
            return LineType.DETAIL, LineContext(
                cognitive_load=default_load, importance=DEFAULT_IMPORTANCE
            )

        if importance == DEFAULT_IMPORTANCE:
            return best, _category_context(best, load)

        # A structural signal fixed the importance; only raise the load.
        if best is LineType.ERROR:
            load = CognitiveLoad.HIGH
        elif best is LineType.WARNING and load is CognitiveLoad.LOW:
            load = CognitiveLoad.MEDIUM
        return best, LineContext(cognitive_load=load, importance=importance)

    def _classify_fast_path(
        self, line: str, default_load: CognitiveLoad
    ) -> tuple[LineType, LineContext] | None:
        if has_prefix(line, ERROR_PREFIXES):
            return LineType.ERROR, LineContext(
                cognitive_load=CognitiveLoad.HIGH, importance=5
            )
        if has_prefix(line, WARNING_PREFIXES):
            return LineType.WARNING, LineContext(
                cognitive_load=CognitiveLoad.MEDIUM, importance=4
            )
        if has_prefix(line, SUCCESS_PREFIXES):
            return LineType.SUCCESS, LineContext(
                cognitive_load=default_load, importance=3
            )
        if has_prefix(line, INFO_PREFIXES):
            return LineType.INFO, LineContext(cognitive_load=default_load, importance=3)
        return None

    def _score(self, line: str, cmd: str, args: Sequence[str]) -> dict[LineType, int]:
        scores: dict[LineType, int] = {}

        pattern_sets: list[dict[LineType, list[CompiledPattern]]] = []
        if self.find_tool_config(cmd, args) is not None:
            name = os.path.basename(cmd)
            if args and f"{name} {args[0]}" in self._tool_patterns:
                pattern_sets.append(self._tool_patterns[f"{name} {args[0]}"])
            if name in self._tool_patterns:
                pattern_sets.append(self._tool_patterns[name])
        pattern_sets.append(self._output_patterns)

        for pattern_set in pattern_sets:
            for category, compiled in pattern_set.items():
                for pattern in compiled:
                    if pattern.matches(line):
                        scores[category] = scores.get(category, 0) + pattern.weight
        return scores

    def find_similar_lines(
        self, lines: Iterable[OutputLine]
    ) -> dict[str, list[OutputLine]]:
        """Group lines that look alike, for summarization.

        Short lines group by type. Errors and warnings group by their
        ``file:line`` token, or their first two words. Everything else groups
        by its first word.

        Returns:
            Group key -> lines, in first-seen order.
        """
        groups: dict[str, list[OutputLine]] = {}
        for line in lines:
            if len(line.content) < SHORT_LINE_LENGTH:
                key = f"short_{line.type.value}"
            else:
                key = _pattern_key(line.content, line.type)
            groups.setdefault(key, []).append(line)
        return groups

    def determine_cognitive_load(self, lines: Sequence[OutputLine]) -> CognitiveLoad:
        """Estimate the overall cognitive load of a batch of lines."""
        return self._estimator.estimate(lines)


# Kept for callers that use the original name.
PatternMatcher = LineClassifier


def _best_category(scores: Mapping[LineType, int]) -> LineType | None:
    best_score = max(scores.values(), default=0)
    if best_score <= 0:
        return None
    for category in CATEGORY_PRIORITY:
        if scores.get(category, 0) == best_score:
            return category
    return None


def _category_context(category: LineType, load: CognitiveLoad) -> LineContext:
    if category is LineType.ERROR:
        return LineContext(cognitive_load=CognitiveLoad.HIGH, importance=5)
    if category is LineType.WARNING:
        return LineContext(cognitive_load=CognitiveLoad.MEDIUM, importance=4)
    if category in (LineType.SUCCESS, LineType.INFO):
        return LineContext(cognitive_load=load, importance=3)
    if category is LineType.SUMMARY:
        return LineContext(cognitive_load=load, importance=4, is_summary=True)
    return LineContext(cognitive_load=load, importance=DEFAULT_IMPORTANCE)


def _pattern_key(content: str, line_type: LineType) -> str:
    if line_type in (LineType.ERROR, LineType.WARNING):
        match = _FILE_LINE_RE.search(content)
        if match is not None:
            return f"{line_type.value}_{match.group(0)}"
        words = content.split()
        if len(words) > 1:
            return f"{line_type.value}_{words[0]}_{words[1]}"
    return f"{line_type.value}_{content.split(' ')[0]}"
