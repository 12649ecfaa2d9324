"""herald constants: classification dictionaries and rendering defaults.

This module is the single source of truth for the fixed heuristics herald
ships with. User-tunable values (pattern dictionaries, thresholds, spinner
settings) take these as defaults in ``herald.config``.
"""

from __future__ import annotations

# =============================================================================
# Fast-path prefixes
# =============================================================================

#: Line prefixes that mark an error without needing regex evaluation
ERROR_PREFIXES: tuple[str, ...] = (
    "Error:",
    "ERROR:",
    "E!",
    "panic:",
    "fatal:",
    "Failed",
    "[ERROR]",
    "FAIL\t",
)

#: Line prefixes that mark a warning
WARNING_PREFIXES: tuple[str, ...] = (
    "Warning:",
    "WARNING:",
    "WARN",
    "W!",
    "deprecated:",
    "[warn]",
    "[WARNING]",
    "Warn:",
)

#: Line prefixes that mark a success
SUCCESS_PREFIXES: tuple[str, ...] = (
    "Success:",
    "SUCCESS:",
    "PASS\t",
    "ok\t",
    "Done!",
    "Completed",
    "✓",
    "All tests passed!",
)

#: Line prefixes that mark an informational line
INFO_PREFIXES: tuple[str, ...] = (
    "Info:",
    "INFO:",
    "INFO[",
    "I!",
    "[info]",
    "Running",
)

# =============================================================================
# Scored-path structural signals
# =============================================================================

#: A source location such as ``main.go:42``
FILE_LINE_PATTERN: str = r"\w+\.(?:go|js|py|java|rb|cpp|c|ts|rs):\d+"

#: A leading test verdict such as ``PASS:`` or ``FAIL:``
PASS_FAIL_PATTERN: str = r"^(PASS|FAIL):"

FILE_LINE_SCORE: int = 3
PASS_FAIL_SCORE: int = 5

# =============================================================================
# Intent detection
# =============================================================================

#: Common action verbs and the intent each implies, in match order
COMMON_VERBS: dict[str, str] = {
    "build": "building",
    "test": "testing",
    "check": "checking",
    "lint": "linting",
    "run": "running",
    "install": "installing",
    "format": "formatting",
    "clean": "cleaning",
    "fetch": "fetching",
    "pull": "pulling",
    "push": "pushing",
    "deploy": "deploying",
}

DEFAULT_INTENT: str = "running"

DEFAULT_INTENT_PATTERNS: dict[str, list[str]] = {
    "building": ["go build", "make", "gcc"],
    "testing": ["go test"],
    "linting": ["golangci-lint"],
}

DEFAULT_OUTPUT_PATTERNS: dict[str, list[str]] = {
    "error": ["^Error:", "^ERROR:", "failed", "panic:"],
    "warning": ["^Warning:", "^WARNING:", "deprecated"],
}

# =============================================================================
# Grouping and importance
# =============================================================================

#: Lines shorter than this are grouped by type only
SHORT_LINE_LENGTH: int = 10

DEFAULT_IMPORTANCE: int = 2

# =============================================================================
# Complexity / cognitive load thresholds
# =============================================================================

COMPLEXITY_VERY_HIGH_LINES: int = 100
COMPLEXITY_HIGH_LINES: int = 50
COMPLEXITY_MEDIUM_LINES: int = 20
ERROR_COUNT_HIGH: int = 5
WARNING_COUNT_MEDIUM: int = 2

DEFAULT_COMPLEXITY: int = 2

# =============================================================================
# Live progress
# =============================================================================

DEFAULT_SPINNER_CHARS: str = "-\\|/"

#: Milliseconds between spinner frames
DEFAULT_SPINNER_INTERVAL_MS: int = 180

#: Seconds to wait after SIGTERM before killing a cancelled child process
TERMINATION_GRACE_PERIOD: float = 2.0

#: Longest line kept from a child process; longer lines are truncated
DEFAULT_MAX_LINE_LENGTH: int = 1024 * 1024

#: Prefix for lines herald itself adds to a task's output
INTERNAL_LINE_PREFIX: str = "[herald] "
