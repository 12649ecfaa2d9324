from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from herald.constants import (
    COMPLEXITY_HIGH_LINES,
    COMPLEXITY_MEDIUM_LINES,
    COMPLEXITY_VERY_HIGH_LINES,
    DEFAULT_INTENT_PATTERNS,
    DEFAULT_MAX_LINE_LENGTH,
    DEFAULT_OUTPUT_PATTERNS,
    DEFAULT_SPINNER_CHARS,
    DEFAULT_SPINNER_INTERVAL_MS,
    ERROR_COUNT_HIGH,
    WARNING_COUNT_MEDIUM,
)
from herald.design.models import CognitiveLoad
from herald.exceptions import ConfigError
from herald.logging import get_logger

__all__ = [
    "HeraldConfig",
    "PatternsConfig",
    "ToolConfig",
    "CognitiveLoadConfig",
    "ComplexityThresholds",
    "StyleConfig",
    "ShowOutputMode",
    "load_config",
    "get_user_config_path",
    "PROJECT_CONFIG_NAME",
]

logger = get_logger(__name__)

PROJECT_CONFIG_NAME = ".herald.yaml"

# Project config file chosen by load_config(); read by the YAML settings source
_project_config_path: ContextVar[Path | None] = ContextVar(
    "herald_project_config_path", default=None
)

ShowOutputMode = Literal["on-fail", "always", "never"]


class PatternsConfig(BaseModel):
    """Recognition dictionaries.

    Attributes:
        intent: Intent name -> substrings of the command line that imply it.
        output: Line category -> regular expressions that vote for it.
    """

    intent: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_INTENT_PATTERNS.items()}
    )
    output: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_OUTPUT_PATTERNS.items()}
    )


class ToolConfig(BaseModel):
    """Tool-specific recognition hints.

    Keys in ``HeraldConfig.tools`` are either a bare command name (``pytest``)
    or a command plus its first argument (``go test``).

    Attributes:
        label: Display label used when none is given on the command line.
        intent: Intent reported for this tool, overriding detection.
        stream: Force stream mode for this tool.
        output_patterns: Line category -> regular expressions, checked before
            the global patterns.
    """

    label: str | None = None
    intent: str | None = None
    stream: bool = False
    output_patterns: dict[str, list[str]] = Field(default_factory=dict)


class CognitiveLoadConfig(BaseModel):
    """Settings for cognitive load detection.

    Attributes:
        auto_detect: Estimate load from output; when False, ``default`` is
            always used.
        default: Load assumed for unclassified lines and when detection is off.
    """

    auto_detect: bool = True
    default: CognitiveLoad = CognitiveLoad.MEDIUM


class ComplexityThresholds(BaseModel):
    """Thresholds turning output volume and issue counts into load.

    Attributes:
        very_high: Output lines above which complexity is 5.
        high: Output lines above which complexity is 4.
        medium: Output lines above which complexity is 3.
        error_count_high: Errors above which load is high.
        warning_count_medium: Warnings above which load is at least medium.
    """

    very_high: int = Field(default=COMPLEXITY_VERY_HIGH_LINES, gt=0)
    high: int = Field(default=COMPLEXITY_HIGH_LINES, gt=0)
    medium: int = Field(default=COMPLEXITY_MEDIUM_LINES, gt=0)
    error_count_high: int = Field(default=ERROR_COUNT_HIGH, ge=0)
    warning_count_medium: int = Field(default=WARNING_COUNT_MEDIUM, ge=0)


class StyleConfig(BaseModel):
    """Settings for the live progress line.

    Attributes:
        use_inline_progress: Show a single updating status line instead of
            separate start and end lines.
        no_spinner: Disable the spinner animation.
        spinner_interval_ms: Milliseconds between spinner frames.
        spinner_chars: Spinner glyphs, one frame per character.
    """

    use_inline_progress: bool = True
    no_spinner: bool = False
    spinner_interval_ms: int = Field(default=DEFAULT_SPINNER_INTERVAL_MS, gt=0, le=5000)
    spinner_chars: str = DEFAULT_SPINNER_CHARS

    @field_validator("spinner_chars")
    @classmethod
    def fallback_to_default_chars(cls, v: str) -> str:
        """Empty glyph sets fall back to the ASCII spinner."""
        return v or DEFAULT_SPINNER_CHARS

    @property
    def spinner_interval(self) -> float:
        """Spinner interval in seconds."""
        return self.spinner_interval_ms / 1000


class YamlConfigSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from YAML files."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._config_data: dict[str, Any] = {}
        if yaml_file and yaml_file.exists():
            try:
                with open(yaml_file) as f:
                    loaded = yaml.safe_load(f)
                    if loaded is None:
                        logger.warning("config_file_empty", path=str(yaml_file))
                    elif isinstance(loaded, dict):
                        self._config_data = loaded
                    else:
                        raise ConfigError(
                            message=f"Config file {yaml_file} must contain a mapping",
                            field=None,
                            value=loaded,
                        )
            except yaml.YAMLError as e:
                raise ConfigError(
                    message=f"Invalid YAML in {yaml_file}: {e}",
                    field=None,
                    value=None,
                ) from e

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get value for a specific field from the YAML config."""
        if field_name in self._config_data:
            return self._config_data[field_name], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return the complete config data."""
        return self._config_data


class HeraldConfig(BaseSettings):
    """Root configuration object containing all herald settings."""

    model_config = SettingsConfigDict(
        env_prefix="HERALD_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    patterns: PatternsConfig = Field(default_factory=PatternsConfig)
    tools: dict[str, ToolConfig] = Field(default_factory=dict)
    cognitive_load: CognitiveLoadConfig = Field(default_factory=CognitiveLoadConfig)
    complexity_thresholds: ComplexityThresholds = Field(
        default_factory=ComplexityThresholds
    )
    style: StyleConfig = Field(default_factory=StyleConfig)
    stream: bool = False
    show_output: ShowOutputMode = "on-fail"
    ci: bool = False
    no_color: bool = False
    no_timer: bool = False
    max_line_length: int = Field(default=DEFAULT_MAX_LINE_LENGTH, ge=80)
    verbosity: Literal["error", "warning", "info", "debug"] = "warning"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the order of settings sources.

        Priority (highest to lowest):
        1. Init arguments (used by tests and the CLI flag overrides)
        2. Environment variables (HERALD_*)
        3. Project YAML config (./.herald.yaml or --config)
        4. User YAML config (~/.config/herald/config.yaml)
        5. Field defaults
        """
        project_config_path = _project_config_path.get() or (
            Path.cwd() / PROJECT_CONFIG_NAME
        )
        return (
            init_settings,
            env_settings,
            YamlConfigSource(settings_cls, project_config_path),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )

    @property
    def is_monochrome(self) -> bool:
        """True when colors must not be used (explicit no-color or CI mode)."""
        return self.no_color or self.ci

    def find_tool(self, command_name: str, args: list[str] | tuple[str, ...]) -> ToolConfig | None:
        """Look up the tool config for a command.

        The bare command name wins over ``"<command> <first arg>"``.

        Args:
            command_name: Base name of the executable.
            args: Arguments passed to it.

        Returns:
            The matching ToolConfig, or None.
        """
        if command_name in self.tools:
            return self.tools[command_name]
        if args:
            return self.tools.get(f"{command_name} {args[0]}")
        return None


def get_user_config_path() -> Path:
    """Get the path to the user configuration file.

    Returns:
        Path to ~/.config/herald/config.yaml
    """
    return Path.home() / ".config" / "herald" / "config.yaml"


def load_config(config_path: Path | None = None, **overrides: Any) -> HeraldConfig:
    """Load configuration with hierarchy: defaults -> user -> project -> env.

    Args:
        config_path: Optional path to the project config file. Defaults to
            ./.herald.yaml
        **overrides: Field values that take precedence over every source.

    Returns:
        HeraldConfig instance with merged configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    if config_path is None:
        config_path = Path.cwd() / PROJECT_CONFIG_NAME

    if not config_path.exists():
        logger.debug("project_config_not_found", path=str(config_path))

    token = _project_config_path.set(config_path)
    try:
        return HeraldConfig(**overrides)
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        raise ConfigError(
            message=f"Invalid configuration: {first_error['msg']}",
            field=field,
            value=first_error.get("input"),
        ) from e
    finally:
        _project_config_path.reset(token)
