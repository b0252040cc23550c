"""Configuration loading and management for issue-notify.

Configuration sources are merged in priority order:
    1. Defaults (defined in NotifyConfig)
    2. Global config (~/.issue-notify.toml)
    3. Project config (./issue-notify.toml)
    4. Explicit config file
    5. Environment variables (ISSUE_NOTIFY_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(batch_size=500)
    >>> config.batch_size
    500
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

# Matches the chunk size the change notifications have always been sent with.
DEFAULT_BATCH_SIZE = 1000

ENV_PREFIX = "ISSUE_NOTIFY_"


@dataclass(frozen=True)
class NotifyConfig:
    """Settings for a notification run.

    Attributes:
        batch_size: Maximum number of changed issues held in memory before
            their change notifications are dispatched.
        top_count: Entries kept per distribution (rule types excepted) in a
            new-issues notification.
        verbosity: Logging verbosity level.
        log_file: Optional file that receives a copy of the log.
    """

    batch_size: int = DEFAULT_BATCH_SIZE
    top_count: int = 5
    verbosity: Verbosity = "normal"
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise InvalidConfigError("batch_size", self.batch_size, "must be at least 1")
        if self.top_count < 1:
            raise InvalidConfigError("top_count", self.top_count, "must be at least 1")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected quiet, normal or verbose"
            )


DEFAULT_CONFIG = NotifyConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> NotifyConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated NotifyConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / ".issue-notify.toml"
    if global_config.exists():
        merged.update(_read_config_file(global_config, "global config"))

    project_config = Path.cwd() / "issue-notify.toml"
    if project_config.exists():
        merged.update(_read_config_file(project_config, "project config"))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_read_config_file(config_file, "config file"))

    merged.update(_load_env_vars())

    # --verbose / --quiet flags map onto verbosity
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return NotifyConfig(**merged)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _read_config_file(path: Path, label: str) -> dict:
    try:
        data = _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid {label} '{path}': {e}")
    # Settings may live at top level or under a [notify] table
    section = data.get("notify", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"Invalid {label} '{path}': [notify] must be a table")
    return dict(section)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from ISSUE_NOTIFY_* environment variables.

    Supported environment variables:
        ISSUE_NOTIFY_BATCH_SIZE: int
        ISSUE_NOTIFY_TOP_COUNT: int
        ISSUE_NOTIFY_VERBOSITY: quiet/normal/verbose
        ISSUE_NOTIFY_LOG_FILE: path
    """
    type_hints = get_type_hints(NotifyConfig)
    result: dict[str, Any] = {}

    for field_name in NotifyConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the field's type."""
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
