"""
Configuration for mmpp.

Settings come from, lowest to highest precedence:

1. Built-in defaults
2. A TOML file (mmpp.toml in the working directory, or an explicit path)
3. Environment variables MMPP_MAX_DEPTH and MMPP_LOG_LEVEL

Example mmpp.toml:

    [parser]
    max_depth = 64

    [logging]
    level = "INFO"
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from mmpp.core.errors import ConfigError
from mmpp.core.metric_lang.parser import DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "mmpp.toml"
MAX_DEPTH_ENV_VAR = "MMPP_MAX_DEPTH"
LOG_LEVEL_ENV_VAR = "MMPP_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "WARNING"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class MmppSettings:
    """Resolved settings."""

    max_depth: int = DEFAULT_MAX_DEPTH
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def log_level_value(self) -> int:
        """Numeric logging level for logging.basicConfig."""
        return logging.getLevelNamesMapping()[self.log_level]


def _coerce_depth(value: object, origin: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{origin}: max_depth must be an integer, got {value!r}")
    try:
        depth = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{origin}: max_depth must be an integer, got {value!r}") from e
    if not 1 <= depth <= MAX_DEPTH_LIMIT:
        raise ConfigError(f"{origin}: max_depth must be between 1 and {MAX_DEPTH_LIMIT}, got {depth}")
    return depth


def _coerce_level(value: object, origin: str) -> str:
    level = str(value).upper().strip()
    if level not in _LOG_LEVELS:
        logger.warning(
            "Unknown log level '%s' from %s. Valid values: %s. Defaulting to %s.",
            value,
            origin,
            ", ".join(_LOG_LEVELS),
            DEFAULT_LOG_LEVEL,
        )
        return DEFAULT_LOG_LEVEL
    return level


def load_settings(path: Path | None = None) -> MmppSettings:
    """Load settings from defaults, a TOML file, and the environment.

    Args:
        path: Explicit config file. When omitted, mmpp.toml in the current
            directory is used if it exists.

    Raises:
        ConfigError: If the file is missing or malformed, or a value is invalid.
    """
    settings = MmppSettings()

    if path is None:
        candidate = Path.cwd() / CONFIG_FILENAME
        path = candidate if candidate.exists() else None
    elif not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    if path is not None:
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"{path}: {e}") from e
        logger.debug("Loaded settings from %s", path)

        parser_data = data.get("parser", {})
        logging_data = data.get("logging", {})
        if "max_depth" in parser_data:
            settings.max_depth = _coerce_depth(parser_data["max_depth"], str(path))
        if "level" in logging_data:
            settings.log_level = _coerce_level(logging_data["level"], str(path))

    env_depth = os.environ.get(MAX_DEPTH_ENV_VAR, "").strip()
    if env_depth:
        settings.max_depth = _coerce_depth(env_depth, MAX_DEPTH_ENV_VAR)
    env_level = os.environ.get(LOG_LEVEL_ENV_VAR, "").strip()
    if env_level:
        settings.log_level = _coerce_level(env_level, LOG_LEVEL_ENV_VAR)

    return settings
