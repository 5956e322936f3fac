"""Runtime configuration model for relayscope.

This module owns all environment variable and settings file parsing.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from pathlib import Path
from typing import Mapping, cast

import yaml

from core.constants import (
    DEFAULT_DATA_ROOT,
    DEFAULT_FILE_PATTERN,
    DEFAULT_LOG_LEVEL,
    SUPPORTED_LOG_LEVELS,
)
from core.errors import RelayConfigError

_SETTINGS_KEYS = ("data_root", "log_level", "file_pattern")


@dataclass(frozen=True)
class RelayscopeConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for relay, country, and date stores.
        log_level: Minimum structured log level.
        file_pattern: Glob used when scanning a directory for snapshots.
    """

    data_root: Path
    log_level: str
    file_pattern: str

    @classmethod
    def from_env(cls) -> "RelayscopeConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            RelayConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("RELAYSCOPE_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        log_level = _parse_log_level(os.getenv("RELAYSCOPE_LOG_LEVEL", DEFAULT_LOG_LEVEL))
        file_pattern = os.getenv("RELAYSCOPE_FILE_PATTERN", DEFAULT_FILE_PATTERN)
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            log_level=log_level,
            file_pattern=file_pattern,
        )

    @classmethod
    def from_file(cls, settings_path: str) -> "RelayscopeConfig":
        """Build config from the environment, overridden by a YAML file.

        Args:
            settings_path: Path to a YAML mapping with any of
                ``data_root``, ``log_level``, and ``file_pattern``.

        Returns:
            A validated config object.

        Raises:
            RelayConfigError: If the file is missing, invalid, or has unknown keys.
        """
        settings = _load_settings_mapping(settings_path)
        config = cls.from_env()
        if "data_root" in settings:
            config = replace(
                config,
                data_root=Path(str(settings["data_root"])).expanduser().resolve(),
            )
        if "log_level" in settings:
            config = replace(config, log_level=_parse_log_level(str(settings["log_level"])))
        if "file_pattern" in settings:
            config = replace(config, file_pattern=str(settings["file_pattern"]))
        return config


def _parse_log_level(raw_value: str) -> str:
    """Parse and validate a log level name.

    Args:
        raw_value: Raw level string.

    Returns:
        Upper-case level name.

    Raises:
        RelayConfigError: If the level is unsupported.
    """
    level = raw_value.strip().upper()
    if level not in SUPPORTED_LOG_LEVELS:
        raise RelayConfigError(
            f"Invalid log level '{raw_value}': expected one of {SUPPORTED_LOG_LEVELS}. "
            "Set RELAYSCOPE_LOG_LEVEL or log_level to a supported value."
        )
    return level


def _load_settings_mapping(settings_path: str) -> Mapping[str, object]:
    settings_file = Path(settings_path).expanduser().resolve()
    if not settings_file.exists():
        raise RelayConfigError(
            f"Settings file does not exist at {settings_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(settings_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise RelayConfigError(
            f"Failed to read settings at {settings_file}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise RelayConfigError(
            f"Failed to parse YAML settings at {settings_file}: {error}. Fix YAML syntax."
        ) from error
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise RelayConfigError(
            f"Invalid settings at {settings_file}: expected a mapping at top level."
        )
    unknown_keys = sorted(str(key) for key in payload if key not in _SETTINGS_KEYS)
    if unknown_keys:
        raise RelayConfigError(
            f"Invalid settings at {settings_file}: unknown keys {unknown_keys}. "
            f"Supported keys: {list(_SETTINGS_KEYS)}."
        )
    return cast(Mapping[str, object], payload)
