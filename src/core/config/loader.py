"""
Configuration loader — reads theme-build.yml into BuildSettings.

The file is optional.  Without one, the build runs with defaults rooted
at the current directory.  With one, every relative root in it is
resolved against the directory that contains the file.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from src.core.models.build import BuildSettings

logger = logging.getLogger(__name__)

SETTINGS_FILE = "theme-build.yml"


class ConfigError(Exception):
    """Raised when build configuration is invalid or missing."""


def find_settings_file(start_dir: Path | None = None) -> Path | None:
    """Return the nearest theme-build.yml at or above ``start_dir`` (default: cwd)."""
    start = (start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / SETTINGS_FILE
        if candidate.is_file():
            return candidate
    return None


def load_settings(path: Path | None = None) -> BuildSettings:
    """Load and validate build settings.

    Args:
        path: Explicit path to theme-build.yml.  If None, searches upward
            and falls back to defaults rooted at the current directory.

    Returns:
        Validated BuildSettings.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_settings_file()
        if path is None:
            logger.debug("No %s found, using defaults", SETTINGS_FILE)
            return BuildSettings(project_root=Path.cwd().resolve())

    build_data = _read_mapping(path)

    try:
        settings = BuildSettings.model_validate(
            {**build_data, "project_root": path.parent.resolve()}
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid build configuration: {e}") from e

    logger.info(
        "Loaded build settings: %s → %s (%d icon sets)",
        settings.source_root, settings.output_root, len(settings.icon_sets),
    )
    return settings


def _read_mapping(path: Path) -> dict:
    """Parse the settings file into the (possibly ``build:``-wrapped) mapping."""
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    logger.debug("Loading build settings from %s", path)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if isinstance(data, dict) and "build" in data:
        data = data["build"]
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: settings must be a YAML mapping, got {type(data).__name__}")
    return data
