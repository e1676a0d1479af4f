"""
Config check use case — validate theme-build.yml without building.

Errors make the configuration unusable (bad file, missing source tree,
source and output overlapping).  Warnings flag things a build would trip
over later, such as an icon package that hasn't been installed.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from src.core.config.loader import ConfigError, find_settings_file, load_settings
from src.core.models.build import BuildSettings


@dataclass
class ConfigCheckResult:
    """Outcome of validating the build settings."""

    settings: BuildSettings | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return self.settings is not None and not self.errors

    def to_dict(self) -> dict:
        s = self.settings
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "source_root": str(s.source_dir) if s else None,
            "output_root": str(s.output_dir) if s else None,
            "icon_set_count": len(s.icon_sets) if s else 0,
            "errors": self.errors,
            "warnings": self.warnings,
        }


def _layout_errors(settings: BuildSettings) -> Iterator[str]:
    if not settings.source_dir.is_dir():
        yield f"Source root does not exist: {settings.source_root}"
    if settings.source_dir == settings.output_dir:
        yield "Source and output roots must differ."

    counts = Counter(icons.name for icons in settings.icon_sets)
    duplicated = sorted(name for name, n in counts.items() if n > 1)
    if duplicated:
        yield f"Duplicate icon set names: {', '.join(duplicated)}"


def _missing_packages(settings: BuildSettings) -> Iterator[str]:
    for icons in settings.icon_sets:
        if not (settings.vendor_dir / icons.package).is_dir():
            yield (
                f"Icon set '{icons.name}' not installed: "
                f"{settings.vendor_root}/{icons.package} (npm install?)"
            )


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Load the settings and report everything wrong with them."""
    result = ConfigCheckResult(config_path=config_path or find_settings_file())
    if result.config_path is None:
        result.warnings.append("No theme-build.yml found. Using defaults.")

    try:
        result.settings = load_settings(result.config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    result.errors.extend(_layout_errors(result.settings))
    result.warnings.extend(_missing_packages(result.settings))
    return result
