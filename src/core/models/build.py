"""
Build models — mode flags and the layout of a theme build.

``BuildOptions`` is built once from the CLI flags and handed to the
pipeline.  ``BuildSettings`` is loaded from theme-build.yml (or defaults)
and describes where sources, outputs and vendor packages live.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class BuildOptions(BaseModel):
    """Mode flags for one build invocation.

    The flags combine freely.  ``dirty`` skips the asset copy phase,
    ``optimize`` enables content-addressed outputs and manifest
    substitution in templates, ``watch`` keeps rebuilding on change.
    """

    model_config = {"frozen": True}

    watch: bool = False
    dirty: bool = False
    optimize: bool = False

    @property
    def copy_assets(self) -> bool:
        return not self.dirty

    @property
    def mode_label(self) -> str:
        flags = [
            name for name in ("watch", "dirty", "optimize")
            if getattr(self, name)
        ]
        return "+".join(flags) if flags else "normal"


class IconSet(BaseModel):
    """A vendor icon package copied under ``<output>/.icons/<name>``.

    ``patterns`` are matched under ``<vendor_root>/<package>``.  Leading
    ``../`` segments reach the license file that sits beside the icons.
    """

    name: str
    package: str
    patterns: list[str] = Field(default_factory=lambda: ["**/*.svg"])

    @property
    def destination(self) -> str:
        return f".icons/{self.name}"


class CopyPass(BaseModel):
    """One resolved copy pass: a pattern under ``source`` mirrored to ``dest``."""

    label: str
    pattern: str
    source: Path
    dest: Path
    optimize_svg: bool = False


def _default_icon_sets() -> list[IconSet]:
    return [
        IconSet(name="material", package="@mdi/svg/svg",
                patterns=["*.svg", "../LICENSE"]),
        IconSet(name="octicons", package="@primer/octicons/build/svg",
                patterns=["*.svg", "../../LICENSE"]),
        IconSet(name="fontawesome", package="@fortawesome/fontawesome-free/svgs",
                patterns=["**/*.svg", "../LICENSE.txt"]),
        IconSet(name="lucide", package="lucide-static/icons",
                patterns=["**/*.svg", "../LICENSE"]),
        IconSet(name="simple", package="simple-icons/icons",
                patterns=["**/*.svg", "../LICENSE.md"]),
    ]


class BuildSettings(BaseModel):
    """Layout of a theme build, loaded from theme-build.yml.

    Roots are stored as given and resolved against ``project_root``
    through the ``*_dir`` properties.
    """

    project_root: Path = Field(default_factory=Path.cwd)

    source_root: str = "src"
    output_root: str = "dist"
    vendor_root: str = "node_modules"

    style_pattern: str = "**/[!_]*.scss"
    script_pattern: str = "**/{bundle,search}.ts"
    style_watch_pattern: str = "**/*.scss"
    script_watch_pattern: str = "**/*.{js,ts}*"
    template_pattern: str = "**/*.{html,xml}"
    static_pattern: str = "**/*.{jpg,png,svg,yml}"

    icon_sets: list[IconSet] = Field(default_factory=_default_icon_sets)

    poll_interval: float = 0.5
    max_processes: int = Field(default_factory=lambda: os.cpu_count() or 4)
    tools: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("source_root", "output_root", "vendor_root")
    @classmethod
    def _strip_trailing_separator(cls, v: str) -> str:
        # "dist/" and "dist" name the same root; manifest values are built from it
        return v.rstrip("/\\") or v

    @field_validator("poll_interval")
    @classmethod
    def _positive_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("poll_interval must be positive")
        return v

    @field_validator("max_processes")
    @classmethod
    def _positive_processes(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_processes must be at least 1")
        return v

    @field_validator("tools", mode="before")
    @classmethod
    def _split_tool_commands(cls, v: object) -> object:
        # "npx sass" and ["npx", "sass"] are both accepted
        if isinstance(v, dict):
            return {
                name: cmd.split() if isinstance(cmd, str) else cmd
                for name, cmd in v.items()
            }
        return v

    # ── Resolved paths ──────────────────────────────────────────

    @property
    def source_dir(self) -> Path:
        return (self.project_root / self.source_root).resolve()

    @property
    def output_dir(self) -> Path:
        return (self.project_root / self.output_root).resolve()

    @property
    def vendor_dir(self) -> Path:
        return (self.project_root / self.vendor_root).resolve()

    def copy_passes(self) -> list[CopyPass]:
        """All passes of the asset copy phase, in declaration order."""
        passes: list[CopyPass] = []

        for icons in self.icon_sets:
            for pattern in icons.patterns:
                passes.append(CopyPass(
                    label=f"icons:{icons.name}",
                    pattern=pattern,
                    source=self.vendor_dir / icons.package,
                    dest=self.output_dir / icons.destination,
                    optimize_svg=True,
                ))

        passes.append(CopyPass(
            label="static",
            pattern=self.static_pattern,
            source=self.source_dir,
            dest=self.output_dir,
        ))

        # Third-party license of the bundled scripts
        passes.append(CopyPass(
            label="license",
            pattern="LICENSE",
            source=self.source_dir / "assets" / "javascripts",
            dest=self.output_dir / "assets" / "javascripts",
            optimize_svg=True,
        ))
        return passes
