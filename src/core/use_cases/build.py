"""
Build use case — wire settings, tools and options into a pipeline and run it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from src.adapters.registry import Toolchain, default_toolchain
from src.core.config.loader import load_settings
from src.core.models.build import BuildOptions
from src.core.services.theme.errors import BuildError
from src.core.services.theme.pipeline import BuildPipeline, BuildReport

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Outcome of a build invocation."""

    report: BuildReport
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error and self.report.ok

    def to_dict(self) -> dict:
        return {**self.report.to_dict(), "ok": self.ok, "error": self.error}


def create_pipeline(
    options: BuildOptions,
    config_path: Path | None = None,
    toolchain: Toolchain | None = None,
) -> BuildPipeline:
    """Load settings and assemble a pipeline.

    Raises:
        ConfigError: If the settings file is invalid.
    """
    settings = load_settings(config_path)
    if toolchain is None:
        toolchain = default_toolchain(settings)
    return BuildPipeline(settings, options, toolchain)


def run_build(
    options: BuildOptions,
    config_path: Path | None = None,
    toolchain: Toolchain | None = None,
) -> BuildResult:
    """Run a build to completion (or forever, in watch mode).

    Build failures are captured in the result, not raised.

    Raises:
        ConfigError: If the settings file is invalid.
    """
    pipeline = create_pipeline(options, config_path, toolchain)
    try:
        asyncio.run(pipeline.run())
    except BuildError as e:
        logger.debug("Build failed", exc_info=True)
        return BuildResult(report=pipeline.report, error=str(e))
    return BuildResult(report=pipeline.report)
