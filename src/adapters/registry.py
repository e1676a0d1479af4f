"""
Toolchain — the set of external tools one build uses, by role.

The pipeline asks the toolchain for "the style compiler" or "the HTML
minifier", never for a binary by name.  Tests build a Toolchain of
MockTools; the CLI builds the default node toolchain.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from src.adapters.base import Tool
from src.adapters.node import EsbuildTool, HtmlMinifierTool, SassTool, SvgoTool
from src.core.models.build import BuildSettings

logger = logging.getLogger(__name__)


@dataclass
class Toolchain:
    """External collaborators of the build, one per role."""

    style: Tool
    script: Tool
    svg: Tool
    html: Tool

    def tools(self) -> dict[str, Tool]:
        return {
            "style": self.style,
            "script": self.script,
            "svg": self.svg,
            "html": self.html,
        }

    def missing(self) -> list[str]:
        """Names of tools whose binary can't be found."""
        return [t.name for t in self.tools().values() if not t.is_available()]


def default_toolchain(settings: BuildSettings) -> Toolchain:
    """Build the node toolchain for a project.

    Commands from ``settings.tools`` win over auto-detection; all tools
    share one process limit.
    """
    limit = asyncio.Semaphore(settings.max_processes)
    common = {"project_root": settings.project_root, "limit": limit}

    def _cmd(binary: str) -> list[str] | None:
        return settings.tools.get(binary)

    chain = Toolchain(
        style=SassTool(_cmd("sass"), load_paths=[settings.vendor_dir], **common),
        script=EsbuildTool(_cmd("esbuild"), **common),
        svg=SvgoTool(_cmd("svgo"), **common),
        html=HtmlMinifierTool(_cmd("html-minifier-terser"), **common),
    )
    for name in chain.missing():
        logger.warning("Tool not found: %s", name)
    return chain
