"""
esbuild adapter — bundles one TypeScript entry point to JavaScript on stdout.
"""

from __future__ import annotations

from pathlib import Path

from src.adapters.base import CommandTool


class EsbuildTool(CommandTool):
    binary = "esbuild"

    TARGET = "es2017"

    def arguments(self, source: Path | None = None, *, optimize: bool = False) -> list[str]:
        args = [
            "--bundle",
            f"--target={self.TARGET}",
            "--log-level=warning",
        ]
        args.append("--minify" if optimize else "--sourcemap=inline")
        if source is not None:
            args.insert(0, str(source))
        return args
