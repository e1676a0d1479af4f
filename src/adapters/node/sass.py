"""
Sass adapter — compiles one SCSS entry point to CSS on stdout.

Optimize builds get compressed CSS without a source map; other builds
get expanded CSS with the map embedded.
"""

from __future__ import annotations

from pathlib import Path

from src.adapters.base import CommandTool


class SassTool(CommandTool):
    binary = "sass"

    def __init__(
        self,
        command: list[str] | None = None,
        *,
        load_paths: list[Path] | None = None,
        **kwargs,
    ):
        super().__init__(command, **kwargs)
        self._load_paths = load_paths or []

    def arguments(self, source: Path | None = None, *, optimize: bool = False) -> list[str]:
        args = [f"--load-path={p}" for p in self._load_paths]
        if optimize:
            args += ["--style=compressed", "--no-source-map"]
        else:
            args += ["--style=expanded", "--embed-source-map"]
        if source is not None:
            args.append(str(source))
        return args
