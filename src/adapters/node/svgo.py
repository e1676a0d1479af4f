"""
SVGO adapter — optimizes SVG markup.

The plugin set is the default preset with ``viewBox`` kept, so icons
stay scalable, plus ``removeDimensions`` so they size from CSS.

Single documents go through stdin/stdout.  Whole icon sets go through
``--folder`` in chunks, one node process per chunk instead of one per
icon.
"""

from __future__ import annotations

import asyncio
import json
import tempfile
from pathlib import Path

from src.adapters.base import CommandTool, write_tool_config

SVGO_CONFIG = {
    "plugins": [
        {
            "name": "preset-default",
            "params": {"overrides": {"removeViewBox": False}},
        },
        {"name": "removeDimensions"},
    ],
}


class SvgoTool(CommandTool):
    binary = "svgo"

    BATCH_SIZE = 500
    """Icons optimized per ``--folder`` run."""

    def __init__(self, command: list[str] | None = None, **kwargs):
        super().__init__(command, **kwargs)
        self._config: Path | None = None

    def _config_file(self) -> Path:
        if self._config is None:
            body = "module.exports = " + json.dumps(SVGO_CONFIG, indent=2) + "\n"
            self._config = write_tool_config("svgo.config.cjs", body)
        return self._config

    def arguments(self, source: Path | None = None, *, optimize: bool = False) -> list[str]:
        return ["--config", str(self._config_file()), "--input", "-", "--output", "-"]

    async def filter_many(self, items: list[bytes]) -> list[bytes]:
        chunks = [
            items[start:start + self.BATCH_SIZE]
            for start in range(0, len(items), self.BATCH_SIZE)
        ]
        results: list[bytes] = []
        for optimized in await asyncio.gather(*(self._optimize_folder(c) for c in chunks)):
            results.extend(optimized)
        return results

    async def _optimize_folder(self, chunk: list[bytes]) -> list[bytes]:
        """Rewrite ``chunk`` in place inside a scratch folder, in one run."""
        with tempfile.TemporaryDirectory(prefix="themebuild-svgo-") as tmp:
            folder = Path(tmp)
            files = [folder / f"{i:05d}.svg" for i in range(len(chunk))]
            for path, data in zip(files, chunk):
                path.write_bytes(data)

            await self.run(["--config", str(self._config_file()), "--folder", tmp, "--quiet"])
            return [path.read_bytes() for path in files]
