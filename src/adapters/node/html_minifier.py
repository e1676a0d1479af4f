"""
html-minifier-terser adapter — minifies template markup piped through stdin.

Templates contain Jinja syntax, so whitespace is left alone; only
comments, redundant type attributes and boolean attribute values go.
"""

from __future__ import annotations

import json
from pathlib import Path

from src.adapters.base import CommandTool, write_tool_config

MINIFY_OPTIONS = {
    "collapseBooleanAttributes": True,
    "includeAutoGeneratedTags": False,
    "minifyCSS": True,
    "minifyJS": True,
    "removeComments": True,
    "removeScriptTypeAttributes": True,
    "removeStyleLinkTypeAttributes": True,
}


class HtmlMinifierTool(CommandTool):
    binary = "html-minifier-terser"

    def __init__(self, command: list[str] | None = None, **kwargs):
        super().__init__(command, **kwargs)
        self._config: Path | None = None

    def arguments(self, source: Path | None = None, *, optimize: bool = False) -> list[str]:
        if self._config is None:
            self._config = write_tool_config(
                "html-minifier.json", json.dumps(MINIFY_OPTIONS, indent=2),
            )
        return ["--config-file", str(self._config)]
