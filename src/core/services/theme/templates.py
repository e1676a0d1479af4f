"""
Template rewriting — point templates at the compiled assets, then minify.

Per template:
  1. (optimize only) replace every quoted literal equal to a manifest
     key with the equally-quoted manifest value
  2. normalize CRLF to LF
  3. minify through the HTML minifier, drop blank lines
  4. prepend the generated-file banner

Substitution is textual.  Only whole ``'…'`` or ``"…"`` literals match,
so a key that appears inside prose or a longer path is left alone.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Mapping
from pathlib import Path

from src.adapters.base import Tool, ToolError
from src.core.services.theme.errors import TemplateError
from src.core.services.theme.resolver import resolve
from src.core.services.theme.tasks import gather_all

logger = logging.getLogger(__name__)

BANNER = (
    "{#-\n"
    "  This file was automatically generated - do not edit\n"
    "-#}\n"
)

_BLANK_LINES_RE = re.compile(r"^\s*[\r\n]", re.MULTILINE)


def substitute(data: str, manifest: Mapping[str, str]) -> str:
    """Replace quoted manifest keys with their values, keeping the quote style."""
    for key, value in manifest.items():
        pattern = re.compile(r"(['\"])" + re.escape(key) + r"\1")
        data = pattern.sub(lambda m, v=value: f"{m.group(1)}{v}{m.group(1)}", data)
    return data


class TemplateRewriter:
    """Rewrite and minify templates from the source tree into the output tree."""

    def __init__(self, minifier: Tool, *, optimize: bool = False):
        self._minifier = minifier
        self._optimize = optimize

    async def render(self, data: str, manifest: Mapping[str, str]) -> str:
        """Turn one template's source text into its output text."""
        if self._optimize:
            data = substitute(data, manifest)

        html = data.replace("\r\n", "\n")
        minified = await self._minifier.filter(html.encode("utf-8"))
        html = _BLANK_LINES_RE.sub("", minified.decode("utf-8"))
        return BANNER + html

    async def rewrite_file(
        self,
        source: Path,
        dest: Path,
        manifest: Mapping[str, str],
    ) -> Path:
        """Render one template and write it.

        Raises:
            TemplateError: If the template can't be read as UTF-8, the
                minifier rejects it, or the output can't be written.
                Nothing is written for a template that fails before its
                write.
        """
        try:
            data = await asyncio.to_thread(source.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateError(source, f"cannot read: {e}") from e

        try:
            html = await self.render(data, manifest)
        except ToolError as e:
            raise TemplateError(source, e.message) from e
        except UnicodeDecodeError as e:
            raise TemplateError(source, f"minifier output is not UTF-8: {e}") from e

        try:
            await asyncio.to_thread(_write_text, dest, html)
        except OSError as e:
            raise TemplateError(source, f"cannot write {dest}: {e}") from e
        return dest

    async def rewrite(
        self,
        pattern: str,
        *,
        source: Path,
        dest: Path,
        manifest: Mapping[str, str],
        files: list[str] | None = None,
    ) -> list[Path]:
        """Rewrite every template matching ``pattern`` (or just ``files``).

        Returns:
            Written paths, in resolve order.
        """
        if files is None:
            files = resolve(pattern, source)

        written = await gather_all(*(
            self.rewrite_file(source / f, dest / f, manifest) for f in files
        ))
        logger.info("Templates: %d written", len(written))
        return list(written)


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8", newline="\n")
