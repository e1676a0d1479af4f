"""
Build errors — one class per failing phase.

No phase retries.  Every error carries enough context (file, pattern or
tool message) to be printed as-is by the CLI.
"""

from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Base class for all fatal build failures."""


class ResolveError(BuildError):
    """A source root is missing or a pattern can't be resolved."""


class CopyError(BuildError):
    """An asset copy pass failed (usually a vendor package is not installed)."""


class TransformError(BuildError):
    """A style or script source could not be compiled, or its output not written."""

    def __init__(self, source: Path | str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = str(source)
        self.message = message


class TemplateError(BuildError):
    """A template could not be rendered into the output tree."""

    def __init__(self, template: Path | str, message: str):
        super().__init__(f"{template}: {message}")
        self.template = str(template)
        self.message = message
