"""
Transform stages — compile styles and scripts, one output file per entry point.

A stage resolves its entry points, compiles them concurrently through
its compiler tool, and reports the whole batch at once.  Nothing of a
batch is reported until every file in it has been written, and one
compiler failure fails the batch.

In optimize mode output names are content-addressed:
``main.css`` → ``main.1a2b3c4d.min.css`` (first 8 hex digits of SHA-256).
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from pathlib import Path, PurePosixPath

from src.adapters.base import Tool, ToolError
from src.adapters.registry import Toolchain
from src.core.models.build import BuildOptions, BuildSettings
from src.core.models.manifest import OutputMapping, StageBatch
from src.core.services.theme.errors import TransformError
from src.core.services.theme.resolver import resolve
from src.core.services.theme.tasks import gather_all

logger = logging.getLogger(__name__)


def change_extension(file: str, extension: str) -> str:
    """``assets/main.scss`` → ``assets/main.css``."""
    return str(PurePosixPath(file).with_suffix(extension))


def content_address(filename: str, data: bytes) -> str:
    """Insert a short content digest and ``.min`` before the extension."""
    digest = hashlib.sha256(data).hexdigest()[:8]
    p = PurePosixPath(filename)
    return f"{p.stem}.{digest}.min{p.suffix}"


def _write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


class TransformStage:
    """Compile every entry point matching ``pattern`` into the output tree."""

    def __init__(
        self,
        name: str,
        *,
        pattern: str,
        extension: str,
        compiler: Tool,
        source_dir: Path,
        output_dir: Path,
        output_root: str,
        optimize: bool = False,
    ):
        self.name = name
        self.pattern = pattern
        self.extension = extension
        self._compiler = compiler
        self._source_dir = source_dir
        self._output_dir = output_dir
        self._output_root = output_root
        self._optimize = optimize

    def __repr__(self) -> str:
        return f"<TransformStage {self.name!r} {self.pattern!r} → {self.extension}>"

    async def transform(self, source: Path, dest: Path) -> OutputMapping:
        """Compile ``source`` and write it to ``dest`` (or its digest name).

        Returns:
            Mapping from the source-relative path to the output path,
            which is prefixed with the output root label.

        Raises:
            TransformError: If the compiler rejects the file or the output
                can't be written.
        """
        try:
            data = await self._compiler.compile(source, optimize=self._optimize)
        except ToolError as e:
            raise TransformError(source, e.message) from e

        dest = dest.with_suffix(self.extension)
        if self._optimize:
            dest = dest.with_name(content_address(dest.name, data))

        try:
            await asyncio.to_thread(_write_bytes, dest, data)
        except OSError as e:
            raise TransformError(source, f"cannot write {dest}: {e}") from e

        key = source.relative_to(self._source_dir).as_posix()
        value = str(PurePosixPath(self._output_root) / dest.relative_to(self._output_dir).as_posix())
        logger.debug("%s: %s → %s", self.name, key, value)
        return OutputMapping(key=key, value=value)

    async def run(self, generation: int) -> StageBatch:
        """Transform all entry points and return them as one batch."""
        files = resolve(self.pattern, self._source_dir)
        mappings = await gather_all(*(
            self.transform(
                self._source_dir / file,
                self._output_dir / change_extension(file, self.extension),
            )
            for file in files
        ))
        logger.info("%s: %d files (generation %d)", self.name, len(mappings), generation)
        return StageBatch(stage=self.name, generation=generation, mappings=tuple(mappings))


def style_stage(settings: BuildSettings, toolchain: Toolchain, options: BuildOptions) -> TransformStage:
    return TransformStage(
        "styles",
        pattern=settings.style_pattern,
        extension=".css",
        compiler=toolchain.style,
        source_dir=settings.source_dir,
        output_dir=settings.output_dir,
        output_root=settings.output_root,
        optimize=options.optimize,
    )


def script_stage(settings: BuildSettings, toolchain: Toolchain, options: BuildOptions) -> TransformStage:
    return TransformStage(
        "scripts",
        pattern=settings.script_pattern,
        extension=".js",
        compiler=toolchain.script,
        source_dir=settings.source_dir,
        output_dir=settings.output_dir,
        output_root=settings.output_root,
        optimize=options.optimize,
    )
