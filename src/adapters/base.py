"""
Tool base — the contract between the build pipeline and external tools.

The pipeline never spawns node tooling directly.  Every collaborator
(style compiler, script compiler, SVG optimizer, HTML minifier) is a
``Tool`` that takes bytes on stdin and returns bytes from stdout.

To create a new tool:
    1. Subclass Tool (or CommandTool for a CLI binary)
    2. Implement name and arguments
    3. Put it in the Toolchain
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class ToolError(Exception):
    """Raised when an external tool exits non-zero or cannot be started."""

    def __init__(self, tool: str, message: str, returncode: int | None = None):
        super().__init__(f"{tool}: {message}")
        self.tool = tool
        self.message = message
        self.returncode = returncode


class Tool(ABC):
    """Abstract base class for all external tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The tool identifier (e.g., 'sass', 'esbuild')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the underlying binary can be found.  Never raises."""

    @abstractmethod
    async def run(self, args: list[str], data: bytes = b"") -> bytes:
        """Run the tool with ``data`` on stdin and return its stdout.

        Raises:
            ToolError: If the tool cannot be started or exits non-zero.
        """

    def arguments(self, source: Path | None = None, *, optimize: bool = False) -> list[str]:
        """Command-line arguments for one invocation."""
        return [str(source)] if source is not None else []

    async def compile(self, source: Path, *, optimize: bool = False) -> bytes:
        """Compile one source file, returning the compiled output."""
        return await self.run(self.arguments(source, optimize=optimize))

    async def filter(self, data: bytes) -> bytes:
        """Pipe ``data`` through the tool."""
        return await self.run(self.arguments(), data)

    async def filter_many(self, items: list[bytes]) -> list[bytes]:
        """Pipe each of ``items`` through the tool, keeping their order.

        Tools that can process many inputs in one run override this.
        """
        return list(await asyncio.gather(*(self.filter(data) for data in items)))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


_config_dir: Path | None = None


def write_tool_config(filename: str, content: str) -> Path:
    """Write a generated tool config into a per-process temp directory."""
    global _config_dir
    if _config_dir is None:
        _config_dir = Path(tempfile.mkdtemp(prefix="themebuild-"))
    path = _config_dir / filename
    path.write_text(content, encoding="utf-8")
    return path


def find_command(binary: str, project_root: Path | None = None) -> list[str] | None:
    """Locate a node CLI: project-local ``node_modules/.bin`` first, then PATH."""
    if project_root is not None:
        local = project_root / "node_modules" / ".bin" / binary
        if local.is_file():
            return [str(local)]
    found = shutil.which(binary)
    return [found] if found else None


class CommandTool(Tool):
    """A tool backed by a command-line binary, driven over stdin/stdout.

    ``limit`` is shared between tools so that the number of concurrent
    child processes stays bounded for the whole build.
    """

    binary: str = ""

    def __init__(
        self,
        command: list[str] | None = None,
        *,
        project_root: Path | None = None,
        limit: asyncio.Semaphore | None = None,
    ):
        self._command = command or find_command(self.binary, project_root)
        self._cwd = project_root
        self._limit = limit

    @property
    def name(self) -> str:
        return self.binary

    def is_available(self) -> bool:
        return bool(self._command)

    async def run(self, args: list[str], data: bytes = b"") -> bytes:
        if not self._command:
            raise ToolError(self.name, f"'{self.binary}' not found (npm install?)")

        cmd = [*self._command, *args]
        if self._limit is None:
            return await self._exec(cmd, data)
        async with self._limit:
            return await self._exec(cmd, data)

    async def _exec(self, cmd: list[str], data: bytes) -> bytes:
        logger.debug("▶ %s", " ".join(cmd))
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(self._cwd) if self._cwd else None,
            )
        except OSError as e:
            raise ToolError(self.name, f"cannot start: {e}") from e

        stdout, stderr = await proc.communicate(data)
        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise ToolError(
                self.name,
                message or f"exit code {proc.returncode}",
                returncode=proc.returncode,
            )
        return stdout
