"""
Mock tool — test double for every external tool.

Records every invocation and answers from a callable, so tests can run
the whole pipeline without node tooling installed.  By default it
echoes stdin back, or the source file's contents for a compile.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

from src.adapters.base import Tool, ToolError


class MockTool(Tool):
    """Universal mock tool for testing."""

    def __init__(
        self,
        tool_name: str = "mock",
        available: bool = True,
        respond: Callable[[list[str], bytes], bytes] | None = None,
        delay: float = 0.0,
    ):
        self._name = tool_name
        self._available = available
        self._respond = respond
        self._delay = delay
        self._failures: dict[str, str] = {}
        self._call_log: list[tuple[list[str], bytes]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[tuple[list[str], bytes]]:
        """All (args, stdin) pairs this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_failure(self, match: str, error: str = "Mock failure") -> None:
        """Fail any call whose arguments or input contain ``match``."""
        self._failures[match] = error

    def clear_failures(self) -> None:
        self._failures.clear()

    async def run(self, args: list[str], data: bytes = b"") -> bytes:
        self._call_log.append((list(args), data))
        if self._delay:
            await asyncio.sleep(self._delay)
        else:
            await asyncio.sleep(0)

        for match, error in self._failures.items():
            if any(match in a for a in args) or match.encode() in data:
                raise ToolError(self._name, error, returncode=1)

        if self._respond is not None:
            return self._respond(args, data)
        if data:
            return data
        # Compile call: the last argument is the source path
        return Path(args[-1]).read_bytes() if args else b""
