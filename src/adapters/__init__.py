"""Adapters — bindings for the external tools the build shells out to.

Public re-exports for convenient access.
"""

from src.adapters.base import CommandTool, Tool, ToolError
from src.adapters.mock import MockTool
from src.adapters.registry import Toolchain, default_toolchain

__all__ = [
    "CommandTool",
    "MockTool",
    "Tool",
    "ToolError",
    "Toolchain",
    "default_toolchain",
]
