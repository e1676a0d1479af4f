"""Node.js tooling — the CLIs the theme build shells out to."""

from src.adapters.node.esbuild import EsbuildTool
from src.adapters.node.html_minifier import HtmlMinifierTool
from src.adapters.node.sass import SassTool
from src.adapters.node.svgo import SvgoTool

__all__ = [
    "EsbuildTool",
    "HtmlMinifierTool",
    "SassTool",
    "SvgoTool",
]
