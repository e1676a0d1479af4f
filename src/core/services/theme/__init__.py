"""
Theme build — copy icons, compile styles and scripts, rewrite templates.

Public API:
    from src.core.services.theme import BuildPipeline, PipelineState
    from src.core.services.theme import resolve, FileWatcher
    from src.core.services.theme import copy_all, minify_svg, minify_svgs
    from src.core.services.theme import TransformStage, ManifestAggregator
    from src.core.services.theme import TemplateRewriter, substitute
"""

from src.core.services.theme.asset_copy import copy_all, copy_passes, minify_svg, minify_svgs
from src.core.services.theme.errors import (
    BuildError,
    CopyError,
    ResolveError,
    TemplateError,
    TransformError,
)
from src.core.services.theme.manifest import ManifestAggregator
from src.core.services.theme.pipeline import (
    BuildPipeline,
    BuildReport,
    GenerationReport,
    PhaseResult,
    PipelineState,
)
from src.core.services.theme.resolver import FileWatcher, expand_braces, resolve
from src.core.services.theme.templates import BANNER, TemplateRewriter, substitute
from src.core.services.theme.transform import TransformStage, script_stage, style_stage

__all__ = [
    "BANNER",
    "BuildError",
    "BuildPipeline",
    "BuildReport",
    "CopyError",
    "FileWatcher",
    "GenerationReport",
    "ManifestAggregator",
    "PhaseResult",
    "PipelineState",
    "ResolveError",
    "TemplateError",
    "TemplateRewriter",
    "TransformError",
    "TransformStage",
    "copy_all",
    "copy_passes",
    "expand_braces",
    "minify_svg",
    "minify_svgs",
    "resolve",
    "script_stage",
    "style_stage",
    "substitute",
]
