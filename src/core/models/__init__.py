"""
Domain models for the theme build.

All models are re-exported here for convenient access:

    from src.core.models import BuildOptions, BuildSettings, Manifest
"""

from src.core.models.build import BuildOptions, BuildSettings, CopyPass, IconSet
from src.core.models.manifest import Manifest, OutputMapping, StageBatch

__all__ = [
    # build.py
    "BuildOptions",
    "BuildSettings",
    "CopyPass",
    "IconSet",
    # manifest.py
    "Manifest",
    "OutputMapping",
    "StageBatch",
]
