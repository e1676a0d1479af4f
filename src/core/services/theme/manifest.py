"""
Manifest aggregation — fold complete stage batches into one Manifest.

The fold starts from an empty mapping every generation, so an entry
whose output name changed (a new content digest) can never survive
from the previous generation.  Batches are folded in the order given;
a key written twice within one generation keeps the last value.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from src.core.models.manifest import Manifest, StageBatch

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """Use ``/`` separators whatever the host convention."""
    path = path.replace("\\", "/")
    if os.sep != "/":
        path = path.replace(os.sep, "/")
    return path


class ManifestAggregator:
    """Build per-generation manifests from transform stage batches.

    Args:
        output_root: Label of the output root (e.g. ``"dist"``).  It is
            stripped from the front of every value.
    """

    def __init__(self, output_root: str):
        self._prefix = normalize_path(output_root).rstrip("/") + "/"

    def fold(self, generation: int, batches: Iterable[StageBatch]) -> Manifest:
        """Fold complete batches into a brand-new Manifest.

        Raises:
            ValueError: If a batch belongs to a different generation.
        """
        entries: dict[str, str] = {}
        for batch in batches:
            if batch.generation != generation:
                raise ValueError(
                    f"Batch '{batch.stage}' is from generation {batch.generation}, "
                    f"expected {generation}"
                )
            for mapping in batch.mappings:
                value = normalize_path(mapping.value)
                if value.startswith(self._prefix):
                    value = value[len(self._prefix):]
                entries[normalize_path(mapping.key)] = value

        manifest = Manifest(generation=generation, entries=entries)
        logger.info("Manifest: %d entries (generation %d)", len(manifest), generation)
        return manifest
