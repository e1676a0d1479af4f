"""
Asset copy — mirror vendor icons, images and license files into the output.

Every copy pass reads the bytes of all its files, optionally runs them
through a batch transform, and writes them to the mirrored paths.  Icon
passes use the SVG transform for their license files too: ``minify_svgs``
hands back anything that doesn't start with ``<`` untouched, so one code
path covers SVG markup and plain text alike.  The whole pass goes to the
optimizer at once, which lets it process an icon set in a few runs
instead of one per icon.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from src.adapters.base import Tool, ToolError
from src.core.models.build import CopyPass
from src.core.services.theme.errors import CopyError, ResolveError
from src.core.services.theme.resolver import resolve, strip_parents
from src.core.services.theme.tasks import gather_all

logger = logging.getLogger(__name__)

ByteTransform = Callable[[list[bytes]], Awaitable[list[bytes]]]
"""Async callback applied to the bytes of a pass's files before they are
written.  Returns one output per input, in the same order."""


# ── Transforms ──────────────────────────────────────────────────────


async def minify_svgs(items: list[bytes], optimizer: Tool) -> list[bytes]:
    """Optimize the SVG markup among ``items``; everything else is returned unchanged."""
    markup = [i for i, data in enumerate(items) if data.startswith(b"<")]
    result = list(items)
    if not markup:
        return result

    optimized = await optimizer.filter_many([items[i] for i in markup])
    for i, data in zip(markup, optimized):
        result[i] = data
    return result


async def minify_svg(data: bytes, optimizer: Tool) -> bytes:
    """Optimize SVG markup; return non-markup data unchanged."""
    return (await minify_svgs([data], optimizer))[0]


def svg_transform(optimizer: Tool) -> ByteTransform:
    """Bind ``minify_svgs`` to an optimizer for use as a copy transform."""

    async def _transform(items: list[bytes]) -> list[bytes]:
        return await minify_svgs(items, optimizer)

    return _transform


# ── Copy ────────────────────────────────────────────────────────────


def _write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


async def copy_all(
    pattern: str,
    *,
    source: Path,
    dest: Path,
    transform: ByteTransform | None = None,
) -> list[Path]:
    """Copy every file matching ``pattern`` under ``source`` into ``dest``.

    Files reached through leading ``../`` segments land directly inside
    ``dest`` (``../LICENSE`` → ``dest/LICENSE``).

    Returns:
        Written paths, in resolve order.

    Raises:
        CopyError: If ``source`` is missing, or a file can't be read,
            transformed or written.
    """
    try:
        files = resolve(pattern, source)
    except ResolveError as e:
        raise CopyError(f"Cannot copy '{pattern}': {e}") from e

    targets = [dest / strip_parents(f) for f in files]
    try:
        blobs = await gather_all(*(asyncio.to_thread((source / f).read_bytes) for f in files))
        if transform is not None and blobs:
            blobs = await transform(blobs)
        await gather_all(*(asyncio.to_thread(_write_bytes, t, b) for t, b in zip(targets, blobs)))
    except (OSError, ToolError, UnicodeDecodeError) as e:
        raise CopyError(f"Cannot copy '{pattern}' from {source}: {e}") from e

    logger.debug("Copied %d files: %s → %s", len(targets), source, dest)
    return targets


async def copy_passes(passes: list[CopyPass], svg_optimizer: Tool) -> dict[str, int]:
    """Run all copy passes concurrently; the first failure cancels the rest.

    Returns:
        Number of files written per pass label.
    """
    transform = svg_transform(svg_optimizer)

    async def _run(p: CopyPass) -> tuple[str, int]:
        written = await copy_all(
            p.pattern,
            source=p.source,
            dest=p.dest,
            transform=transform if p.optimize_svg else None,
        )
        return p.label, len(written)

    counts: dict[str, int] = {}
    for label, count in await gather_all(*(_run(p) for p in passes)):
        counts[label] = counts.get(label, 0) + count
    return counts
