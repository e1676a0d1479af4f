"""
Build pipeline — the orchestrator of a theme build.

State machine
─────────────
One-shot::

    IDLE → COPYING_ASSETS → TRANSFORMING → AGGREGATING → REWRITING_TEMPLATES → IDLE

Watch mode copies assets once, runs the first generation, then loops:
a change to a style/script source runs ``TRANSFORMING → AGGREGATING →
REWRITING_TEMPLATES`` again as a new generation; a change to a template
only re-rewrites that template against the last finalized manifest.
Dirty builds never enter ``COPYING_ASSETS``.

Every phase is a join barrier: copy passes run concurrently but all of
them finish before any transform starts; the style and script stages
run concurrently but both complete batches are in hand before the fold;
templates are rewritten only from the manifest of their own generation.
Generations run one after another on the event loop, so a change that
arrives mid-generation is picked up by the next poll.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.adapters.registry import Toolchain
from src.core.models.build import BuildOptions, BuildSettings
from src.core.models.manifest import Manifest, StageBatch
from src.core.observability.logging_config import set_generation
from src.core.services.theme.asset_copy import copy_passes
from src.core.services.theme.errors import BuildError
from src.core.services.theme.manifest import ManifestAggregator
from src.core.services.theme.resolver import FileWatcher, resolve
from src.core.services.theme.tasks import gather_all
from src.core.services.theme.templates import TemplateRewriter
from src.core.services.theme.transform import script_stage, style_stage

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    COPYING_ASSETS = "copying_assets"
    TRANSFORMING = "transforming"
    AGGREGATING = "aggregating"
    REWRITING_TEMPLATES = "rewriting_templates"


# ── Reports ─────────────────────────────────────────────────────────


@dataclass
class PhaseResult:
    """Result of one phase."""

    name: str
    status: str = "pending"             # "pending" | "done" | "skipped" | "error"
    duration_ms: int = 0
    files: int = 0
    error: str = ""
    detail: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "status": self.status,
            "duration_ms": self.duration_ms,
            "files": self.files,
            "error": self.error,
            "detail": self.detail,
        }


@dataclass
class GenerationReport:
    """Result of one generation (transform → aggregate → templates)."""

    generation: int
    trigger: str = "startup"            # "startup" | "change"
    phases: list[PhaseResult] = field(default_factory=list)
    manifest_entries: int = 0
    ok: bool = False
    duration_ms: int = 0

    def to_dict(self) -> dict:
        return {
            "generation": self.generation,
            "trigger": self.trigger,
            "ok": self.ok,
            "duration_ms": self.duration_ms,
            "manifest_entries": self.manifest_entries,
            "phases": [p.to_dict() for p in self.phases],
        }


@dataclass
class BuildReport:
    """Result of a whole build invocation."""

    mode: str
    copy: PhaseResult | None = None
    generations: list[GenerationReport] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        copy_ok = self.copy is None or self.copy.status in ("done", "skipped")
        return copy_ok and bool(self.generations) and self.generations[-1].ok

    @property
    def last(self) -> GenerationReport | None:
        return self.generations[-1] if self.generations else None

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "ok": self.ok,
            "copy": self.copy.to_dict() if self.copy else None,
            "generations": [g.to_dict() for g in self.generations],
        }


Listener = Callable[[PipelineState, int], None]
"""Called with (new state, current generation) on every transition."""


# ── Orchestrator ────────────────────────────────────────────────────


class BuildPipeline:
    """Sequence copy, transform, aggregate and template phases.

    Args:
        settings: Build layout.
        options: Mode flags, fixed for the lifetime of the pipeline.
        toolchain: External tools.
        on_transition: Optional listener for state transitions.
    """

    def __init__(
        self,
        settings: BuildSettings,
        options: BuildOptions,
        toolchain: Toolchain,
        *,
        on_transition: Listener | None = None,
    ):
        self.settings = settings
        self.options = options
        self.toolchain = toolchain

        self.state = PipelineState.IDLE
        self.generation = 0
        self.manifest: Manifest | None = None
        self.report = BuildReport(mode=options.mode_label)

        self._stages = [
            style_stage(settings, toolchain, options),
            script_stage(settings, toolchain, options),
        ]
        self._aggregator = ManifestAggregator(settings.output_root)
        self._rewriter = TemplateRewriter(toolchain.html, optimize=options.optimize)
        self._listeners: list[Listener] = [on_transition] if on_transition else []

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _enter(self, state: PipelineState) -> None:
        self.state = state
        logger.debug("→ %s (generation %d)", state.value, self.generation)
        for listener in self._listeners:
            listener(state, self.generation)

    async def _phase(
        self,
        result: PhaseResult,
        work: Awaitable[Any],
        count: Callable[[Any], int] = len,
    ) -> Any:
        """Await one phase, recording its timing and outcome in ``result``."""
        start = time.monotonic()
        try:
            value = await work
        except Exception as e:
            result.status = "error"
            result.error = str(e)
            raise
        finally:
            result.duration_ms = int((time.monotonic() - start) * 1000)
        result.status = "done"
        result.files = count(value)
        return value

    # ── Entry point ─────────────────────────────────────────────────

    async def run(self) -> BuildReport:
        """Run the build for the configured mode.

        One-shot builds return after the first generation and raise on
        the first failure.  Watch builds never return on their own.
        """
        logger.info("Build started (%s)", self.options.mode_label)

        if self.options.copy_assets:
            await self.copy_assets()
        else:
            self.report.copy = PhaseResult("copy", status="skipped")

        if not self.options.watch:
            await self.run_generation()
            return self.report

        try:
            await self.run_generation()
        except BuildError as e:
            logger.error("❌ %s", e)
        await self.watch()
        return self.report

    # ── Phases ──────────────────────────────────────────────────────

    async def copy_assets(self) -> PhaseResult:
        """Run every copy pass; returns once all of them have finished."""
        result = PhaseResult("copy")
        self.report.copy = result
        self._enter(PipelineState.COPYING_ASSETS)
        try:
            counts = await self._phase(
                result,
                copy_passes(self.settings.copy_passes(), self.toolchain.svg),
                count=lambda c: sum(c.values()),
            )
        except BuildError:
            self._enter(PipelineState.IDLE)
            raise
        result.detail = counts
        logger.info("Assets: %d files copied", result.files)
        return result

    async def _transform(self, generation: int) -> list[StageBatch]:
        return await gather_all(*(s.run(generation) for s in self._stages))

    async def _aggregate(self, generation: int, batches: list[StageBatch]) -> Manifest:
        return self._aggregator.fold(generation, batches)

    async def run_generation(self, trigger: str = "startup") -> GenerationReport:
        """Run one generation: transform, fold the manifest, rewrite templates.

        Raises:
            BuildError: On the first failing phase.  ``self.manifest``
                keeps the last finalized manifest in that case.
        """
        self.generation += 1
        generation = self.generation
        set_generation(generation)
        report = GenerationReport(generation=generation, trigger=trigger)
        self.report.generations.append(report)
        start = time.monotonic()

        try:
            self._enter(PipelineState.TRANSFORMING)
            transform = PhaseResult("transform")
            report.phases.append(transform)
            batches = await self._phase(
                transform,
                self._transform(generation),
                count=lambda bs: sum(len(b) for b in bs),
            )

            self._enter(PipelineState.AGGREGATING)
            aggregate = PhaseResult("aggregate")
            report.phases.append(aggregate)
            manifest = await self._phase(aggregate, self._aggregate(generation, batches))
            self.manifest = manifest
            report.manifest_entries = len(manifest)

            self._enter(PipelineState.REWRITING_TEMPLATES)
            templates = PhaseResult("templates")
            report.phases.append(templates)
            await self._phase(templates, self._rewrite_all(manifest, generation))

            report.ok = True
        finally:
            report.duration_ms = int((time.monotonic() - start) * 1000)
            self._enter(PipelineState.IDLE)

        logger.info(
            "Generation %d done in %dms (%d manifest entries)",
            generation, report.duration_ms, report.manifest_entries,
        )
        return report

    async def _rewrite_all(self, manifest: Manifest, generation: int) -> list:
        if manifest.generation != generation:
            raise RuntimeError(
                f"Manifest of generation {manifest.generation} handed to "
                f"generation {generation}"
            )
        return await self._rewriter.rewrite(
            self.settings.template_pattern,
            source=self.settings.source_dir,
            dest=self.settings.output_dir,
            manifest=manifest,
        )

    async def rewrite_templates(self, files: list[str]) -> list:
        """Re-rewrite just ``files`` against the last finalized manifest."""
        manifest = self.manifest
        if manifest is None:
            if self.options.optimize:
                logger.warning("No successful build yet — skipping template rewrite")
                return []
            manifest = Manifest(generation=0)

        self._enter(PipelineState.REWRITING_TEMPLATES)
        try:
            return await self._rewriter.rewrite(
                self.settings.template_pattern,
                source=self.settings.source_dir,
                dest=self.settings.output_dir,
                manifest=manifest,
                files=files,
            )
        finally:
            self._enter(PipelineState.IDLE)

    # ── Watch ───────────────────────────────────────────────────────

    def _watch_sets(self) -> tuple[set[str], set[str]]:
        root = self.settings.source_dir
        sources = set(resolve(self.settings.style_watch_pattern, root))
        sources |= set(resolve(self.settings.script_watch_pattern, root))
        templates = set(resolve(self.settings.template_pattern, root)) - sources
        return sources, templates

    async def watch(self) -> None:
        """Rebuild on change, forever.

        Generation failures are logged and the loop keeps going; a
        missing source root is fatal.
        """
        watcher = FileWatcher(self.settings.source_dir, interval=self.settings.poll_interval)
        sources, templates = self._watch_sets()
        watcher.track(sources | templates)
        logger.info("Watching %d files for changes…", len(watcher.files))

        while True:
            changed = await watcher.changes()
            source_changes = [f for f in changed if f in sources]
            template_changes = [
                f for f in changed
                if f in templates and (self.settings.source_dir / f).is_file()
            ]

            try:
                if source_changes:
                    logger.info("Changed: %s", ", ".join(source_changes))
                    await self.run_generation(trigger="change")
                elif template_changes:
                    logger.info("Changed: %s", ", ".join(template_changes))
                    await self.rewrite_templates(template_changes)
            except BuildError as e:
                logger.error("❌ %s", e)

            # Pick up files added since the last resolve
            sources, templates = self._watch_sets()
            watcher.track(sources | templates)
