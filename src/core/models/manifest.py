"""
Manifest models — what the transform stages produce and the templates consume.

A ``Manifest`` is immutable and tagged with the generation that built
it.  A new generation never edits an existing manifest; it builds a new
one.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class OutputMapping:
    """One transformed file: source-relative key → output path."""

    key: str        # e.g. "assets/stylesheets/main.scss"
    value: str      # e.g. "dist/assets/stylesheets/main.1a2b3c4d.min.css"


@dataclass(frozen=True)
class StageBatch:
    """The complete output of one transform stage for one generation."""

    stage: str
    generation: int
    mappings: tuple[OutputMapping, ...] = ()

    def __len__(self) -> int:
        return len(self.mappings)


@dataclass(frozen=True)
class Manifest(Mapping[str, str]):
    """Ordered, read-only mapping from source path to output path."""

    generation: int
    entries: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze a private copy so later edits to the caller's dict can't leak in
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __getitem__(self, key: str) -> str:
        return self.entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict:
        return {"generation": self.generation, "entries": dict(self.entries)}
