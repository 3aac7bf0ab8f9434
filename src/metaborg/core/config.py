"""Configuration management for metaborg."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from metaborg.fs.selection import Matcher, Selection
from metaborg.fs.sorter import SortBy, Sorter, SortOrder
from metaborg.metadata.fallback import FallbackSpec
from metaborg.metadata.inherit import InheritMethod
from metaborg.sources import Anchor, Source, Sourcer

if TYPE_CHECKING:
    from metaborg.metadata.resolver import Resolver


@dataclass
class SelectionConfig:
    """Glob patterns selecting item files and directories."""

    include_files: list[str] = field(default_factory=lambda: ["*"])
    exclude_files: list[str] = field(default_factory=list)
    include_dirs: list[str] = field(default_factory=lambda: ["*"])
    exclude_dirs: list[str] = field(default_factory=list)


@dataclass
class SortConfig:
    """Ordering of item paths within a directory."""

    sort_by: SortBy = SortBy.NAME
    sort_order: SortOrder = SortOrder.ASCENDING


@dataclass
class SourceConfig:
    """A metadata file name and where it sits relative to its items."""

    name: str
    anchor: Anchor


def _default_sources() -> list[SourceConfig]:
    return [
        SourceConfig("item.yml", Anchor.EXTERNAL),
        SourceConfig("self.yml", Anchor.INTERNAL),
    ]


def _split_patterns(raw: str) -> list[str]:
    return [p.strip() for p in raw.split(",") if p.strip()]


def _parse_sources(raw: str) -> list[SourceConfig]:
    """Parse ``name:anchor`` pairs, e.g. ``item.yml:external,self.yml:internal``."""
    sources = []
    for entry in _split_patterns(raw):
        name, _, anchor = entry.partition(":")
        sources.append(SourceConfig(name, Anchor(anchor or "external")))
    return sources


@dataclass
class Config:
    """Main library configuration."""

    sources: list[SourceConfig] = field(default_factory=_default_sources)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    sort: SortConfig = field(default_factory=SortConfig)
    # Ascending walks stop at this directory; None walks to the filesystem root
    boundary: Path | None = None
    inherit_method: InheritMethod = InheritMethod.OVERWRITE
    # Nested key tree of fallback method names, see FallbackSpec.from_tree
    fallbacks: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        config = cls()

        if sources := os.environ.get("METABORG_SOURCES"):
            config.sources = _parse_sources(sources)

        # Selection patterns
        if patterns := os.environ.get("METABORG_INCLUDE_FILES"):
            config.selection.include_files = _split_patterns(patterns)
        if patterns := os.environ.get("METABORG_EXCLUDE_FILES"):
            config.selection.exclude_files = _split_patterns(patterns)
        if patterns := os.environ.get("METABORG_INCLUDE_DIRS"):
            config.selection.include_dirs = _split_patterns(patterns)
        if patterns := os.environ.get("METABORG_EXCLUDE_DIRS"):
            config.selection.exclude_dirs = _split_patterns(patterns)

        # Sorting
        if sort_by := os.environ.get("METABORG_SORT_BY"):
            config.sort.sort_by = SortBy(sort_by)
        if sort_order := os.environ.get("METABORG_SORT_ORDER"):
            config.sort.sort_order = SortOrder(sort_order)

        if boundary := os.environ.get("METABORG_BOUNDARY"):
            config.boundary = Path(boundary)

        if method := os.environ.get("METABORG_INHERIT_METHOD"):
            config.inherit_method = InheritMethod(method)
        if fallbacks := os.environ.get("METABORG_FALLBACKS"):
            config.fallbacks = yaml.safe_load(fallbacks) or {}

        return config

    def build_selection(self) -> Selection:
        """Build the selection; metadata files themselves are never items."""
        return Selection(
            include_files=Matcher(self.selection.include_files),
            exclude_files=Matcher(self.selection.exclude_files + [s.name for s in self.sources]),
            include_dirs=Matcher(self.selection.include_dirs),
            exclude_dirs=Matcher(self.selection.exclude_dirs),
        )

    def build_sorter(self) -> Sorter:
        return Sorter(self.sort.sort_by, self.sort.sort_order)

    def build_sourcer(self) -> Sourcer:
        return Sourcer([Source(s.name, s.anchor) for s in self.sources])

    def build_fallbacks(self) -> FallbackSpec:
        return FallbackSpec.from_tree(self.fallbacks)

    def build_resolver(self) -> Resolver:
        """Create a resolver wired with this configuration."""
        from metaborg.metadata.resolver import Resolver

        return Resolver(
            sourcer=self.build_sourcer(),
            selection=self.build_selection(),
            sorter=self.build_sorter(),
            boundary=self.boundary,
            fallbacks=self.build_fallbacks(),
            inherit_method=self.inherit_method,
        )
