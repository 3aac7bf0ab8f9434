"""Resolving metadata values across an item hierarchy.

The resolver finds the metadata block for an item, projects a key path out
of it, and walks either up the item's ancestors or down its descendants:

- Ascending combines the values found at each level, from the level furthest
  from the item down to the item itself, with an :class:`InheritMethod`.
- Descending produces the values found on the item's selected children. A
  child directory with no value is expanded into its own children, but only
  once the children already queued have been produced. A harvest method
  reduces those values to one.

Failures at a single level that only mean "no metadata here" are logged and
recorded in :class:`Diagnostics`; everything else is raised.
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Sequence

from loguru import logger

from metaborg.core.exceptions import (
    FallbackError,
    MetaborgError,
    MetadataReadError,
    TraversalError,
)
from metaborg.core.value import Value
from metaborg.fs.selection import Selection
from metaborg.fs.sorter import Sorter
from metaborg.fs.walker import ChildFileWalker, ParentFileWalker
from metaborg.metadata.fallback import Fallback, FallbackSpec, HarvestMethod
from metaborg.metadata.inherit import InheritMethod
from metaborg.metadata.plexer import plex
from metaborg.metadata.reader import read_schema
from metaborg.metadata.schema import Block, get_key_path
from metaborg.sources.source import Sourcer
from metaborg.stream.producer import Item, Producer

KeyPath = Sequence[str]


class Direction(str, Enum):
    """Which way to walk from an item."""

    ASCEND = "ascend"
    DESCEND = "descend"


# =============================================================================
# Diagnostics
# =============================================================================


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal failure met while resolving metadata."""

    path: Path
    error: MetaborgError


@dataclass
class Diagnostics:
    """Collects non-fatal failures so callers can inspect them."""

    entries: list[Diagnostic] = field(default_factory=list)

    def record(self, path: Path, error: MetaborgError) -> None:
        logger.warning(f"Ignoring metadata at {path}: {error}")
        self.entries.append(Diagnostic(path, error))

    def clear(self) -> None:
        self.entries.clear()

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


# =============================================================================
# Producers
# =============================================================================


class ParentsProducer(Producer):
    """Values found at an item and each of its ancestors, nearest first.

    Levels without a value are skipped. A fatal failure is produced as an
    error and ends the walk.
    """

    def __init__(self, resolver: Resolver, origin: Path, key_path: KeyPath) -> None:
        self.resolver = resolver
        self.key_path = key_path
        self._walker = ParentFileWalker(origin, resolver.boundary)
        self._failed = False

    def _pull(self) -> Item | None:
        if self._failed:
            return None
        for path in self._walker:
            try:
                value = self.resolver.value_for(path, self.key_path)
            except MetaborgError as e:
                self._failed = True
                return e
            if value is not None:
                return value
        return None


class ChildrenProducer(Producer):
    """Values found on the selected descendants of a directory.

    Traversal is breadth first and lazy: a child directory without a value
    is only listed once every queued item before it has been produced. A
    fatal failure is produced as an error and ends the walk.
    """

    def __init__(self, resolver: Resolver, origin: Path, key_path: KeyPath) -> None:
        self.resolver = resolver
        self.key_path = key_path
        self._walker = ChildFileWalker(origin, resolver.selection, resolver.sorter)
        self._failed = False

    def _pull(self) -> Item | None:
        if self._failed:
            return None
        while True:
            try:
                path = next(self._walker, None)
                if path is None:
                    return None
                value = self.resolver.value_for(path, self.key_path)
            except MetaborgError as e:
                self._failed = True
                return e
            if value is not None:
                return value
            if self._walker.delve():
                logger.debug(f"No value for {list(self.key_path)} at {path}, delving")


# =============================================================================
# Resolver
# =============================================================================


def _normalize(path: Path | str) -> Path:
    return Path(os.path.abspath(path))


class Resolver:
    """Resolves metadata values for item paths.

    Args:
        sourcer: Metadata file sources, tried in order for each item.
        selection: Selects item files and directories.
        sorter: Orders items within a directory.
        boundary: Directory at which ascending stops.
        diagnostics: Collector for non-fatal failures; a new one is created
            if omitted.
        fallbacks: Per-key fallback methods used by :meth:`resolve`.
        inherit_method: Method for keys without a configured fallback.

    Example:
        resolver = Resolver(sourcer, selection, sorter, boundary=library_root)
        title = resolver.resolve(track_path, ["title"], Direction.ASCEND)
        tracks = resolver.resolve(album_path, ["title"], method=HarvestMethod.COLLECT)
    """

    def __init__(
        self,
        sourcer: Sourcer,
        selection: Selection | None = None,
        sorter: Sorter | None = None,
        boundary: Path | str | None = None,
        diagnostics: Diagnostics | None = None,
        fallbacks: FallbackSpec | None = None,
        inherit_method: InheritMethod = InheritMethod.OVERWRITE,
    ) -> None:
        self.sourcer = sourcer
        self.selection = selection if selection is not None else Selection()
        self.sorter = sorter if sorter is not None else Sorter()
        self.boundary = _normalize(boundary) if boundary is not None else None
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.fallbacks = fallbacks if fallbacks is not None else FallbackSpec()
        self.inherit_method = inherit_method

    def block_for(self, item_path: Path | str) -> Block | None:
        """Load the metadata block describing an item.

        Returns:
            The block, or None if no source has metadata for the item.

        Raises:
            SourceLookupError: On a fatal metadata file lookup failure.
            MetadataReadError: If a metadata file exists but cannot be
                opened.
            TraversalError: If the items next to a metadata file cannot be
                listed.
        """
        item_path = _normalize(item_path)
        found = self.sourcer.meta_path(item_path)
        if found is None:
            return None
        meta_path, source = found

        try:
            schema = read_schema(meta_path, source.arity, source.format)
        except MetadataReadError as e:
            if e.fatal:
                raise
            self.diagnostics.record(meta_path, e)
            return None

        block = None
        for plexed in plex(schema, source.item_paths(meta_path, self.selection), self.sorter):
            if isinstance(plexed, MetaborgError):
                self.diagnostics.record(meta_path, plexed)
            elif plexed[0] == item_path:
                block = plexed[1]

        if block is None:
            logger.debug(f"No block for {item_path} in {meta_path}")
        return block

    def value_for(self, item_path: Path | str, key_path: KeyPath) -> Value | None:
        """The value at a key path in an item's own block, if any."""
        block = self.block_for(item_path)
        if block is None:
            return None
        return get_key_path(block, key_path)

    def parents(self, origin: Path | str, key_path: KeyPath) -> Producer:
        """Stream the values at an item and its ancestors, nearest first."""
        return ParentsProducer(self, _normalize(origin), key_path)

    def children(self, origin: Path | str, key_path: KeyPath) -> Producer:
        """Stream the values on a directory's descendants.

        Raises:
            TraversalError: If the origin is not a directory.
        """
        origin = _normalize(origin)
        if not origin.is_dir():
            raise TraversalError(origin, "not a directory")
        return ChildrenProducer(self, origin, key_path)

    def ascend(
        self,
        origin: Path | str,
        key_path: KeyPath,
        method: InheritMethod = InheritMethod.OVERWRITE,
    ) -> Value:
        """Combine the values at an item and its ancestors.

        Values are combined starting from the level furthest from the item.
        If no level has a value the result is null.

        Raises:
            MetaborgError: The first fatal failure met while walking.
        """
        found = []
        for item in self.parents(origin, key_path):
            if isinstance(item, MetaborgError):
                raise item
            found.append(item)

        if not found:
            return Value.null()
        return functools.reduce(method.combine, reversed(found))

    def harvest(
        self,
        origin: Path | str,
        key_path: KeyPath,
        method: HarvestMethod = HarvestMethod.COLLECT,
    ) -> Value:
        """Reduce the values on a directory's descendants.

        Raises:
            MetaborgError: The first fatal failure met while walking.
        """
        return method.harvest(self.children(origin, key_path))

    def fallback_for(self, key_path: KeyPath) -> Fallback:
        """The fallback configured for a key path, or the default inherit method."""
        return self.fallbacks.get(key_path, self.inherit_method)

    def resolve(
        self,
        item_path: Path | str,
        key_path: KeyPath,
        direction: Direction | None = None,
        method: Fallback | None = None,
    ) -> Value | Producer:
        """Resolve a key path for an item.

        Without a method, the fallback configured for the key path is used.
        Without a direction, inherit methods ascend and harvest methods
        descend.

        Returns:
            The combined value when ascending. When descending, the harvested
            value for a harvest method, otherwise a producer of descendant
            values.

        Raises:
            FallbackError: If a harvest method is given for an ascend.
        """
        explicit = method is not None
        if method is None:
            method = self.fallback_for(key_path)
        if direction is None:
            direction = Direction.ASCEND if isinstance(method, InheritMethod) else Direction.DESCEND

        if direction == Direction.ASCEND:
            if isinstance(method, HarvestMethod):
                if explicit:
                    raise FallbackError(f"Harvest method {method.value!r} cannot ascend")
                method = self.inherit_method
            return self.ascend(item_path, key_path, method)

        if isinstance(method, HarvestMethod):
            return self.harvest(item_path, key_path, method)
        return self.children(item_path, key_path)
