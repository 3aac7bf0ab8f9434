"""Locating metadata files for item paths.

A :class:`Source` names a metadata file and where it sits relative to the
items it describes:

- ``Anchor.EXTERNAL``: the file lives next to its items and describes all of
  them (e.g. ``item.yml`` describing the tracks of an album directory).
- ``Anchor.INTERNAL``: the file lives inside the one directory it describes
  (e.g. ``self.yml`` describing the album directory itself).
"""

from __future__ import annotations

import stat
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

from loguru import logger

from metaborg.core.exceptions import SourceError, SourceLookupError
from metaborg.fs.selection import Selection


class Anchor(str, Enum):
    """Where a metadata file sits relative to the items it describes."""

    EXTERNAL = "external"
    INTERNAL = "internal"


class Arity(str, Enum):
    """How many item blocks a metadata document holds."""

    ONE = "one"
    MANY = "many"


class MetaFormat(str, Enum):
    """Serialization format of a metadata file."""

    JSON = "json"
    YAML = "yaml"

    @classmethod
    def from_path(cls, path: Path | str) -> MetaFormat:
        """Infer the format from a file extension.

        Raises:
            SourceError: If the extension is not recognized.
        """
        suffix = Path(path).suffix.lower()
        if suffix == ".json":
            return cls.JSON
        if suffix in (".yml", ".yaml"):
            return cls.YAML
        raise SourceError(f"Unknown metadata file extension: {path}")


@dataclass(frozen=True)
class Source:
    """A metadata file name with its anchor.

    Attributes:
        name: File name of the metadata file, e.g. ``self.yml``.
        anchor: Position of the file relative to its items.
        format: Serialization format, inferred from the name.
    """

    name: str
    anchor: Anchor
    format: MetaFormat = field(init=False)

    def __post_init__(self) -> None:
        if not self.name or Path(self.name).name != self.name:
            raise SourceError(f"Source name must be a bare file name: {self.name!r}")
        object.__setattr__(self, "format", MetaFormat.from_path(self.name))

    @property
    def arity(self) -> Arity:
        return Arity.MANY if self.anchor == Anchor.EXTERNAL else Arity.ONE

    def meta_path(self, item_path: Path | str) -> Path:
        """Find the metadata file that would describe an item.

        Args:
            item_path: Path of the item file or directory.

        Returns:
            Path to an existing metadata file.

        Raises:
            SourceLookupError: If the item or metadata file is not accessible,
                or the anchor does not apply to this item. Check ``fatal``.
        """
        item_path = Path(item_path)
        try:
            item_stat = item_path.stat()
        except OSError as e:
            raise SourceLookupError(item_path, SourceLookupError.ITEM_ACCESS, str(e)) from e

        if self.anchor == Anchor.EXTERNAL:
            if item_path.parent == item_path:
                raise SourceLookupError(item_path, SourceLookupError.NO_ITEM_PARENT_DIR)
            meta_path = item_path.parent / self.name
        else:
            if not stat.S_ISDIR(item_stat.st_mode):
                raise SourceLookupError(item_path, SourceLookupError.NOT_A_DIR)
            meta_path = item_path / self.name

        try:
            meta_stat = meta_path.stat()
        except OSError as e:
            raise SourceLookupError(
                meta_path,
                SourceLookupError.META_ACCESS,
                str(e),
                missing=isinstance(e, FileNotFoundError),
            ) from e

        if not stat.S_ISREG(meta_stat.st_mode):
            raise SourceLookupError(meta_path, SourceLookupError.NOT_A_FILE)

        return meta_path

    def item_paths(self, meta_path: Path | str, selection: Selection) -> list[Path]:
        """Selected item paths described by a metadata file.

        External files describe their selected siblings (never themselves);
        internal files describe their containing directory.

        Raises:
            TraversalError: If the containing directory cannot be listed.
        """
        meta_path = Path(meta_path)
        if self.anchor == Anchor.INTERNAL:
            return [meta_path.parent]
        return [p for p in selection.select_in_dir(meta_path.parent) if p != meta_path]


class Sourcer:
    """An ordered list of sources tried against an item path."""

    def __init__(self, sources: Iterable[Source] = ()) -> None:
        self.sources = list(sources)

    def source(self, source: Source) -> Sourcer:
        self.sources.append(source)
        return self

    def __iter__(self) -> Iterator[Source]:
        return iter(self.sources)

    def __len__(self) -> int:
        return len(self.sources)

    @property
    def names(self) -> list[str]:
        return [s.name for s in self.sources]

    def meta_path(self, item_path: Path | str) -> tuple[Path, Source] | None:
        """Find the first source with a metadata file for an item.

        Non-fatal lookup failures are skipped.

        Returns:
            ``(meta_path, source)`` or None if no source applies.

        Raises:
            SourceLookupError: On the first fatal lookup failure.
        """
        for source in self.sources:
            try:
                return source.meta_path(item_path), source
            except SourceLookupError as e:
                if e.fatal:
                    raise
                logger.debug(f"Skipping source {source.name} for {item_path}: {e.kind}")
        return None

    def __repr__(self) -> str:
        return f"Sourcer({self.sources!r})"
