"""Walkers over the ancestors and descendants of an item path.

Both walkers are explicit state machines advanced one ``next()`` call at a
time; neither touches the filesystem before it is asked for an item.
"""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Iterator

from loguru import logger

from metaborg.fs.selection import Selection
from metaborg.fs.sorter import Sorter


class ParentFileWalker:
    """Yield an item path followed by each of its ancestors.

    Walking stops after the boundary directory when the origin lies inside
    it, otherwise at the filesystem root.

    Example:
        list(ParentFileWalker(Path("/lib/album/disc"), boundary=Path("/lib")))
        # [Path("/lib/album/disc"), Path("/lib/album"), Path("/lib")]
    """

    def __init__(self, origin: Path | str, boundary: Path | str | None = None) -> None:
        self._current: Path | None = Path(origin)
        self.boundary = Path(boundary) if boundary is not None else None

        if self.boundary is not None and not self._current.is_relative_to(self.boundary):
            logger.debug(f"Origin {origin} is outside boundary {self.boundary}, ignoring it")
            self.boundary = None

    def __iter__(self) -> Iterator[Path]:
        return self

    def __next__(self) -> Path:
        if self._current is None:
            raise StopIteration

        path = self._current
        parent = path.parent
        if path == self.boundary or parent == path:
            self._current = None
        else:
            self._current = parent
        return path


class ChildFileWalker:
    """Yield the selected children of a directory, breadth first, on demand.

    Only the origin's immediate children are listed initially. A directory is
    expanded only after :meth:`delve` is called right after it was yielded,
    and only once the items already queued have been exhausted.
    """

    def __init__(self, origin: Path | str, selection: Selection, sorter: Sorter) -> None:
        self.selection = selection
        self.sorter = sorter
        self._frontier: deque[Path] = deque()
        self._pending: deque[Path] = deque([Path(origin)])
        self._last: Path | None = None

    def __iter__(self) -> Iterator[Path]:
        return self

    def __next__(self) -> Path:
        """Return the next child path.

        Raises:
            TraversalError: If a directory being expanded cannot be listed;
                the walker stays usable and moves on to the next directory.
        """
        while not self._frontier:
            if not self._pending:
                self._last = None
                raise StopIteration
            dir_path = self._pending.popleft()
            logger.debug(f"Expanding directory: {dir_path}")
            self._frontier.extend(self.selection.select_in_dir_sorted(dir_path, self.sorter))

        self._last = self._frontier.popleft()
        return self._last

    def delve(self) -> bool:
        """Queue the most recently yielded path for expansion.

        Returns:
            True if that path is a directory and was queued.
        """
        if self._last is None or not self._last.is_dir():
            return False
        self._pending.append(self._last)
        self._last = None
        return True
