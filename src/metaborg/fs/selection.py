"""Include/exclude selection of item files and directories.

Selection decides which entries of a directory are considered items that can
carry metadata. Files and directories are filtered by separate pairs of glob
matchers, matched against the entry's file name.
"""

from __future__ import annotations

import fnmatch
import re
import stat
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Iterator

from loguru import logger

from metaborg.core.exceptions import SelectionError, TraversalError

if TYPE_CHECKING:
    from metaborg.fs.sorter import Sorter


class Matcher:
    """Match file names against a set of glob patterns.

    A name matches if it satisfies ANY of the patterns; a matcher with no
    patterns matches nothing.

    Example:
        matcher = Matcher(["*.flac", "*.mp3"])
        matcher.matches(Path("/music/01.flac"))  # True
        matcher.matches(Path("/music/cover.jpg"))  # False
    """

    def __init__(self, patterns: Iterable[str] | str | None = None) -> None:
        """Initialize with one pattern or a list of patterns.

        Args:
            patterns: Glob pattern(s) matched against file names.

        Raises:
            SelectionError: If a pattern is not a non-empty string or cannot
                be compiled.
        """
        self.patterns = parse_patterns(patterns)
        self._compiled = [self._compile(p) for p in self.patterns]

        logger.debug(f"Matcher initialized: patterns={self.patterns}")

    @classmethod
    def any(cls) -> Matcher:
        return cls(["*"])

    @classmethod
    def empty(cls) -> Matcher:
        return cls([])

    @staticmethod
    def _compile(pattern: str) -> re.Pattern[str]:
        if not isinstance(pattern, str) or not pattern:
            raise SelectionError(f"Invalid pattern: {pattern!r}")
        try:
            return re.compile(fnmatch.translate(pattern))
        except re.error as e:
            raise SelectionError(f"Invalid pattern {pattern!r}: {e}") from e

    def matches(self, path: Path | str) -> bool:
        """Check if a path's file name matches any pattern."""
        name = Path(path).name
        return any(regex.match(name) for regex in self._compiled)

    def __repr__(self) -> str:
        return f"Matcher({self.patterns!r})"


def parse_patterns(patterns: Iterable[str] | str | None) -> list[str]:
    """Normalize pattern input to a list.

    Args:
        patterns: Single pattern, iterable of patterns, or None.

    Returns:
        List of patterns (empty if None).
    """
    if patterns is None:
        return []
    if isinstance(patterns, str):
        return [patterns]
    return list(patterns)


class Selection:
    """Included and excluded item files and directories.

    A path is selected if it matches the include matcher for its kind and
    does NOT match the exclude matcher for its kind. By default everything is
    included and nothing is excluded.
    """

    def __init__(
        self,
        include_files: Matcher | None = None,
        exclude_files: Matcher | None = None,
        include_dirs: Matcher | None = None,
        exclude_dirs: Matcher | None = None,
    ) -> None:
        self.include_files = include_files or Matcher.any()
        self.exclude_files = exclude_files or Matcher.empty()
        self.include_dirs = include_dirs or Matcher.any()
        self.exclude_dirs = exclude_dirs or Matcher.empty()

    @classmethod
    def from_patterns(
        cls,
        include_files: Iterable[str] | str | None = "*",
        exclude_files: Iterable[str] | str | None = None,
        include_dirs: Iterable[str] | str | None = "*",
        exclude_dirs: Iterable[str] | str | None = None,
    ) -> Selection:
        return cls(
            Matcher(include_files),
            Matcher(exclude_files),
            Matcher(include_dirs),
            Matcher(exclude_dirs),
        )

    def is_file_pattern_match(self, path: Path | str) -> bool:
        """Lexical check assuming the path is a file; no filesystem access."""
        return self.include_files.matches(path) and not self.exclude_files.matches(path)

    def is_dir_pattern_match(self, path: Path | str) -> bool:
        """Lexical check assuming the path is a directory; no filesystem access."""
        return self.include_dirs.matches(path) and not self.exclude_dirs.matches(path)

    def is_selected(self, path: Path | str) -> bool:
        """Check if a path is selected, using the filesystem to tell its kind.

        Paths that do not exist, or are neither files nor directories, are
        not selected.

        Raises:
            TraversalError: If the path exists but cannot be inspected.
        """
        path = Path(path)
        try:
            info = path.stat()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise TraversalError(path, str(e)) from e

        if stat.S_ISDIR(info.st_mode):
            return self.is_dir_pattern_match(path)
        if stat.S_ISREG(info.st_mode):
            return self.is_file_pattern_match(path)
        logger.debug(f"Neither file nor directory, skipping: {path} ({info.st_mode:o})")
        return False

    def select_in_dir(self, dir_path: Path | str) -> Iterator[Path]:
        """Yield the selected entries of a directory, in listing order.

        Raises:
            TraversalError: If the directory cannot be listed.
        """
        dir_path = Path(dir_path)
        try:
            entries = list(dir_path.iterdir())
        except OSError as e:
            raise TraversalError(dir_path, str(e)) from e

        for entry in entries:
            if self.is_selected(entry):
                yield entry

    def select_in_dir_sorted(self, dir_path: Path | str, sorter: Sorter) -> list[Path]:
        """Selected entries of a directory, ordered by the sorter."""
        return sorter.sort_paths(self.select_in_dir(dir_path))

    def __repr__(self) -> str:
        return (
            f"Selection(include_files={self.include_files!r}, "
            f"exclude_files={self.exclude_files!r}, "
            f"include_dirs={self.include_dirs!r}, "
            f"exclude_dirs={self.exclude_dirs!r})"
        )
