"""Ordering of item paths within a directory."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable


class SortBy(str, Enum):
    """Criteria for sorting item paths."""

    NAME = "name"
    MOD_TIME = "mod_time"


class SortOrder(str, Enum):
    """Direction of ordering."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


def _mtime(path: Path) -> float | None:
    try:
        return path.stat().st_mtime
    except OSError:
        return None


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


@dataclass(frozen=True)
class Sorter:
    """Sorts item paths by name or modification time.

    Attributes:
        sort_by: Sorting criteria.
        sort_order: Ascending or descending.
    """

    sort_by: SortBy = SortBy.NAME
    sort_order: SortOrder = SortOrder.ASCENDING

    def compare(self, path_a: Path | str, path_b: Path | str) -> int:
        """Compare two paths, returning -1, 0 or 1.

        For modification time sorting, paths whose mtime cannot be read sort
        first, and equal times fall back to comparing names.
        """
        path_a, path_b = Path(path_a), Path(path_b)

        if self.sort_by == SortBy.MOD_TIME:
            mtime_a, mtime_b = _mtime(path_a), _mtime(path_b)
            if mtime_a is None or mtime_b is None:
                result = _cmp(mtime_a is not None, mtime_b is not None)
            else:
                result = _cmp(mtime_a, mtime_b)
            if result == 0:
                result = _cmp(path_a.name, path_b.name)
        else:
            result = _cmp(path_a.name, path_b.name)

        return -result if self.sort_order == SortOrder.DESCENDING else result

    def sort_paths(self, paths: Iterable[Path]) -> list[Path]:
        return sorted(paths, key=functools.cmp_to_key(self.compare))
