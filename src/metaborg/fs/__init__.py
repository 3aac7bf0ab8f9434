"""Filesystem selection, ordering and walking of item paths."""

from metaborg.fs.selection import Matcher, Selection, parse_patterns
from metaborg.fs.sorter import SortBy, Sorter, SortOrder
from metaborg.fs.walker import ChildFileWalker, ParentFileWalker

__all__ = [
    "Matcher",
    "Selection",
    "parse_patterns",
    "SortBy",
    "SortOrder",
    "Sorter",
    "ParentFileWalker",
    "ChildFileWalker",
]
