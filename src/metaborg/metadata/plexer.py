"""Pairing metadata blocks with the item paths they describe."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Union

from metaborg.core.exceptions import PlexError
from metaborg.fs.sorter import Sorter
from metaborg.metadata.schema import Block, MapSchema, OneSchema, Schema, SeqSchema

# =============================================================================
# Exceptions
# =============================================================================


class UnusedItemPathError(PlexError):
    """An item path had no metadata block."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Item path was unused in plexing: {path}")


class UnusedBlockError(PlexError):
    """A metadata block had no item path."""

    def __init__(self, block: Block, tag: str | None = None):
        self.block = block
        self.tag = tag
        detail = f", with tag: {tag}" if tag is not None else ""
        super().__init__(f"Metadata block was unused in plexing{detail}")


class NamelessItemPathError(PlexError):
    """An item path had no file name to look a block up by."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Item path did not have a file name: {path}")


PlexItem = Union[tuple[Path, Block], PlexError]


# =============================================================================
# Plexing
# =============================================================================


def _zip_longest(blocks: Iterable[Block], paths: Iterable[Path]) -> Iterator[PlexItem]:
    block_iter, path_iter = iter(blocks), iter(paths)
    while True:
        block = next(block_iter, None)
        path = next(path_iter, None)
        if block is None and path is None:
            return
        if block is None:
            yield UnusedItemPathError(path)
        elif path is None:
            yield UnusedBlockError(block)
        else:
            yield (path, block)


def plex(schema: Schema, item_paths: Iterable[Path], sorter: Sorter) -> Iterator[PlexItem]:
    """Pair the blocks of a schema with item paths.

    Yields ``(path, block)`` pairs. Leftover paths or blocks are yielded as
    :class:`PlexError` instances in place of pairs; they do not stop plexing.

    Args:
        schema: Parsed metadata document.
        item_paths: Paths of the items the document describes.
        sorter: Orders item paths for positional pairing with a
            :class:`SeqSchema`.
    """
    if isinstance(schema, OneSchema):
        yield from _zip_longest([schema.block], item_paths)

    elif isinstance(schema, SeqSchema):
        yield from _zip_longest(schema.blocks, sorter.sort_paths(item_paths))

    elif isinstance(schema, MapSchema):
        remaining = dict(schema.blocks)
        for path in item_paths:
            name = path.name
            if not name:
                yield NamelessItemPathError(path)
            elif name in remaining:
                yield (path, remaining.pop(name))
            else:
                yield UnusedItemPathError(path)
        for tag, block in remaining.items():
            yield UnusedBlockError(block, tag)

    else:
        raise TypeError(f"Unknown schema type: {type(schema).__name__}")
