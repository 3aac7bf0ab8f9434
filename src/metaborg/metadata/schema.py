"""Shapes of parsed metadata documents.

A metadata document holds blocks of metadata for one or more items:

- :class:`OneSchema`: a single block for the item that contains the file.
- :class:`SeqSchema`: a list of blocks, paired positionally with the
  sorted sibling items.
- :class:`MapSchema`: blocks keyed by sibling item file name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from metaborg.core.exceptions import ValueConversionError
from metaborg.core.value import Value
from metaborg.sources.source import Arity

Block = dict[str, Value]


@dataclass
class OneSchema:
    block: Block = field(default_factory=dict)


@dataclass
class SeqSchema:
    blocks: list[Block] = field(default_factory=list)


@dataclass
class MapSchema:
    blocks: dict[str, Block] = field(default_factory=dict)


Schema = Union[OneSchema, SeqSchema, MapSchema]


def block_from_raw(raw: Any) -> Block:
    """Convert a parsed mapping into a block.

    Raises:
        ValueConversionError: If the data is not a string-keyed mapping.
    """
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueConversionError(f"Expected a mapping, found {type(raw).__name__}")
    return Value.from_raw(raw).as_mapping()


def schema_from_raw(raw: Any, arity: Arity) -> Schema:
    """Build a schema from parsed document data.

    An empty document yields a schema with no blocks.

    Args:
        raw: Parsed YAML/JSON document.
        arity: ``ONE`` expects a single block; ``MANY`` expects a list of
            blocks or a mapping of file names to blocks.

    Raises:
        ValueConversionError: If the data does not have the expected shape.
    """
    if arity == Arity.ONE:
        return OneSchema(block_from_raw(raw))

    if raw is None:
        return SeqSchema([])
    if isinstance(raw, list):
        return SeqSchema([block_from_raw(item) for item in raw])
    if isinstance(raw, dict):
        blocks = {}
        for name, item in raw.items():
            if not isinstance(name, str):
                raise ValueConversionError(f"Item file names must be strings, found {name!r}")
            blocks[name] = block_from_raw(item)
        return MapSchema(blocks)
    raise ValueConversionError(
        f"Expected a list or mapping of blocks, found {type(raw).__name__}"
    )


def get_key_path(block: Block, key_path: list[str] | tuple[str, ...]) -> Value | None:
    """Project a key path out of a block; an empty path yields the whole block."""
    if not key_path:
        return Value.mapping(block)
    head, *rest = key_path
    found = block.get(head)
    if found is None:
        return None
    return found.get_key_path(rest)
