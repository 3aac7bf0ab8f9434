"""Per-key fallback methods for metadata missing on an item.

A fallback says where to look when an item has no value for a key:

- an :class:`InheritMethod` looks up the item's ancestors and combines what
  it finds;
- a :class:`HarvestMethod` looks down the item's descendants and reduces
  what it finds.

A :class:`FallbackSpec` assigns fallbacks to key paths. It is built from a
nested tree, as written in YAML or JSON, where each node is one of:

- a method name (``"merge"``): the fallback for that key;
- a mapping of sub-keys to nodes: no fallback for the key itself;
- a two-item list ``[method, {sub-keys}]``: both.

Example:
    spec = FallbackSpec.from_tree({
        "title": "overwrite",
        "replay_gain": ["merge", {"peak": "first"}],
    })
    spec.get(["replay_gain", "peak"])  # HarvestMethod.FIRST
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Iterator, Sequence, Union

from metaborg.core.exceptions import FallbackError, MetaborgError
from metaborg.core.value import Value
from metaborg.metadata.inherit import InheritMethod
from metaborg.stream.producer import Item


class HarvestMethod(str, Enum):
    """How values found on descendants are reduced."""

    COLLECT = "collect"
    FIRST = "first"

    def harvest(self, items: Iterable[Item]) -> Value:
        """Reduce descendant values, raising the first error met.

        ``FIRST`` stops pulling after the first value and yields null when
        there is none.
        """
        values = _values(items)
        if self == HarvestMethod.FIRST:
            return next(values, Value.null())
        return Value.sequence(values)


def _values(items: Iterable[Item]) -> Iterator[Value]:
    for item in items:
        if isinstance(item, MetaborgError):
            raise item
        yield item


Fallback = Union[InheritMethod, HarvestMethod]


def parse_fallback(name: str) -> Fallback:
    """Look up a fallback method by name.

    Raises:
        FallbackError: If no method has that name.
    """
    for method_type in (InheritMethod, HarvestMethod):
        if name in method_type._value2member_map_:
            return method_type(name)
    raise FallbackError(f"Unknown fallback method: {name!r}")


class FallbackSpec:
    """Fallback methods keyed by key path."""

    def __init__(self, methods: dict[tuple[str, ...], Fallback] | None = None) -> None:
        self.methods = dict(methods or {})

    @classmethod
    def from_tree(cls, tree: dict[str, Any] | None) -> FallbackSpec:
        """Flatten a nested fallback tree.

        Raises:
            FallbackError: If a node is malformed or names an unknown method.
        """
        methods: dict[tuple[str, ...], Fallback] = {}
        _flatten(tree or {}, (), methods)
        return cls(methods)

    def get(self, key_path: Sequence[str], default: Fallback | None = None) -> Fallback | None:
        return self.methods.get(tuple(key_path), default)

    def __len__(self) -> int:
        return len(self.methods)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FallbackSpec):
            return NotImplemented
        return self.methods == other.methods

    def __repr__(self) -> str:
        return f"FallbackSpec({self.methods!r})"


def _flatten(tree: Any, prefix: tuple[str, ...], out: dict[tuple[str, ...], Fallback]) -> None:
    if not isinstance(tree, dict):
        raise FallbackError(f"Expected a mapping of keys at {list(prefix)}, found {tree!r}")

    for key, node in tree.items():
        if not isinstance(key, str):
            raise FallbackError(f"Fallback keys must be strings, found {key!r}")
        path = prefix + (key,)

        if isinstance(node, str):
            out[path] = parse_fallback(node)
        elif isinstance(node, dict):
            _flatten(node, path, out)
        elif isinstance(node, list) and len(node) == 2 and isinstance(node[0], str):
            out[path] = parse_fallback(node[0])
            _flatten(node[1], path, out)
        else:
            raise FallbackError(f"Invalid fallback node at {list(path)}: {node!r}")
