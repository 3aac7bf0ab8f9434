"""Combining values found at successive levels of an item hierarchy."""

from __future__ import annotations

from enum import Enum

from metaborg.core.value import ROOT, Value, ValueKind


def overwrite(old: Value, new: Value) -> Value:
    """The value closer to the item wins outright."""
    return new


def merge(old: Value, new: Value) -> Value:
    """Deep-merge two values, the newer one winning conflicts.

    Mappings are unioned key by key, merging shared keys recursively. When
    only one side is a mapping, the other side's value is merged into that
    mapping's ``ROOT`` entry, so a directory's own value and the sub-keys it
    inherits can live side by side.

    Example:
        merge("A", {"b": "B"}) == {ROOT: "A", "b": "B"}
    """
    old_is_map = old.kind == ValueKind.MAPPING
    new_is_map = new.kind == ValueKind.MAPPING

    if old_is_map and new_is_map:
        merged = old.as_mapping()
        for key, value in new.data.items():
            merged[key] = merge(merged[key], value) if key in merged else value
        return Value.mapping(merged)

    if old_is_map:
        merged = old.as_mapping()
        merged[ROOT] = merge(merged[ROOT], new) if ROOT in merged else new
        return Value.mapping(merged)

    if new_is_map:
        merged = new.as_mapping()
        merged[ROOT] = merge(old, merged[ROOT]) if ROOT in merged else old
        return Value.mapping(merged)

    return new


class InheritMethod(str, Enum):
    """How values from ancestor levels are combined."""

    OVERWRITE = "overwrite"
    MERGE = "merge"

    def combine(self, old: Value, new: Value) -> Value:
        if self == InheritMethod.MERGE:
            return merge(old, new)
        return overwrite(old, new)
