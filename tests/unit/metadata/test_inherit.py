"""Tests for combining values across levels."""

from metaborg.core.value import ROOT, Value
from metaborg.metadata.inherit import InheritMethod, merge, overwrite


def v(raw) -> Value:
    return Value.from_raw(raw)


class TestOverwrite:
    """Tests for overwrite."""

    def test_newer_wins(self):
        """The value closer to the item replaces the older one."""
        assert overwrite(v({"a": 1}), v("x")) == v("x")


class TestMerge:
    """Tests for merge."""

    def test_scalars(self):
        """Between two non-mappings the newer value wins."""
        assert merge(v(1), v(2)) == v(2)

    def test_disjoint_mappings(self):
        """Disjoint mappings are unioned."""
        assert merge(v({"a": 1}), v({"b": 2})) == v({"a": 1, "b": 2})

    def test_shared_keys_merge_recursively(self):
        """Shared keys are merged deeply, newer winning conflicts."""
        old = v({"a": {"x": 1, "y": 1}, "b": 1})
        new = v({"a": {"y": 2, "z": 2}})

        assert merge(old, new) == v({"a": {"x": 1, "y": 2, "z": 2}, "b": 1})

    def test_value_into_mapping(self):
        """A value merged into a mapping lands under the sentinel key."""
        result = merge(v("A"), v({"b": "B"}))

        assert result == Value.mapping({ROOT: v("A"), "b": v("B")})

    def test_mapping_then_value(self):
        """A newer plain value replaces the sentinel entry."""
        result = merge(v({"b": "B"}), v("A"))

        assert result == Value.mapping({ROOT: v("A"), "b": v("B")})

    def test_sentinel_entries_merge(self):
        """Existing sentinel entries merge with the incoming value."""
        old = Value.mapping({ROOT: v({"x": 1})})

        result = merge(old, v({"y": 2}))

        assert result == Value.mapping({ROOT: v({"x": 1}), "y": v(2)})

    def test_sentinel_is_not_root_string(self):
        """A literal "root" key is an ordinary key."""
        result = merge(v({"root": "r"}), v("A"))

        assert result.as_mapping()["root"] == v("r")
        assert result.as_mapping()[ROOT] == v("A")


class TestInheritMethod:
    """Tests for InheritMethod.combine."""

    def test_dispatch(self):
        """Each method combines with its function."""
        old, new = v({"a": 1}), v({"b": 2})

        assert InheritMethod.OVERWRITE.combine(old, new) == new
        assert InheritMethod.MERGE.combine(old, new) == v({"a": 1, "b": 2})
