"""Recursive metadata value model.

Metadata documents are converted into immutable :class:`Value` trees. A value
carries an explicit :class:`ValueKind`, so that equality, hashing and ordering
are structural and never conflate kinds the way native Python values do
(``True == 1``, ``1 == Decimal(1)``).

Kinds are ordered by discriminant first, then by contained value:

    NULL < STRING < INTEGER < BOOLEAN < DECIMAL < SEQUENCE < MAPPING
"""

from __future__ import annotations

from decimal import Decimal
from enum import IntEnum
from functools import total_ordering
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Sequence

from metaborg.core.exceptions import ValueConversionError, WrongKindError

if TYPE_CHECKING:
    from metaborg.core.number import Number

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1


class ValueKind(IntEnum):
    """Kinds of metadata values, in structural sort order."""

    NULL = 0
    STRING = 1
    INTEGER = 2
    BOOLEAN = 3
    DECIMAL = 4
    SEQUENCE = 5
    MAPPING = 6


class _RootKey:
    """Reserved mapping key used by merging to hold a mapping's own value."""

    _instance: _RootKey | None = None

    def __new__(cls) -> _RootKey:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ROOT"

    def __str__(self) -> str:
        return "root"

    def __reduce__(self) -> str:
        return "ROOT"


ROOT = _RootKey()


def _key_order(key: Any) -> tuple[int, str]:
    # The sentinel key sorts before every string key.
    if key is ROOT:
        return (0, "")
    return (1, key)


def check_int_range(i: int) -> int:
    if not I64_MIN <= i <= I64_MAX:
        raise ValueConversionError(f"Integer out of 64-bit range: {i}")
    return i


@total_ordering
class Value:
    """An immutable, hashable metadata value.

    Construct values with the named constructors (:meth:`null`,
    :meth:`string`, :meth:`integer`, ...) or convert parsed document data
    with :meth:`from_raw`.

    Example:
        >>> Value.from_raw({"title": "Album", "discs": 2})
        Value.mapping({'discs': Value.integer(2), 'title': Value.string('Album')})
    """

    __slots__ = ("kind", "data", "_hash")

    def __init__(self, kind: ValueKind, data: Any) -> None:
        self.kind = kind
        self.data = data
        self._hash: int | None = None

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def null(cls) -> Value:
        return cls(ValueKind.NULL, None)

    @classmethod
    def string(cls, s: str) -> Value:
        return cls(ValueKind.STRING, str(s))

    @classmethod
    def integer(cls, i: int) -> Value:
        return cls(ValueKind.INTEGER, check_int_range(int(i)))

    @classmethod
    def boolean(cls, b: bool) -> Value:
        return cls(ValueKind.BOOLEAN, bool(b))

    @classmethod
    def decimal(cls, d: Decimal | str | int) -> Value:
        return cls(ValueKind.DECIMAL, Decimal(d))

    @classmethod
    def sequence(cls, items: Iterable[Value]) -> Value:
        return cls(ValueKind.SEQUENCE, tuple(items))

    @classmethod
    def mapping(cls, entries: Mapping[Any, Value]) -> Value:
        ordered = sorted(entries.items(), key=lambda kv: _key_order(kv[0]))
        return cls(ValueKind.MAPPING, dict(ordered))

    @classmethod
    def from_raw(cls, raw: Any) -> Value:
        """Convert parsed YAML/JSON data into a value.

        Args:
            raw: None, bool, int, float, Decimal, str, list/tuple or dict.

        Returns:
            Equivalent Value tree.

        Raises:
            ValueConversionError: On unsupported types, non-string mapping
                keys, or integers outside the 64-bit range.
        """
        if isinstance(raw, Value):
            return raw
        if raw is None:
            return cls.null()
        # bool must be checked before int
        if isinstance(raw, bool):
            return cls.boolean(raw)
        if isinstance(raw, int):
            return cls.integer(raw)
        if isinstance(raw, Decimal):
            if not raw.is_finite():
                raise ValueConversionError(f"Non-finite decimal: {raw}")
            return cls.decimal(raw)
        if isinstance(raw, float):
            return cls.from_raw(Decimal(repr(raw)))
        if isinstance(raw, str):
            return cls.string(raw)
        if isinstance(raw, (list, tuple)):
            return cls.sequence(cls.from_raw(item) for item in raw)
        if isinstance(raw, dict):
            entries = {}
            for key, item in raw.items():
                if not isinstance(key, str) and key is not ROOT:
                    raise ValueConversionError(
                        f"Mapping keys must be strings, found {key!r}"
                    )
                entries[key] = cls.from_raw(item)
            return cls.mapping(entries)
        raise ValueConversionError(f"Unsupported value type: {type(raw).__name__}")

    def to_raw(self) -> Any:
        """Convert back into plain Python data (sentinel keys become "root")."""
        if self.kind == ValueKind.SEQUENCE:
            return [item.to_raw() for item in self.data]
        if self.kind == ValueKind.MAPPING:
            return {str(key): item.to_raw() for key, item in self.data.items()}
        return self.data

    # -------------------------------------------------------------------------
    # Projections
    # -------------------------------------------------------------------------

    def _expect(self, *kinds: ValueKind) -> None:
        if self.kind not in kinds:
            expected = "/".join(k.name.lower() for k in kinds)
            raise WrongKindError(expected, self.kind.name.lower())

    def as_str(self) -> str:
        self._expect(ValueKind.STRING)
        return self.data

    def as_int(self) -> int:
        self._expect(ValueKind.INTEGER)
        return self.data

    def as_bool(self) -> bool:
        self._expect(ValueKind.BOOLEAN)
        return self.data

    def as_sequence(self) -> list[Value]:
        self._expect(ValueKind.SEQUENCE)
        return list(self.data)

    def as_mapping(self) -> dict[Any, Value]:
        self._expect(ValueKind.MAPPING)
        return dict(self.data)

    def as_number(self) -> Number:
        from metaborg.core.number import Number

        self._expect(ValueKind.INTEGER, ValueKind.DECIMAL)
        return Number(self.data)

    @property
    def is_null(self) -> bool:
        return self.kind == ValueKind.NULL

    @property
    def is_number(self) -> bool:
        return self.kind in (ValueKind.INTEGER, ValueKind.DECIMAL)

    def get_key_path(self, key_path: Sequence[str]) -> Value | None:
        """Look up a nested value by walking mapping keys.

        Args:
            key_path: Keys to follow, outermost first.

        Returns:
            The nested value, this value for an empty path, or None if a key
            is missing or a non-mapping is reached.
        """
        current = self
        for key in key_path:
            if current.kind != ValueKind.MAPPING:
                return None
            found = current.data.get(key)
            if found is None:
                return None
            current = found
        return current

    # -------------------------------------------------------------------------
    # Structural comparison
    # -------------------------------------------------------------------------

    def sort_key(self) -> tuple:
        if self.kind == ValueKind.SEQUENCE:
            return (self.kind, tuple(item.sort_key() for item in self.data))
        if self.kind == ValueKind.MAPPING:
            return (
                self.kind,
                tuple((_key_order(k), v.sort_key()) for k, v in self.data.items()),
            )
        if self.kind == ValueKind.NULL:
            return (self.kind, ())
        return (self.kind, self.data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.kind == other.kind and self.data == other.data

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __hash__(self) -> int:
        if self._hash is None:
            if self.kind == ValueKind.MAPPING:
                payload: Any = tuple(self.data.items())
            else:
                payload = self.data
            self._hash = hash((self.kind, payload))
        return self._hash

    def __repr__(self) -> str:
        name = self.kind.name.lower()
        if self.kind == ValueKind.NULL:
            return "Value.null()"
        if self.kind == ValueKind.SEQUENCE:
            return f"Value.sequence({list(self.data)!r})"
        if self.kind == ValueKind.MAPPING:
            return f"Value.mapping({dict(self.data)!r})"
        return f"Value.{name}({self.data!r})"


def kind_name(value: Any) -> str:
    """Human readable kind of a value or operand, for error messages."""
    if isinstance(value, Value):
        return value.kind.name.lower()
    return type(value).__name__
