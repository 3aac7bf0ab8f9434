"""Numeric view over Integer and Decimal values.

Structural equality keeps ``Integer(5)`` and ``Decimal(5.0)`` apart. A
:class:`Number` compares them by mathematical value instead, and arithmetic
promotes to Decimal whenever either operand is a Decimal.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable

from metaborg.core.exceptions import NumericError, ValueConversionError, WrongKindError
from metaborg.core.value import Value, check_int_range


class Number:
    """An Integer or a Decimal."""

    __slots__ = ("value",)

    def __init__(self, value: int | Decimal) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, Decimal)):
            raise WrongKindError("integer/decimal", type(value).__name__)
        self.value = value

    @classmethod
    def from_value(cls, value: Value) -> Number:
        return value.as_number()

    @property
    def is_integer(self) -> bool:
        return isinstance(self.value, int)

    def to_value(self) -> Value:
        if self.is_integer:
            return Value.integer(self.value)
        return Value.decimal(self.value)

    def as_decimal(self) -> Decimal:
        return Decimal(self.value)

    def val_cmp(self, other: Number) -> int:
        """Compare by mathematical value, returning -1, 0 or 1."""
        # int and Decimal compare exactly with each other.
        a, b = self.value, other.value
        return (a > b) - (a < b)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def _apply(
        self,
        other: Number,
        int_op: Callable[[int, int], int],
        dec_op: Callable[[Decimal, Decimal], Decimal],
    ) -> Number:
        if self.is_integer and other.is_integer:
            return Number(_checked(int_op(self.value, other.value)))
        return Number(dec_op(self.as_decimal(), other.as_decimal()))

    def __add__(self, other: Number) -> Number:
        return self._apply(other, lambda a, b: a + b, lambda a, b: a + b)

    def __sub__(self, other: Number) -> Number:
        return self._apply(other, lambda a, b: a - b, lambda a, b: a - b)

    def __mul__(self, other: Number) -> Number:
        return self._apply(other, lambda a, b: a * b, lambda a, b: a * b)

    def __truediv__(self, other: Number) -> Number:
        if other.value == 0:
            raise NumericError("Division by zero")
        return self._apply(other, _int_div, lambda a, b: a / b)

    def __mod__(self, other: Number) -> Number:
        if other.value == 0:
            raise NumericError("Remainder by zero")
        # Decimal % already takes the sign of the dividend.
        return self._apply(other, lambda a, b: a - b * _int_div(a, b), lambda a, b: a % b)

    def __neg__(self) -> Number:
        if self.is_integer:
            return Number(_checked(-self.value))
        return Number(-self.value)

    def __abs__(self) -> Number:
        if self.is_integer:
            return Number(_checked(abs(self.value)))
        return Number(abs(self.value))

    def __repr__(self) -> str:
        return f"Number({self.value!r})"


def _checked(i: int) -> int:
    try:
        return check_int_range(i)
    except ValueConversionError as e:
        raise NumericError(str(e)) from e


def _int_div(a: int, b: int) -> int:
    # Truncates toward zero.
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def val_cmp(a: Number, b: Number) -> int:
    return a.val_cmp(b)


def val_max(a: Number, b: Number) -> Number:
    """Larger of two numbers; the second wins a tie."""
    return a if a.val_cmp(b) > 0 else b


def val_min(a: Number, b: Number) -> Number:
    """Smaller of two numbers; the first wins a tie."""
    return b if a.val_cmp(b) > 0 else a
