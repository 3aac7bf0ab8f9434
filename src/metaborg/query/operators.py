"""Query operators and their semantics.

Operators are closed enums. Each arity is dispatched in a single function,
:func:`apply_unary` or :func:`apply_binary`, which type-checks the operands
and computes the result.

Operands are one of:

- :class:`Value`: a plain value; a Sequence value is an eager iterable.
- :class:`IterableLike`: a lazy iterable (eager results are always turned
  back into Sequence values).
- :class:`UnaryFn` / :class:`PartialFn`: an operator used as a function by
  the higher-order binary operators (``map``, ``filter``, ``find``, ...).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from metaborg.core.exceptions import UnexpectedTypeError
from metaborg.core.number import Number
from metaborg.core.value import Value, ValueKind, kind_name
from metaborg.stream.iterable import IterableLike


class NullaryOp(str, Enum):
    """Source operators that read metadata from the item hierarchy."""

    PARENTS = "parents"
    CHILDREN = "children"


class UnaryOp(str, Enum):
    COLLECT = "collect"
    COUNT = "count"
    FIRST = "first"
    LAST = "last"
    MAX_IN = "max_in"
    MIN_IN = "min_in"
    REV = "rev"
    SORT = "sort"
    SUM = "sum"
    PRODUCT = "product"
    ALL_EQUAL = "all_equal"
    FLATTEN = "flatten"
    DEDUP = "dedup"
    UNIQUE = "unique"
    NEG = "neg"
    ABS = "abs"
    NOT = "not"
    KEYS = "keys"
    VALUES = "values"


class BinaryOp(str, Enum):
    NTH = "nth"
    ALL = "all"
    ANY = "any"
    FIND = "find"
    POSITION = "position"
    FILTER = "filter"
    MAP = "map"
    STEP_BY = "step_by"
    CHAIN = "chain"
    ZIP = "zip"
    SKIP = "skip"
    TAKE = "take"
    SKIP_WHILE = "skip_while"
    TAKE_WHILE = "take_while"
    INTERSPERSE = "intersperse"
    INTERLEAVE = "interleave"
    AND = "and"
    OR = "or"
    XOR = "xor"
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    REM = "rem"
    LOOKUP = "lookup"


@dataclass(frozen=True)
class UnaryFn:
    """A unary operator used as a function of one value."""

    op: UnaryOp


@dataclass(frozen=True)
class PartialFn:
    """A binary operator with its right-hand operand fixed.

    ``PartialFn(BinaryOp.GT, Value.integer(3))`` tests ``x > 3``.
    """

    op: BinaryOp
    arg: Value


Function = Union[UnaryFn, PartialFn]
Operand = Union[Value, IterableLike, UnaryFn, PartialFn]

_PREDICATE_OPS = {
    BinaryOp.ALL,
    BinaryOp.ANY,
    BinaryOp.FIND,
    BinaryOp.POSITION,
    BinaryOp.FILTER,
    BinaryOp.SKIP_WHILE,
    BinaryOp.TAKE_WHILE,
}
_COUNT_OPS = {BinaryOp.NTH, BinaryOp.STEP_BY, BinaryOp.SKIP, BinaryOp.TAKE}
_PAIR_OPS = {BinaryOp.CHAIN, BinaryOp.ZIP, BinaryOp.INTERLEAVE}
_BOOL_OPS = {BinaryOp.AND, BinaryOp.OR, BinaryOp.XOR}
_ORDER_OPS = {BinaryOp.LT, BinaryOp.LE, BinaryOp.GT, BinaryOp.GE}
_ARITH_OPS = {BinaryOp.ADD, BinaryOp.SUB, BinaryOp.MUL, BinaryOp.DIV, BinaryOp.REM}


# =============================================================================
# Operand checks
# =============================================================================


def operand_kind(operand: Operand) -> str:
    if isinstance(operand, IterableLike):
        return "iterable"
    if isinstance(operand, (UnaryFn, PartialFn)):
        return "function"
    return kind_name(operand)


def _value(op: Enum, operand: Operand) -> Value:
    if not isinstance(operand, Value):
        raise UnexpectedTypeError(op.value, "value", operand_kind(operand))
    return operand


def _iterable(op: Enum, operand: Operand) -> IterableLike:
    if isinstance(operand, IterableLike):
        return operand
    if isinstance(operand, Value) and operand.kind == ValueKind.SEQUENCE:
        return IterableLike(operand.as_sequence())
    raise UnexpectedTypeError(op.value, "sequence", operand_kind(operand))


def _number(op: Enum, operand: Operand) -> Number:
    if isinstance(operand, Value) and operand.is_number:
        return operand.as_number()
    raise UnexpectedTypeError(op.value, "number", operand_kind(operand))


def _boolean(op: Enum, operand: Operand) -> bool:
    if isinstance(operand, Value) and operand.kind == ValueKind.BOOLEAN:
        return operand.as_bool()
    raise UnexpectedTypeError(op.value, "boolean", operand_kind(operand))


def _count(op: Enum, operand: Operand) -> int:
    if isinstance(operand, Value) and operand.kind == ValueKind.INTEGER and operand.data >= 0:
        return operand.as_int()
    raise UnexpectedTypeError(op.value, "non-negative integer", operand_kind(operand))


def _string(op: Enum, operand: Operand) -> str:
    if isinstance(operand, Value) and operand.kind == ValueKind.STRING:
        return operand.as_str()
    raise UnexpectedTypeError(op.value, "string", operand_kind(operand))


def _mapping(op: Enum, operand: Operand) -> dict:
    if isinstance(operand, Value) and operand.kind == ValueKind.MAPPING:
        return operand.as_mapping()
    raise UnexpectedTypeError(op.value, "mapping", operand_kind(operand))


def _function(op: Enum, operand: Operand) -> Function:
    if isinstance(operand, (UnaryFn, PartialFn)):
        return operand
    raise UnexpectedTypeError(op.value, "function", operand_kind(operand))


def settle(result: IterableLike) -> Operand:
    """Eager iterables become Sequence values; lazy ones stay iterables."""
    if result.is_lazy:
        return result
    return result.to_value()


# =============================================================================
# Functions
# =============================================================================


def call(fn: Function, value: Value) -> Value:
    """Apply a function operand to a single value."""
    if isinstance(fn, UnaryFn):
        result = apply_unary(fn.op, value)
    else:
        result = apply_binary(fn.op, value, fn.arg)

    if isinstance(result, IterableLike):
        return result.to_value()
    return _value(fn.op, result)


def as_converter(fn: Function):
    return lambda value: call(fn, value)


def as_predicate(fn: Function):
    def predicate(value: Value) -> bool:
        return _boolean(fn.op, call(fn, value))

    return predicate


# =============================================================================
# Dispatch
# =============================================================================


def apply_unary(op: UnaryOp, operand: Operand) -> Operand:
    """Apply a unary operator.

    Raises:
        UnexpectedTypeError: If the operand has the wrong kind.
        EvaluationError: If the operation itself fails.
    """
    if op == UnaryOp.NEG:
        return (-_number(op, operand)).to_value()
    if op == UnaryOp.ABS:
        return abs(_number(op, operand)).to_value()
    if op == UnaryOp.NOT:
        return Value.boolean(not _boolean(op, operand))
    if op == UnaryOp.KEYS:
        return Value.sequence(Value.string(str(k)) for k in _mapping(op, operand))
    if op == UnaryOp.VALUES:
        return Value.sequence(_mapping(op, operand).values())

    iterable = _iterable(op, operand)

    if op == UnaryOp.COLLECT:
        return iterable.to_value()
    if op == UnaryOp.COUNT:
        return Value.integer(iterable.count())
    if op == UnaryOp.FIRST:
        return iterable.first()
    if op == UnaryOp.LAST:
        return iterable.last()
    if op == UnaryOp.MAX_IN:
        return iterable.max_in()
    if op == UnaryOp.MIN_IN:
        return iterable.min_in()
    if op == UnaryOp.REV:
        return Value.sequence(iterable.rev())
    if op == UnaryOp.SORT:
        return Value.sequence(iterable.sort())
    if op == UnaryOp.SUM:
        return iterable.sum()
    if op == UnaryOp.PRODUCT:
        return iterable.prod()
    if op == UnaryOp.ALL_EQUAL:
        return Value.boolean(iterable.all_equal())
    if op == UnaryOp.FLATTEN:
        return settle(iterable.flatten())
    if op == UnaryOp.DEDUP:
        return settle(iterable.dedup())
    if op == UnaryOp.UNIQUE:
        return settle(iterable.unique())

    raise ValueError(f"Unhandled unary operator: {op}")


def apply_binary(op: BinaryOp, lhs: Operand, rhs: Operand) -> Operand:
    """Apply a binary operator to its left- and right-hand operands.

    Raises:
        UnexpectedTypeError: If an operand has the wrong kind.
        EvaluationError: If the operation itself fails.
    """
    if op in _BOOL_OPS:
        a, b = _boolean(op, lhs), _boolean(op, rhs)
        if op == BinaryOp.AND:
            return Value.boolean(a and b)
        if op == BinaryOp.OR:
            return Value.boolean(a or b)
        return Value.boolean(a != b)

    if op in (BinaryOp.EQ, BinaryOp.NE):
        a, b = _value(op, lhs), _value(op, rhs)
        if a.is_number and b.is_number:
            equal = a.as_number().val_cmp(b.as_number()) == 0
        else:
            equal = a == b
        return Value.boolean(equal if op == BinaryOp.EQ else not equal)

    if op in _ORDER_OPS:
        ordering = _number(op, lhs).val_cmp(_number(op, rhs))
        if op == BinaryOp.LT:
            return Value.boolean(ordering < 0)
        if op == BinaryOp.LE:
            return Value.boolean(ordering <= 0)
        if op == BinaryOp.GT:
            return Value.boolean(ordering > 0)
        return Value.boolean(ordering >= 0)

    if op in _ARITH_OPS:
        a, b = _number(op, lhs), _number(op, rhs)
        if op == BinaryOp.ADD:
            return (a + b).to_value()
        if op == BinaryOp.SUB:
            return (a - b).to_value()
        if op == BinaryOp.MUL:
            return (a * b).to_value()
        if op == BinaryOp.DIV:
            return (a / b).to_value()
        return (a % b).to_value()

    if op == BinaryOp.LOOKUP:
        found = _mapping(op, lhs).get(_string(op, rhs))
        return found if found is not None else Value.null()

    iterable = _iterable(op, lhs)

    if op in _PREDICATE_OPS:
        predicate = as_predicate(_function(op, rhs))
        if op == BinaryOp.ALL:
            return Value.boolean(iterable.all(predicate))
        if op == BinaryOp.ANY:
            return Value.boolean(iterable.any(predicate))
        if op == BinaryOp.FIND:
            return iterable.find(predicate)
        if op == BinaryOp.POSITION:
            return Value.integer(iterable.position(predicate))
        if op == BinaryOp.FILTER:
            return settle(iterable.filter(predicate))
        if op == BinaryOp.SKIP_WHILE:
            return settle(iterable.skip_while(predicate))
        return settle(iterable.take_while(predicate))

    if op == BinaryOp.MAP:
        return settle(iterable.map(as_converter(_function(op, rhs))))

    if op in _COUNT_OPS:
        n = _count(op, rhs)
        if op == BinaryOp.NTH:
            return iterable.nth(n)
        if op == BinaryOp.STEP_BY:
            return settle(iterable.step_by(n))
        if op == BinaryOp.SKIP:
            return settle(iterable.skip(n))
        return settle(iterable.take(n))

    if op in _PAIR_OPS:
        other = _iterable(op, rhs)
        if op == BinaryOp.CHAIN:
            return settle(iterable.chain(other))
        if op == BinaryOp.ZIP:
            return settle(iterable.zip(other))
        return settle(iterable.interleave(other))

    if op == BinaryOp.INTERSPERSE:
        return settle(iterable.intersperse(_value(op, rhs)))

    raise ValueError(f"Unhandled binary operator: {op}")
