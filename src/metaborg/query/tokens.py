"""Query tokens and parsing of raw token lists.

A query is a flat list of tokens. Raw token lists, as written in YAML or
JSON, use a ``$`` sigil to tell operators apart from literal values:

- ``"$sum"``: apply a unary or binary operator.
- ``"$&not"``: push a unary operator as a function operand.
- ``{"$&gt": 3}``: push a binary operator with its right-hand side fixed,
  as a function operand.
- ``{"$parents": ["artist"]}`` / ``{"$children": ["title"]}``: push the
  values found up or down the item hierarchy at a key path.
- ``"$$text"``: the literal string ``"$text"``.
- anything else: a literal value.

Example:
    parse_tokens([{"$children": ["duration"]}, "$sum"])
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from metaborg.core.exceptions import TokenError, ValueConversionError
from metaborg.core.value import Value
from metaborg.query.operators import BinaryOp, NullaryOp, PartialFn, UnaryFn, UnaryOp

OPERATOR_SIGIL = "$"
OPERATOR_SIGIL_ESCAPE = "$$"
FUNCTION_SIGIL = "$&"


@dataclass(frozen=True)
class ValueToken:
    value: Value


@dataclass(frozen=True)
class SourceToken:
    op: NullaryOp
    key_path: tuple[str, ...] = ()


@dataclass(frozen=True)
class UnaryToken:
    op: UnaryOp


@dataclass(frozen=True)
class BinaryToken:
    op: BinaryOp


@dataclass(frozen=True)
class FunctionToken:
    fn: UnaryFn | PartialFn


Token = Union[ValueToken, SourceToken, UnaryToken, BinaryToken, FunctionToken]


def _operator(name: str) -> UnaryOp | BinaryOp:
    if name in UnaryOp._value2member_map_:
        return UnaryOp(name)
    if name in BinaryOp._value2member_map_:
        return BinaryOp(name)
    raise TokenError(f"Unknown operator: {name!r}")


def _parse_string(raw: str) -> Token:
    if raw.startswith(OPERATOR_SIGIL_ESCAPE):
        return ValueToken(Value.string(raw[1:]))

    if raw.startswith(FUNCTION_SIGIL):
        name = raw[len(FUNCTION_SIGIL):]
        if name not in UnaryOp._value2member_map_:
            raise TokenError(f"Not a unary operator: {name!r}")
        return FunctionToken(UnaryFn(UnaryOp(name)))

    if raw.startswith(OPERATOR_SIGIL):
        name = raw[len(OPERATOR_SIGIL):]
        if name in NullaryOp._value2member_map_:
            return SourceToken(NullaryOp(name))
        op = _operator(name)
        if isinstance(op, UnaryOp):
            return UnaryToken(op)
        return BinaryToken(op)

    return ValueToken(Value.string(raw))


def _parse_mapping(raw: dict) -> Token | None:
    if len(raw) != 1:
        return None
    (key, arg), = raw.items()
    if not isinstance(key, str) or key.startswith(OPERATOR_SIGIL_ESCAPE):
        return None

    if key.startswith(FUNCTION_SIGIL):
        name = key[len(FUNCTION_SIGIL):]
        if name not in BinaryOp._value2member_map_:
            raise TokenError(f"Not a binary operator: {name!r}")
        return FunctionToken(PartialFn(BinaryOp(name), Value.from_raw(arg)))

    if key.startswith(OPERATOR_SIGIL):
        name = key[len(OPERATOR_SIGIL):]
        if name not in NullaryOp._value2member_map_:
            raise TokenError(f"Not a source operator: {name!r}")
        if isinstance(arg, str):
            arg = [arg]
        if not isinstance(arg, list) or not all(isinstance(k, str) for k in arg):
            raise TokenError(f"Key path for {name!r} must be a list of strings")
        return SourceToken(NullaryOp(name), tuple(arg))

    return None


def parse_token(raw: Any) -> Token:
    """Parse one raw token.

    Raises:
        TokenError: If an operator name is unknown or malformed.
    """
    if isinstance(raw, str):
        return _parse_string(raw)
    if isinstance(raw, dict):
        token = _parse_mapping(raw)
        if token is not None:
            return token
    try:
        return ValueToken(Value.from_raw(raw))
    except ValueConversionError as e:
        raise TokenError(f"Invalid literal token: {e}") from e


def parse_tokens(raw_tokens: list[Any]) -> list[Token]:
    """Parse a raw token list, as loaded from YAML or JSON."""
    return [parse_token(raw) for raw in raw_tokens]
