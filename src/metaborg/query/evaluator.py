"""Stack machine evaluating query token lists.

Each token is one transition of the operand stack:

- a value token pushes a literal value;
- a source token pushes the lazy stream of values found up or down the
  item hierarchy;
- a function token pushes an operator to be used as a function;
- a unary token pops one operand and pushes the result;
- a binary token pops the right-hand operand, then the left-hand one, and
  pushes the result.

After the last token exactly one operand must remain. A lazy iterable left
over is collected into a Sequence value.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from loguru import logger

from metaborg.core.exceptions import EmptyStackError, EvaluationError, InvalidProgramError
from metaborg.core.value import Value
from metaborg.query.operators import (
    NullaryOp,
    Operand,
    apply_binary,
    apply_unary,
    operand_kind,
)
from metaborg.query.tokens import (
    BinaryToken,
    FunctionToken,
    SourceToken,
    Token,
    UnaryToken,
    ValueToken,
)
from metaborg.stream.iterable import IterableLike

if TYPE_CHECKING:
    from metaborg.metadata.resolver import Resolver


class OperandStack:
    """Operands pushed and popped during evaluation."""

    def __init__(self) -> None:
        self._items: list[Operand] = []

    def push(self, operand: Operand) -> None:
        self._items.append(operand)

    def pop(self) -> Operand:
        if not self._items:
            raise EmptyStackError("Cannot pop from an empty operand stack")
        return self._items.pop()

    def __len__(self) -> int:
        return len(self._items)


class Evaluator:
    """Evaluates token lists against an origin item.

    Args:
        resolver: Resolves source tokens; queries without source tokens can
            be evaluated without one.
    """

    def __init__(self, resolver: Resolver | None = None) -> None:
        self.resolver = resolver

    def _source(self, token: SourceToken, origin: Path | None) -> IterableLike:
        if self.resolver is None or origin is None:
            raise EvaluationError(f"Source operator {token.op.value!r} needs a resolver and an origin")
        if token.op == NullaryOp.PARENTS:
            return IterableLike(self.resolver.parents(origin, token.key_path))
        return IterableLike(self.resolver.children(origin, token.key_path))

    def step(self, stack: OperandStack, token: Token, origin: Path | None = None) -> None:
        """Apply one token to the stack."""
        if isinstance(token, ValueToken):
            stack.push(token.value)
        elif isinstance(token, SourceToken):
            stack.push(self._source(token, origin))
        elif isinstance(token, FunctionToken):
            stack.push(token.fn)
        elif isinstance(token, UnaryToken):
            stack.push(apply_unary(token.op, stack.pop()))
        elif isinstance(token, BinaryToken):
            rhs = stack.pop()
            lhs = stack.pop()
            stack.push(apply_binary(token.op, lhs, rhs))
        else:
            raise InvalidProgramError(f"Unknown token: {token!r}")

    def evaluate(self, tokens: Iterable[Token], origin: Path | str | None = None) -> Value:
        """Run a token list to a single value.

        Args:
            tokens: Query tokens.
            origin: Item path that source tokens resolve from.

        Returns:
            The single value left on the stack.

        Raises:
            InvalidProgramError: If the stack does not end with exactly one
                value.
            EvaluationError: If any operation fails.
        """
        origin = Path(origin) if origin is not None else None
        stack = OperandStack()

        for token in tokens:
            self.step(stack, token, origin)

        if len(stack) != 1:
            raise InvalidProgramError(
                f"Expected exactly one operand after evaluation, found {len(stack)}"
            )

        result = stack.pop()
        if isinstance(result, IterableLike):
            result = result.to_value()
        if not isinstance(result, Value):
            raise InvalidProgramError(f"Evaluation ended with a {operand_kind(result)}")

        logger.debug(f"Evaluated query to {result!r}")
        return result


def evaluate(
    tokens: Iterable[Token],
    origin: Path | str | None = None,
    resolver: Resolver | None = None,
) -> Value:
    """Evaluate a token list; see :meth:`Evaluator.evaluate`."""
    return Evaluator(resolver).evaluate(tokens, origin)
