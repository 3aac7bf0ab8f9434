"""Query evaluation over metadata values.

Operators:
- NullaryOp, UnaryOp, BinaryOp: the closed operator sets
- UnaryFn, PartialFn: operators used as function operands

Tokens:
- ValueToken, SourceToken, UnaryToken, BinaryToken, FunctionToken
- parse_tokens: parse raw token lists using the ``$`` operator sigil

Evaluation:
- Evaluator, evaluate: run a token list to a single value
"""

from metaborg.query.evaluator import Evaluator, OperandStack, evaluate
from metaborg.query.operators import (
    BinaryOp,
    NullaryOp,
    PartialFn,
    UnaryFn,
    UnaryOp,
    apply_binary,
    apply_unary,
)
from metaborg.query.tokens import (
    BinaryToken,
    FunctionToken,
    SourceToken,
    Token,
    UnaryToken,
    ValueToken,
    parse_token,
    parse_tokens,
)

__all__ = [
    # Operators
    "NullaryOp",
    "UnaryOp",
    "BinaryOp",
    "UnaryFn",
    "PartialFn",
    "apply_unary",
    "apply_binary",
    # Tokens
    "Token",
    "ValueToken",
    "SourceToken",
    "UnaryToken",
    "BinaryToken",
    "FunctionToken",
    "parse_token",
    "parse_tokens",
    # Evaluation
    "Evaluator",
    "OperandStack",
    "evaluate",
]
