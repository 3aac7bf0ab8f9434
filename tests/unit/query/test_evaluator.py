"""Tests for the query evaluator."""

import pytest

from metaborg.core.exceptions import EmptyStackError, EvaluationError, InvalidProgramError
from metaborg.core.value import Value
from metaborg.query.evaluator import Evaluator, OperandStack, evaluate
from metaborg.query.tokens import parse_tokens


def run(*raw_tokens) -> Value:
    return evaluate(parse_tokens(list(raw_tokens)))


class TestOperandStack:
    """Tests for OperandStack."""

    def test_lifo(self):
        """The last pushed operand is popped first."""
        stack = OperandStack()
        stack.push(Value.integer(1))
        stack.push(Value.integer(2))

        assert stack.pop() == Value.integer(2)
        assert len(stack) == 1

    def test_pop_empty(self):
        """Popping an empty stack fails."""
        with pytest.raises(EmptyStackError):
            OperandStack().pop()


class TestEvaluate:
    """Tests for evaluate."""

    def test_literal(self):
        """A single literal evaluates to itself."""
        assert run(5) == Value.integer(5)

    def test_binary_pops_rhs_first(self):
        """The top of the stack is the right-hand operand."""
        assert run(10, 3, "$sub") == Value.integer(7)

    def test_pipeline(self):
        """Operators chain through the stack."""
        result = run([1, 2, 3, 4], {"$&gt": 1}, "$filter", {"$&mul": 2}, "$map", "$sum")

        assert result == Value.integer(18)

    def test_function_left_over(self):
        """A function operand is not a valid result."""
        with pytest.raises(InvalidProgramError, match="function"):
            run("$&not")

    def test_too_many_operands(self):
        """Leftover operands are an error."""
        with pytest.raises(InvalidProgramError, match="found 2"):
            run(1, 2)

    def test_empty_program(self):
        """An empty program has no result."""
        with pytest.raises(InvalidProgramError, match="found 0"):
            run()

    def test_missing_operand(self):
        """Popping an empty stack makes the program invalid."""
        with pytest.raises(InvalidProgramError) as exc_info:
            run(1, "$add")

        assert isinstance(exc_info.value, EmptyStackError)

    def test_source_without_resolver(self):
        """Source tokens need a resolver and an origin."""
        with pytest.raises(EvaluationError, match="resolver"):
            run({"$parents": ["title"]})

    def test_evaluator_reusable(self):
        """One evaluator runs many programs."""
        evaluator = Evaluator()

        assert evaluator.evaluate(parse_tokens([1, 2, "$add"])) == Value.integer(3)
        assert evaluator.evaluate(parse_tokens([True, "$not"])) == Value.boolean(False)
