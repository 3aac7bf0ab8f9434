"""Eager or lazy iterables of metadata values.

:class:`IterableLike` wraps either a materialized list of values or a
:class:`Producer`, and exposes one set of operations over both.

Laziness propagates: an operation whose inputs are all eager collects its
result into a new eager list right away, while an operation with any lazy
input stays lazy until something forces it, such as a reduction or
:meth:`IterableLike.collect`.
"""

from __future__ import annotations

import functools
from typing import Callable, Iterator

from metaborg.core.exceptions import (
    EmptyIterableError,
    ItemNotFoundError,
    MetaborgError,
    OutOfRangeError,
    UnexpectedTypeError,
)
from metaborg.core.number import Number, val_max, val_min
from metaborg.core.value import Value, kind_name
from metaborg.stream import producer as prod
from metaborg.stream.producer import Converter, Predicate, Producer


class IterableLike:
    """A sequence of values that is either materialized or streamed.

    Args:
        source: A list of values (eager) or a producer (lazy).
    """

    def __init__(self, source: list[Value] | Producer) -> None:
        self._source = source

    @classmethod
    def from_value(cls, value: Value) -> IterableLike:
        return cls(value.as_sequence())

    @property
    def is_lazy(self) -> bool:
        return isinstance(self._source, Producer)

    def producer(self) -> Producer:
        """Stream over this iterable; a lazy source is handed over as is."""
        if isinstance(self._source, Producer):
            return self._source
        return prod.FixedProducer(list(self._source))

    def values(self) -> Iterator[Value]:
        """Iterate the values, raising the first error encountered."""
        if not isinstance(self._source, Producer):
            yield from self._source
            return
        for item in self._source:
            if isinstance(item, MetaborgError):
                raise item
            yield item

    def collect(self) -> list[Value]:
        return list(self.values())

    def to_value(self) -> Value:
        return Value.sequence(self.values())

    def __repr__(self) -> str:
        if self.is_lazy:
            return f"IterableLike(<lazy {type(self._source).__name__}>)"
        return f"IterableLike({self._source!r})"

    # -------------------------------------------------------------------------
    # Adaptors
    # -------------------------------------------------------------------------

    def _adapt(self, build: Callable[..., Producer], *others: IterableLike) -> IterableLike:
        inputs = (self, *others)
        result = build(*(i.producer() for i in inputs))
        if any(i.is_lazy for i in inputs):
            return IterableLike(result)
        return IterableLike(IterableLike(result).collect())

    def flatten(self) -> IterableLike:
        return self._adapt(prod.Flatten)

    def dedup(self) -> IterableLike:
        return self._adapt(prod.Dedup)

    def unique(self) -> IterableLike:
        return self._adapt(prod.Unique)

    def filter(self, predicate: Predicate) -> IterableLike:
        return self._adapt(lambda p: prod.Filter(p, predicate))

    def map(self, converter: Converter) -> IterableLike:
        return self._adapt(lambda p: prod.Map(p, converter))

    def step_by(self, step: int) -> IterableLike:
        return self._adapt(lambda p: prod.StepBy(p, step))

    def chain(self, other: IterableLike) -> IterableLike:
        return self._adapt(prod.Chain, other)

    def zip(self, other: IterableLike) -> IterableLike:
        return self._adapt(prod.Zip, other)

    def skip(self, n: int) -> IterableLike:
        return self._adapt(lambda p: prod.Skip(p, n))

    def take(self, n: int) -> IterableLike:
        return self._adapt(lambda p: prod.Take(p, n))

    def skip_while(self, predicate: Predicate) -> IterableLike:
        return self._adapt(lambda p: prod.SkipWhile(p, predicate))

    def take_while(self, predicate: Predicate) -> IterableLike:
        return self._adapt(lambda p: prod.TakeWhile(p, predicate))

    def intersperse(self, separator: Value) -> IterableLike:
        return self._adapt(lambda p: prod.Intersperse(p, separator))

    def interleave(self, other: IterableLike) -> IterableLike:
        return self._adapt(prod.Interleave, other)

    # -------------------------------------------------------------------------
    # Reductions
    # -------------------------------------------------------------------------

    def count(self) -> int:
        if not self.is_lazy:
            return len(self._source)
        return sum(1 for _ in self.values())

    def first(self) -> Value:
        for value in self.values():
            return value
        raise EmptyIterableError("Cannot take the first item of an empty iterable")

    def last(self) -> Value:
        found = None
        for value in self.values():
            found = value
        if found is None:
            raise EmptyIterableError("Cannot take the last item of an empty iterable")
        return found

    def nth(self, n: int) -> Value:
        if n < 0:
            raise OutOfRangeError(f"Negative index: {n}")
        for i, value in enumerate(self.values()):
            if i == n:
                return value
        raise OutOfRangeError(f"Index {n} is out of range")

    def _numbers(self, operator: str) -> Iterator[Number]:
        for value in self.values():
            if not value.is_number:
                raise UnexpectedTypeError(operator, "number", kind_name(value))
            yield value.as_number()

    def max_in(self) -> Value:
        numbers = self._numbers("max_in")
        try:
            result = next(numbers)
        except StopIteration:
            raise EmptyIterableError("Cannot take the maximum of an empty iterable") from None
        for number in numbers:
            result = val_max(result, number)
        return result.to_value()

    def min_in(self) -> Value:
        numbers = self._numbers("min_in")
        try:
            result = next(numbers)
        except StopIteration:
            raise EmptyIterableError("Cannot take the minimum of an empty iterable") from None
        for number in numbers:
            result = val_min(result, number)
        return result.to_value()

    def sum(self) -> Value:
        return functools.reduce(lambda a, b: a + b, self._numbers("sum"), Number(0)).to_value()

    def prod(self) -> Value:
        return functools.reduce(lambda a, b: a * b, self._numbers("prod"), Number(1)).to_value()

    def rev(self) -> list[Value]:
        return self.collect()[::-1]

    def sort(self) -> list[Value]:
        """Sort the values.

        All-numeric input is ordered by numeric value, keeping the input order
        of numerically equal items. Any other input is ordered structurally.
        """
        values = self.collect()
        if all(v.is_number for v in values):
            return sorted(
                values,
                key=functools.cmp_to_key(lambda a, b: a.as_number().val_cmp(b.as_number())),
            )
        # Mixed-kind input: Integer and Decimal are not compared numerically here
        return sorted(values)

    def all_equal(self) -> bool:
        values = self.values()
        first = next(values, None)
        return all(v == first for v in values)

    def all(self, predicate: Predicate) -> bool:
        return all(predicate(v) for v in self.values())

    def any(self, predicate: Predicate) -> bool:
        return any(predicate(v) for v in self.values())

    def find(self, predicate: Predicate) -> Value:
        for value in self.values():
            if predicate(value):
                return value
        raise ItemNotFoundError("No item satisfies the predicate")

    def position(self, predicate: Predicate) -> int:
        for i, value in enumerate(self.values()):
            if predicate(value):
                return i
        raise ItemNotFoundError("No item satisfies the predicate")
