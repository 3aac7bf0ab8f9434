"""Lazy, fallible, single-pass streams of metadata values.

A :class:`Producer` yields items that are either a :class:`Value` or a
:class:`MetaborgError` instance standing in for an item that could not be
produced. Errors never terminate a stream; consumers decide whether to raise
them. Every adaptor pulls from its upstream only when asked for its own next
item.

Example:
    producer = StepBy(FixedProducer(values), 2)
    for item in producer:
        if is_error(item):
            raise item
        print(item)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Iterable, Union

from metaborg.core.exceptions import MetaborgError, ZeroStepError
from metaborg.core.value import Value, ValueKind

Item = Union[Value, MetaborgError]
Predicate = Callable[[Value], bool]
Converter = Callable[[Value], Value]


def is_error(item: Item) -> bool:
    return isinstance(item, MetaborgError)


class Producer(ABC):
    """Base class for value streams.

    Subclasses implement :meth:`_pull`, returning the next item or None when
    exhausted. Once exhausted, a producer stays exhausted.
    """

    _exhausted = False

    def __iter__(self) -> Producer:
        return self

    def __next__(self) -> Item:
        if self._exhausted:
            raise StopIteration
        item = self._pull()
        if item is None:
            self._exhausted = True
            raise StopIteration
        return item

    def pull(self) -> Item | None:
        """Next item, or None when exhausted."""
        if self._exhausted:
            return None
        item = self._pull()
        if item is None:
            self._exhausted = True
        return item

    @abstractmethod
    def _pull(self) -> Item | None: ...


# =============================================================================
# Sources
# =============================================================================


class FixedProducer(Producer):
    """Produces a fixed sequence of values."""

    def __init__(self, values: Iterable[Value]) -> None:
        self._it = iter(values)

    def _pull(self) -> Item | None:
        return next(self._it, None)


class RawProducer(Producer):
    """Produces a fixed sequence of values and errors."""

    def __init__(self, items: Iterable[Item]) -> None:
        self._it = iter(items)

    def _pull(self) -> Item | None:
        return next(self._it, None)


# =============================================================================
# Adaptors
# =============================================================================


class Flatten(Producer):
    """Expands sequence items in place, one level deep."""

    def __init__(self, source: Producer) -> None:
        self.source = source
        self._queue: deque[Value] = deque()

    def _pull(self) -> Item | None:
        while not self._queue:
            item = self.source.pull()
            if item is None or is_error(item) or item.kind != ValueKind.SEQUENCE:
                return item
            self._queue.extend(item.data)
        return self._queue.popleft()


class Dedup(Producer):
    """Drops items equal to the immediately preceding value."""

    def __init__(self, source: Producer) -> None:
        self.source = source
        self._last: Value | None = None

    def _pull(self) -> Item | None:
        while True:
            item = self.source.pull()
            if item is None or is_error(item):
                return item
            if item != self._last:
                self._last = item
                return item


class Unique(Producer):
    """Drops items equal to any previously produced value."""

    def __init__(self, source: Producer) -> None:
        self.source = source
        self._seen: set[Value] = set()

    def _pull(self) -> Item | None:
        while True:
            item = self.source.pull()
            if item is None or is_error(item):
                return item
            if item not in self._seen:
                self._seen.add(item)
                return item


class Filter(Producer):
    """Keeps values passing a predicate; predicate errors replace the item."""

    def __init__(self, source: Producer, predicate: Predicate) -> None:
        self.source = source
        self.predicate = predicate

    def _pull(self) -> Item | None:
        while True:
            item = self.source.pull()
            if item is None or is_error(item):
                return item
            try:
                if self.predicate(item):
                    return item
            except MetaborgError as e:
                return e


class Map(Producer):
    """Converts each value; converter errors replace the item."""

    def __init__(self, source: Producer, converter: Converter) -> None:
        self.source = source
        self.converter = converter

    def _pull(self) -> Item | None:
        item = self.source.pull()
        if item is None or is_error(item):
            return item
        try:
            return self.converter(item)
        except MetaborgError as e:
            return e


class StepBy(Producer):
    """Produces every n-th value, starting with the first.

    Errors are always produced and do not count as steps, so errors ahead of
    the first value never shift which values are produced.
    """

    def __init__(self, source: Producer, step: int) -> None:
        if step == 0:
            raise ZeroStepError("Step size must be greater than zero")
        self.source = source
        self.step = step
        self._count = step

    def _pull(self) -> Item | None:
        while True:
            item = self.source.pull()
            if item is None or is_error(item):
                return item
            if self._count >= self.step:
                self._count = 1
                return item
            self._count += 1


class Chain(Producer):
    """Produces everything from the first source, then the second."""

    def __init__(self, first: Producer, second: Producer) -> None:
        self.first = first
        self.second = second
        self._first_done = False

    def _pull(self) -> Item | None:
        if not self._first_done:
            item = self.first.pull()
            if item is not None:
                return item
            self._first_done = True
        return self.second.pull()


class Zip(Producer):
    """Pairs items from two sources, stopping when either runs out.

    If both sides error on the same step, the first side's error is produced
    first and the second side's error on the following pull.
    """

    def __init__(self, first: Producer, second: Producer) -> None:
        self.first = first
        self.second = second
        self._pending_error: MetaborgError | None = None

    def _pull(self) -> Item | None:
        if self._pending_error is not None:
            error, self._pending_error = self._pending_error, None
            return error

        a = self.first.pull()
        if a is None:
            return None
        b = self.second.pull()
        if b is None:
            return None

        if is_error(a):
            if is_error(b):
                self._pending_error = b
            return a
        if is_error(b):
            return b
        return Value.sequence([a, b])


class Skip(Producer):
    """Skips the first n items, still producing errors met while skipping."""

    def __init__(self, source: Producer, n: int) -> None:
        self.source = source
        self.n = n
        self._skipped = 0

    def _pull(self) -> Item | None:
        while self._skipped < self.n:
            self._skipped += 1
            item = self.source.pull()
            if item is None:
                return None
            if is_error(item):
                return item
        return self.source.pull()


class Take(Producer):
    """Produces at most n items."""

    def __init__(self, source: Producer, n: int) -> None:
        self.source = source
        self.n = n
        self._taken = 0

    def _pull(self) -> Item | None:
        if self._taken >= self.n:
            return None
        self._taken += 1
        return self.source.pull()


class SkipWhile(Producer):
    """Skips values while the predicate holds, then produces the rest.

    The first value failing the predicate is produced and ends the
    skipping. A predicate error does the same in place of that value.
    Upstream errors are produced in place without ending the skipping.
    """

    def __init__(self, source: Producer, predicate: Predicate) -> None:
        self.source = source
        self.predicate = predicate
        self._skipping = True

    def _pull(self) -> Item | None:
        while self._skipping:
            item = self.source.pull()
            if item is None or is_error(item):
                return item
            try:
                if self.predicate(item):
                    continue
            except MetaborgError as e:
                self._skipping = False
                return e
            self._skipping = False
            return item
        return self.source.pull()


class TakeWhile(Producer):
    """Produces values while the predicate holds.

    The first value failing the predicate is dropped and ends the stream,
    as does a predicate error. Upstream errors are produced in place.
    """

    def __init__(self, source: Producer, predicate: Predicate) -> None:
        self.source = source
        self.predicate = predicate

    def _pull(self) -> Item | None:
        item = self.source.pull()
        if item is None or is_error(item):
            return item
        try:
            keep = self.predicate(item)
        except MetaborgError:
            keep = False
        return item if keep else None


class Intersperse(Producer):
    """Places a constant value between successive upstream items."""

    def __init__(self, source: Producer, separator: Value) -> None:
        self.source = source
        self.separator = separator
        self._started = False
        self._held: Item | None = None

    def _pull(self) -> Item | None:
        if self._held is not None:
            item, self._held = self._held, None
            return item

        item = self.source.pull()
        if item is None:
            return None
        if not self._started:
            self._started = True
            return item
        self._held = item
        return self.separator


class Interleave(Producer):
    """Alternates between two sources, ending when the source due is empty."""

    def __init__(self, first: Producer, second: Producer) -> None:
        self.first = first
        self.second = second
        self._use_first = True

    def _pull(self) -> Item | None:
        source = self.first if self._use_first else self.second
        self._use_first = not self._use_first
        return source.pull()
