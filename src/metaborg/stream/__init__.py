"""Lazy value streams and the eager/lazy iterable wrapper."""

from metaborg.stream.iterable import IterableLike
from metaborg.stream.producer import (
    Chain,
    Converter,
    Dedup,
    FixedProducer,
    Filter,
    Flatten,
    Interleave,
    Intersperse,
    Item,
    Map,
    Predicate,
    Producer,
    RawProducer,
    Skip,
    SkipWhile,
    StepBy,
    Take,
    TakeWhile,
    Unique,
    Zip,
    is_error,
)

__all__ = [
    "IterableLike",
    "Item",
    "Predicate",
    "Converter",
    "Producer",
    "FixedProducer",
    "RawProducer",
    "Flatten",
    "Dedup",
    "Unique",
    "Filter",
    "Map",
    "StepBy",
    "Chain",
    "Zip",
    "Skip",
    "Take",
    "SkipWhile",
    "TakeWhile",
    "Intersperse",
    "Interleave",
    "is_error",
]
