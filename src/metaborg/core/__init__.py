"""Core value model and exceptions for metaborg.

Configuration lives in :mod:`metaborg.core.config`; it is not re-exported
here because it depends on the filesystem and metadata packages.
"""

from .exceptions import (
    EmptyIterableError,
    EmptyStackError,
    EvaluationError,
    FallbackError,
    InvalidProgramError,
    ItemNotFoundError,
    MetaborgError,
    MetadataReadError,
    NumericError,
    OutOfRangeError,
    PlexError,
    SelectionError,
    SourceError,
    SourceLookupError,
    TokenError,
    TraversalError,
    UnexpectedTypeError,
    ValueConversionError,
    WrongKindError,
    ZeroStepError,
)
from .number import Number, val_cmp, val_max, val_min
from .value import ROOT, Value, ValueKind

__all__ = [
    "MetaborgError",
    "WrongKindError",
    "ValueConversionError",
    "NumericError",
    "SelectionError",
    "TraversalError",
    "SourceError",
    "SourceLookupError",
    "MetadataReadError",
    "PlexError",
    "FallbackError",
    "EvaluationError",
    "UnexpectedTypeError",
    "EmptyStackError",
    "InvalidProgramError",
    "ZeroStepError",
    "OutOfRangeError",
    "ItemNotFoundError",
    "EmptyIterableError",
    "TokenError",
    "Value",
    "ValueKind",
    "ROOT",
    "Number",
    "val_cmp",
    "val_max",
    "val_min",
]
