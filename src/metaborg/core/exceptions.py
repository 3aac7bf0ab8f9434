"""Custom exceptions for metaborg."""

from __future__ import annotations

from pathlib import Path


class MetaborgError(Exception):
    """Base exception for all metaborg errors."""

    pass


# =============================================================================
# Value model
# =============================================================================


class WrongKindError(MetaborgError):
    """A value could not be projected onto the requested kind."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Wrong kind: expected {expected}, found {actual}")


class ValueConversionError(MetaborgError):
    """Raw data could not be converted into a metadata value."""

    pass


class NumericError(MetaborgError):
    """Arithmetic failed (division by zero, integer overflow)."""

    pass


# =============================================================================
# Filesystem traversal
# =============================================================================


class SelectionError(MetaborgError):
    """A selection pattern could not be compiled."""

    pass


class TraversalError(MetaborgError):
    """Failed to access the filesystem while walking items."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot traverse {path}: {reason}")


class SourceError(MetaborgError):
    """A metadata source definition is invalid."""

    pass


class SourceLookupError(MetaborgError):
    """Failed to locate a metadata file for an item.

    Lookup failures are either fatal, which abort resolution for the item,
    or non-fatal, which mean the source simply has nothing for the item.
    """

    ITEM_ACCESS = "item_access"
    NO_ITEM_PARENT_DIR = "no_item_parent_dir"
    NOT_A_DIR = "not_a_dir"
    META_ACCESS = "meta_access"
    NOT_A_FILE = "not_a_file"

    def __init__(
        self,
        path: Path | str,
        kind: str,
        reason: str = "",
        missing: bool = False,
    ):
        self.path = Path(path)
        self.kind = kind
        self.reason = reason
        self.missing = missing
        detail = f": {reason}" if reason else ""
        super().__init__(f"Metadata lookup failed for {path} ({kind}){detail}")

    @property
    def fatal(self) -> bool:
        """Whether this failure should abort resolution."""
        if self.kind == self.META_ACCESS:
            return not self.missing
        return self.kind not in (self.NOT_A_DIR, self.NO_ITEM_PARENT_DIR)


# =============================================================================
# Metadata reading
# =============================================================================


class MetadataReadError(MetaborgError):
    """A metadata file could not be read or has the wrong shape.

    Malformed or misshapen files are not fatal: the file simply contributes
    nothing. A file that exists but cannot be opened (e.g. permission denied)
    is fatal.
    """

    def __init__(self, path: Path | str, reason: str, fatal: bool = False):
        self.path = Path(path)
        self.reason = reason
        self.fatal = fatal
        super().__init__(f"Cannot read metadata file {path}: {reason}")


class PlexError(MetaborgError):
    """Metadata blocks and item paths could not be paired up."""

    pass


class FallbackError(MetaborgError):
    """A per-key fallback specification is invalid."""

    pass


# =============================================================================
# Evaluation
# =============================================================================


class EvaluationError(MetaborgError):
    """Query evaluation failed."""

    pass


class UnexpectedTypeError(EvaluationError):
    """An operator received an operand of the wrong kind."""

    def __init__(self, operator: str, expected: str, actual: str):
        self.operator = operator
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Unexpected type for {operator}: expected {expected}, found {actual}"
        )


class InvalidProgramError(EvaluationError):
    """The query is malformed or did not reduce to exactly one value."""

    pass


class EmptyStackError(InvalidProgramError):
    """An operand was popped from an empty stack."""

    pass


class ZeroStepError(EvaluationError):
    """A step size of zero was requested."""

    pass


class OutOfRangeError(EvaluationError):
    """An index was beyond the end of an iterable."""

    pass


class ItemNotFoundError(EvaluationError):
    """No item satisfied the predicate."""

    pass


class EmptyIterableError(EvaluationError):
    """A reduction requiring at least one item received none."""

    pass


class TokenError(EvaluationError):
    """A raw token could not be parsed."""

    pass
