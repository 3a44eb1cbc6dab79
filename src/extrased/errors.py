"""Exception hierarchy for expression parsing, addressing and execution.

Transport-level failures (HTTP, network) live in :mod:`extrased.transport`.
"""

from __future__ import annotations


class SedError(Exception):
    """Base exception for extrased errors."""


class ParseError(SedError):
    """Raised for a malformed directive, attribute block or address."""


class AddressError(SedError):
    """Raised when an address does not resolve against the live document.

    Carries the kind of thing addressed ("table", "row", "col", "image"),
    the index the caller asked for, and the valid 1-based range.
    """

    def __init__(
        self,
        kind: str,
        index: int,
        valid_range: tuple[int, int],
        message: str | None = None,
    ) -> None:
        self.kind = kind
        self.index = index
        self.valid_range = valid_range
        if message is None:
            low, high = valid_range
            if high < low:
                message = f"{kind} {index} out of range (no {kind}s available)"
            else:
                message = f"{kind} {index} out of range (valid {low}..{high})"
        super().__init__(message)


class PhaseError(SedError):
    """Raised when one execution phase fails.

    Phases that completed before the failure stay applied, so ``phase``
    tells the caller how far the document got.
    """

    def __init__(self, phase: str, cause: BaseException) -> None:
        super().__init__(f"{phase} phase failed: {cause}")
        self.phase = phase
        self.cause = cause


class ExpressionError(SedError):
    """Raised when one directive of a multi-directive run fails.

    ``number`` is the directive's 1-based position; ``completed`` holds
    the outcomes of the directives that ran before it.
    """

    def __init__(
        self, number: int, cause: BaseException, completed: list | None = None
    ) -> None:
        super().__init__(f"expression {number}: {cause}")
        self.number = number
        self.cause = cause
        self.completed = completed or []
