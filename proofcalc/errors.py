"""
Error taxonomy for proofcalc.

Every failure reaches the caller with its specific kind; the engine never
substitutes a default value and never returns a partial result.
"""
from __future__ import annotations

from typing import Optional


class ProofCalcError(Exception):
    """Base class for all controlled proofcalc failures."""

    kind: str = "ProofCalcError"

    def __str__(self) -> str:
        msg = super().__str__()
        return msg or self.kind


class InvalidFormat(ProofCalcError):
    """A proof string does not carry the required number of decimal places."""

    kind = "InvalidFormat"

    def __init__(self, raw: str, required_places: Optional[int] = None, field: Optional[str] = None):
        self.raw = raw
        self.required_places = required_places
        self.field = field
        label = field or "proof"
        if required_places is None:
            super().__init__(f"{label} {raw!r} is not in the required format")
        else:
            super().__init__(f"{label} {raw!r} must have exactly {required_places} decimal place(s)")


class NotANumber(ProofCalcError):
    """A value passed the format check but is not a finite number."""

    kind = "NotANumber"

    def __init__(self, raw: object, field: Optional[str] = None, reason: Optional[str] = None):
        self.raw = raw
        self.field = field
        label = field or "value"
        super().__init__(reason or f"{label} {raw!r} is not a valid number")


class InvalidWeight(NotANumber):
    """A weight is missing, non-finite, or not greater than zero."""

    kind = "InvalidWeight"

    def __init__(self, raw: object, field: Optional[str] = None):
        super().__init__(raw, field=field, reason=f"{field or 'weight'} must be a number > 0, got {raw!r}")


class ProofNotFound(ProofCalcError):
    """The proof table has no entry for the computed key."""

    kind = "ProofNotFound"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"no conversion factor for proof {key}")


class TableNotReady(ProofCalcError):
    """A computation was attempted before a proof table was loaded."""

    kind = "TableNotReady"

    def __init__(self, msg: str = "proof table has not been loaded"):
        super().__init__(msg)


class LoadError(ProofCalcError):
    """The proof table source is unreachable or malformed."""

    kind = "LoadError"
