"""
Proof string validation and normalization.

Proof entries arrive as text (the sheet keeps them as text so that LEFT()/RIGHT()
slicing works), so validation happens in two stages:

  1. format: exactly one decimal point and exactly N characters after it
  2. numeric: sign, digits and the point only; anything else is NotANumber

Only a ``ValidatedProof`` reaches the engine. Table keys are carried as
``ProofKey`` (integer tenths) so that float formatting never decides a lookup.
"""
from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from typing import Optional, Union

from .errors import InvalidFormat, NotANumber

_NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def normalize_text(raw: str) -> str:
    """NFKC-normalize and trim a raw entry (full-width digits become ASCII)."""
    return unicodedata.normalize("NFKC", raw).strip()


def validate_decimal_places(raw: str, required_places: int) -> bool:
    """True when ``raw`` has exactly one "." followed by exactly ``required_places`` characters."""
    if not isinstance(raw, str):
        return False
    text = normalize_text(raw)
    if text.count(".") != 1:
        return False
    return len(text.split(".", 1)[1]) == required_places


def parse_decimal(raw: Union[str, int, float, Decimal], field: Optional[str] = None) -> Decimal:
    """Parse a plain decimal number (no exponent, no nan/inf) into a ``Decimal``."""
    if isinstance(raw, bool):
        raise NotANumber(raw, field=field)
    if isinstance(raw, Decimal):
        if not raw.is_finite():
            raise NotANumber(raw, field=field)
        return raw
    if isinstance(raw, (int, float)):
        d = Decimal(repr(raw)) if isinstance(raw, float) else Decimal(raw)
        if not d.is_finite():
            raise NotANumber(raw, field=field)
        return d
    if not isinstance(raw, str):
        raise NotANumber(raw, field=field)
    text = normalize_text(raw)
    if not _NUMBER_RE.fullmatch(text):
        raise NotANumber(raw, field=field)
    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise NotANumber(raw, field=field) from e


@dataclass(frozen=True, order=True)
class ProofKey:
    """Proof truncated to tenths, stored as an integer number of tenths."""

    tenths: int

    @classmethod
    def truncate(cls, value: Union[Decimal, str, int, float]) -> "ProofKey":
        """floor(value * 10) / 10, computed on the decimal digits."""
        d = value if isinstance(value, Decimal) else parse_decimal(value)
        return cls(int((d * 10).to_integral_value(rounding=ROUND_FLOOR)))

    @classmethod
    def parse(cls, text: Union[str, int, float]) -> "ProofKey":
        """Parse a table key ("80", "80.0", "80.1"). Finer precision is rejected."""
        d = parse_decimal(text, field="proof key")
        scaled = d * 10
        if scaled != scaled.to_integral_value():
            raise ValueError(f"proof key {text!r} is finer than tenths")
        return cls(int(scaled))

    def __str__(self) -> str:
        sign = "-" if self.tenths < 0 else ""
        whole, tenth = divmod(abs(self.tenths), 10)
        if tenth == 0:
            return f"{sign}{whole}"
        return f"{sign}{whole}.{tenth}"

    def __float__(self) -> float:
        return self.tenths / 10


@dataclass(frozen=True)
class ValidatedProof:
    text: str
    places: int
    value: Decimal

    @property
    def key(self) -> ProofKey:
        return ProofKey.truncate(self.value)

    @property
    def fraction(self) -> str:
        return self.text.split(".", 1)[1] if "." in self.text else ""

    def trailing_hundredths(self) -> int:
        """Sheet RIGHT(proof, 2): the last two digits past the tenths place, as an int.

        Digits are sliced literally ("80.060" -> 60, "80.600" -> 0). A single
        digit past the tenths is read with a leading zero ("80.65" -> 5).
        """
        beyond_tenths = self.fraction[1:]
        return int(beyond_tenths[-2:].rjust(2, "0"))

    def __float__(self) -> float:
        return float(self.value)


def validate_proof(raw: str, places: int, field: Optional[str] = None) -> ValidatedProof:
    """Two-stage validation: format (InvalidFormat) then numeric parse (NotANumber)."""
    if not isinstance(raw, str) or not validate_decimal_places(raw, places):
        raise InvalidFormat(str(raw), required_places=places, field=field)
    text = normalize_text(raw)
    value = parse_decimal(text, field=field)
    return ValidatedProof(text=text, places=places, value=value)


def parse_proof(raw: Union[str, int, float], field: Optional[str] = None) -> ValidatedProof:
    """Numeric-only validation for proofs without a decimal-place rule (variable target)."""
    value = parse_decimal(raw, field=field)
    text = normalize_text(raw) if isinstance(raw, str) else str(value)
    places = len(text.split(".", 1)[1]) if "." in text else 0
    return ValidatedProof(text=text, places=places, value=value)
