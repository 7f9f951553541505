"""
Display formatting for computed values.

Rounding follows the sheet: half away from zero on the shortest decimal form
of the float (what the cell shows), not Python's round-half-even on the binary
value. Formatting is applied once, at the display boundary; the numeric result
and the log keep the unrounded values.
"""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from enum import Enum
from typing import Dict, Optional

from . import calibration as CAL
from .schemas import DilutionResult


class FormatKind(str, Enum):
    CONVERSION_FACTOR = "conversion_factor"
    WATER_VOLUME = "water_volume"
    WEIGHT = "weight"


def _places(kind: FormatKind) -> int:
    if kind is FormatKind.CONVERSION_FACTOR:
        return CAL.CONV_FACTOR_PLACES
    if kind is FormatKind.WATER_VOLUME:
        return CAL.WATER_PLACES
    return 0


def round_half_up(value: float, places: int) -> Decimal:
    """Round to ``places`` decimals, ties away from zero."""
    if not math.isfinite(value):
        raise ValueError(f"cannot format non-finite value {value!r}")
    d = Decimal(repr(float(value)))
    with localcontext() as ctx:
        # room for every integer digit plus the requested places
        ctx.prec = max(ctx.prec, d.adjusted() + places + 2)
        d = d.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
        return d + 0  # drops the sign of a negative zero


def format_value(value: float, kind: FormatKind, places: Optional[int] = None) -> str:
    """Render ``value`` for display.

    CONVERSION_FACTOR -> 5 places (trailing zeros kept), WATER_VOLUME -> 3 places,
    WEIGHT -> nearest integer with thousands separators.
    """
    kind = FormatKind(kind)
    n = _places(kind) if places is None else places
    d = round_half_up(value, n)
    if kind is FormatKind.WEIGHT:
        return f"{d:,.{n}f}"
    return f"{d:.{n}f}"


def format_result(result: DilutionResult) -> Dict[str, str]:
    """Display strings for every output the result carries."""
    out = {
        "conversion_factor": format_value(result.conversion_factor, FormatKind.CONVERSION_FACTOR),
        "water_to_add": format_value(result.water_to_add, FormatKind.WATER_VOLUME),
    }
    if result.new_weight is not None:
        out["new_weight"] = format_value(result.new_weight, FormatKind.WEIGHT)
    if result.target_conversion_factor is not None:
        out["target_conversion_factor"] = format_value(
            result.target_conversion_factor, FormatKind.CONVERSION_FACTOR
        )
    return out
