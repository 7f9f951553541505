"""
Centralized spreadsheet constants and runtime settings for proofcalc.

Formula constants are sourced from anchors.ANCHORS. Runtime settings (table
and log locations, log retention) read the environment once at import time
and can be overridden from tests or tools through the helpers below.
"""
import os
from typing import Optional

from .anchors import ANCHORS

# --- Formula chain constants (Sheet2) ---
PG_PER_LB_TARGET: float = float(ANCHORS["PG_PER_LB_TARGET"])            # [PG/lb]
LB_PER_GAL_WATER: float = float(ANCHORS["LB_PER_GAL_WATER"])            # [lb/gal]
HUNDREDTHS_STEP: float = float(ANCHORS["HUNDREDTHS_STEP"])
HUNDREDTHS_GAL: float = float(ANCHORS["HUNDREDTHS_GAL"])                # [gal]
LB_PER_GAL_NEW_WEIGHT: float = float(ANCHORS["LB_PER_GAL_NEW_WEIGHT"])  # [lb/gal]

# --- Input precision ---
TOP_PROOF_PLACES: int = int(ANCHORS["TOP_PROOF_PLACES"])
BOTTOM_PROOF_PLACES: int = int(ANCHORS["BOTTOM_PROOF_PLACES"])

# --- Display precision ---
CONV_FACTOR_PLACES: int = int(ANCHORS["CONV_FACTOR_PLACES"])
WATER_PLACES: int = int(ANCHORS["WATER_PLACES"])

# Constants guarded by the CLI --fail-on-drift check
GUARDED: tuple[str, ...] = (
    "PG_PER_LB_TARGET", "LB_PER_GAL_WATER", "HUNDREDTHS_STEP", "HUNDREDTHS_GAL",
    "LB_PER_GAL_NEW_WEIGHT", "TOP_PROOF_PLACES", "BOTTOM_PROOF_PLACES",
    "CONV_FACTOR_PLACES", "WATER_PLACES",
)

# --- Runtime settings ---
# Proof table source (CSV or JSON). No table ships with the package.
TABLE_PATH: Optional[str] = os.environ.get("PROOFCALC_TABLE") or None
# Audit log JSON file used by the CLI
LOG_PATH: str = os.environ.get("PROOFCALC_LOG", "proofcalc_log.json")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    return value if value > 0 else None


# Retention for the CLI log file; the browser front end kept the last 10.
LOG_MAX_ENTRIES: Optional[int] = _env_int("PROOFCALC_LOG_MAX", 10)


def set_log_max_entries(n: Optional[int]) -> None:
    """Override the log retention limit. ``None`` keeps every entry."""
    global LOG_MAX_ENTRIES
    if n is not None and n <= 0:
        raise ValueError("n must be > 0 or None")
    LOG_MAX_ENTRIES = n


def drift() -> list[str]:
    """Return ``"NAME: anchors=.. vs calibration=.."`` for every guarded mismatch."""
    mismatches: list[str] = []
    g = globals()
    for k in GUARDED:
        if float(ANCHORS[k]) != float(g[k]):
            mismatches.append(f"{k}: anchors={ANCHORS[k]!r} vs calibration={g[k]!r}")
    return mismatches
