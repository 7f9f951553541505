"""
Frozen anchor set for the dilution spreadsheet constants with brief origin notes.

These values reproduce the spreadsheet (Sheet2) 1:1. Tests assert no drift
relative to these values. Update this file deliberately, together with the
golden tests, if the sheet itself is ever retuned.
"""

ANCHORS: dict[str, float | int | str] = {
    # Proof gallons per pound at the 80 proof bottling target
    "PG_PER_LB_TARGET": 0.10093,
    # Water density used to turn pounds into gallons of added water
    "LB_PER_GAL_WATER": 8.33,
    # Second-round adjustment: each thousandth beyond tenths adds 0.01 * 16 gal
    "HUNDREDTHS_STEP": 0.01,
    "HUNDREDTHS_GAL": 16.0,
    # Water density used for the new batch weight
    "LB_PER_GAL_NEW_WEIGHT": 8.34,

    # Required decimal places on proof entries
    "TOP_PROOF_PLACES": 3,
    "BOTTOM_PROOF_PLACES": 1,

    # Display precision
    "CONV_FACTOR_PLACES": 5,
    "WATER_PLACES": 3,
}

# Origins (free-text for docs)
ORIGINS: dict[str, str] = {
    "PG_PER_LB_TARGET": "TTB Table 4 proof gallons per pound at 80 proof (Sheet2 divisor)",
    "LB_PER_GAL_WATER": "Sheet2 B6/B17 divisor, lb per gallon of water",
    "HUNDREDTHS_GAL": "Sheet2 B6: RIGHT(B4,2) * 0.01 * 16",
    "LB_PER_GAL_NEW_WEIGHT": "Sheet2 B8: B2 + B6 * 8.34",
}
