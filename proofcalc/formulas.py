from . import calibration as CAL

# =============================
# Sheet2 formula chain (no intermediate rounding)
# =============================

def raw_water_factor(weight: float, conversion_factor: float) -> float:
    """
    Water-equivalent pounds needed to bring the batch down to target proof:
        W_raw = ((weight * PG_conv) / 0.10093) - weight
    Args:
        weight: batch weight [lb]
        conversion_factor: PG conversion factor for the truncated proof
    Returns:
        float: raw water factor [lb]
    """
    return ((weight * conversion_factor) / CAL.PG_PER_LB_TARGET) - weight

def hundredths_adjustment(hundredths: int) -> float:
    """
    Second-round correction for the digits past the tenths place:
        adj = hundredths * 0.01 * 16.0   [gal]
    """
    return hundredths * CAL.HUNDREDTHS_STEP * CAL.HUNDREDTHS_GAL

def water_to_add_top(intermediate: float, hundredths: int) -> float:
    """
    2nd H2O (Sheet2 B6):
        H2O = (W_raw / 8.33) + (hundredths * 0.01 * 16.0)
    Args:
        intermediate: raw water factor [lb]
        hundredths: RIGHT(proof, 2) as an integer
    Returns:
        float: water to add [gal]
    """
    return (intermediate / CAL.LB_PER_GAL_WATER) + hundredths_adjustment(hundredths)

def water_to_add_bottom(intermediate: float) -> float:
    """1st H2O (Sheet2 B17): H2O = W_raw / 8.33 [gal]."""
    return intermediate / CAL.LB_PER_GAL_WATER

def new_weight(weight: float, water_to_add: float) -> float:
    """
    2nd Weight (Sheet2 B8):
        W_new = weight + (H2O * 8.34)
    """
    return weight + (water_to_add * CAL.LB_PER_GAL_NEW_WEIGHT)
