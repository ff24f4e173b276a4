"""Decimal currency helpers"""

from decimal import Decimal, ROUND_HALF_UP

# Zero/equality tolerance used across the ledger
TOLERANCE = Decimal("0.01")
CENT = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    """Round to cents, half away from zero"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def is_zero(value: Decimal, tolerance: Decimal = TOLERANCE) -> bool:
    """True when value is within tolerance of zero"""
    return abs(value) < tolerance


def presentable(value: Decimal) -> Decimal:
    """Round to cents for display, folding negative zero into zero"""
    rounded = round2(value)
    return abs(rounded) if rounded == 0 else rounded
