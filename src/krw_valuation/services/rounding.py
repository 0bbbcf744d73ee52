"""Deterministic rounding shared by the interpolation and valuation services."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_half_away(value: float, ndigits: int = 0) -> float:
    """Round half away from zero at `ndigits` decimals.

    The float is first converted through its shortest repr, so 2.675 rounds
    to 2.68 rather than to the binary neighbour 2.67. Python's builtin
    `round` uses banker's rounding and is not used for published figures.
    """
    quantum = Decimal(1).scaleb(-ndigits)
    rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    # + 0.0 folds -0.0 into 0.0
    return float(rounded) + 0.0
