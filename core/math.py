# PATH: core/math.py
"""
Math utilities for SWAPGUARD.

Integer-only price and slippage arithmetic (no float money).
All divisions round down so guaranteed output is never overestimated.
"""

from decimal import Decimal
from typing import Union

from core.constants import BPS_DENOMINATOR, MAX_SWAP_COUNT
from core.exceptions import CounterOverflowError
from core.models import Rate


def bps_to_decimal(bps: Union[int, str, Decimal]) -> Decimal:
    """
    Convert basis points to decimal (100 bps = 0.01 = 1%).

    Display only; never used on the execution path.
    """
    return Decimal(str(bps)) / Decimal(BPS_DENOMINATOR)


def price_to_rate(price: int, exponent: int = 0) -> Rate:
    """
    Turn a raw feed price into an exact Rate.

    Args:
        price: Raw price mantissa (must be positive)
        exponent: Feed exponent; real price = price * 10**exponent

    Returns:
        Rate of quote units per base unit
    """
    if exponent >= 0:
        return Rate(numerator=price * 10**exponent)
    return Rate(numerator=price, denominator=10**-exponent)


def calculate_expected_output(amount: int, rate: Rate) -> int:
    """Expected output before slippage, rounded down."""
    return rate.apply(amount)


def calculate_min_output(amount: int, rate: Rate, slippage_bps: int) -> int:
    """
    Minimum acceptable output with slippage protection.

    min_output = amount * rate * (10000 - slippage_bps) / 10000

    Computed as a single floor over the exact fraction, so the bound is
    never rounded up.

    Args:
        amount: Input amount in source base units
        rate: Destination units per source unit
        slippage_bps: Slippage tolerance in basis points

    Returns:
        Minimum output in destination base units
    """
    if not 0 <= slippage_bps <= BPS_DENOMINATOR:
        raise ValueError(f"slippage_bps out of range: {slippage_bps}")

    multiplier = BPS_DENOMINATOR - slippage_bps
    return (amount * rate.numerator * multiplier) // (rate.denominator * BPS_DENOMINATOR)


def calculate_shortfall_bps(expected_output: int, realized_output: int) -> int:
    """
    Shortfall of realized vs expected output in basis points.

    Positive = worse than expected. Zero when expected is zero.
    """
    if expected_output <= 0:
        return 0
    return (expected_output - realized_output) * BPS_DENOMINATOR // expected_output


def confidence_exceeds(confidence: int, price: int, max_bps: int) -> bool:
    """True when confidence / |price| > max_bps / 10000."""
    return confidence * BPS_DENOMINATOR > abs(price) * max_bps


def checked_increment(value: int, ceiling: int = MAX_SWAP_COUNT) -> int:
    """
    Increment a counter, failing instead of wrapping.

    Raises:
        CounterOverflowError: If value + 1 would exceed ceiling
    """
    if value >= ceiling:
        raise CounterOverflowError(
            "Swap counter overflow",
            details={"value": value, "ceiling": ceiling},
        )
    return value + 1
