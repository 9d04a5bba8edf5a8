# PATH: core/validators.py
"""
Unified validators for SWAPGUARD.

CONTRACTS:
- validate_price_observation(): oracle input, run on every execution
- validate_trader_params(): configuration input, run at init and update
- validate_band(): band trigger parameters
- validate_condition(): enum-valued trigger inputs

All validators raise typed errors (PriceValidationError / InputError)
and never mutate their inputs.

USAGE:
    from core.validators import validate_price_observation

    validate_price_observation(observation, current_time=request.current_time)
"""

from enum import Enum
from typing import Optional, Type, TypeVar

from core.constants import (
    MAX_CONFIDENCE_BPS,
    MAX_SLIPPAGE_BPS,
    MAX_STALENESS_SECONDS,
    MAX_SWAP_AMOUNT,
    PRICE_UPPER_BOUND,
)
from core.exceptions import ErrorCode, InputError, PriceValidationError
from core.math import confidence_exceeds
from core.models import PriceObservation

E = TypeVar("E", bound=Enum)


# =============================================================================
# ORACLE OBSERVATION
# =============================================================================

def validate_price_observation(
    observation: PriceObservation,
    current_time: int,
    max_staleness_seconds: int = MAX_STALENESS_SECONDS,
) -> PriceObservation:
    """
    Validate an untrusted oracle observation.

    Checks, in order:
    1. observed_at more than max_staleness_seconds before now -> STALE_PRICE
    2. observed_at after now                                  -> FUTURE_PRICE
    3. price <= 0                                             -> INVALID_PRICE
    4. price >= PRICE_UPPER_BOUND                             -> PRICE_TOO_LARGE
    5. confidence / |price| > 5%                              -> LOW_CONFIDENCE

    Returns:
        The same observation, for chaining

    Raises:
        PriceValidationError: On the first failing check
    """
    details = {
        "price": observation.price,
        "confidence": observation.confidence,
        "observed_at": observation.observed_at,
        "current_time": current_time,
        "feed_id": observation.feed_id,
    }

    age = observation.age(current_time)
    if age > max_staleness_seconds:
        raise PriceValidationError(
            f"Price is {age}s old (max {max_staleness_seconds}s)",
            ErrorCode.STALE_PRICE,
            {**details, "age_seconds": age},
        )

    if age < 0:
        raise PriceValidationError(
            f"Price observed {-age}s in the future",
            ErrorCode.FUTURE_PRICE,
            details,
        )

    if observation.price <= 0:
        raise PriceValidationError(
            f"Non-positive price: {observation.price}",
            ErrorCode.INVALID_PRICE,
            details,
        )

    if observation.price >= PRICE_UPPER_BOUND:
        raise PriceValidationError(
            f"Price {observation.price} >= bound {PRICE_UPPER_BOUND}",
            ErrorCode.PRICE_TOO_LARGE,
            details,
        )

    if observation.confidence < 0 or confidence_exceeds(
        observation.confidence, observation.price, MAX_CONFIDENCE_BPS
    ):
        raise PriceValidationError(
            f"Confidence interval {observation.confidence} too wide for price {observation.price}",
            ErrorCode.LOW_CONFIDENCE,
            {**details, "max_confidence_bps": MAX_CONFIDENCE_BPS},
        )

    return observation


# =============================================================================
# TRADER PARAMETERS
# =============================================================================

def validate_threshold(threshold: int) -> None:
    if not isinstance(threshold, int) or isinstance(threshold, bool):
        raise InputError(f"Threshold must be an integer: {threshold!r}")
    if not 0 < threshold < PRICE_UPPER_BOUND:
        raise InputError(
            f"Threshold out of range: {threshold}",
            details={"threshold": threshold, "upper_bound": PRICE_UPPER_BOUND},
        )


def validate_swap_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InputError(f"Swap amount must be an integer: {amount!r}")
    if not 0 < amount <= MAX_SWAP_AMOUNT:
        raise InputError(
            f"Swap amount out of range: {amount}",
            details={"amount": amount, "max_amount": MAX_SWAP_AMOUNT},
        )


def validate_slippage_bps(slippage_bps: int) -> None:
    if not isinstance(slippage_bps, int) or isinstance(slippage_bps, bool):
        raise InputError(f"Slippage must be an integer: {slippage_bps!r}")
    if not 0 <= slippage_bps <= MAX_SLIPPAGE_BPS:
        raise InputError(
            f"Slippage tolerance out of range: {slippage_bps} bps",
            details={"slippage_bps": slippage_bps, "max_bps": MAX_SLIPPAGE_BPS},
        )


def validate_trader_params(
    threshold: Optional[int] = None,
    amount: Optional[int] = None,
    slippage_bps: Optional[int] = None,
) -> None:
    """
    Validate trader configuration parameters. None means "not provided".

    Raises:
        InputError: On the first invalid parameter
    """
    if threshold is not None:
        validate_threshold(threshold)
    if amount is not None:
        validate_swap_amount(amount)
    if slippage_bps is not None:
        validate_slippage_bps(slippage_bps)


def validate_band(short_threshold: int, long_threshold: int) -> None:
    """
    Validate band trigger thresholds: 0 < short < long < PRICE_UPPER_BOUND.

    Raises:
        InputError: If the band is malformed
    """
    validate_threshold(short_threshold)
    validate_threshold(long_threshold)
    if long_threshold <= short_threshold:
        raise InputError(
            f"Long threshold {long_threshold} must exceed short threshold {short_threshold}",
            details={"short_threshold": short_threshold, "long_threshold": long_threshold},
        )


def validate_condition(value, enum_cls: Type[E]) -> E:
    """
    Coerce a condition or band target into enum_cls.

    Accepts a member or its string value.

    Raises:
        InputError: If value is not a member of enum_cls
    """
    try:
        return enum_cls(value)
    except ValueError as e:
        raise InputError(
            f"Unknown {enum_cls.__name__}: {value!r}",
            details={"value": str(value), "allowed": [member.value for member in enum_cls]},
        ) from e
