"""
strategy/gates.py - Pre-execution check gates.

Gates validate an execution request before any state is touched.
Each gate returns GateResult(passed, reject_code, details, message) and
never mutates its inputs. The engine evaluates gates in a fixed order and
stops at the first failure.
"""

from typing import NamedTuple, Optional

from core.constants import (
    COOLDOWN_SECONDS,
    MAX_SLIPPAGE_BPS,
    MAX_SWAP_AMOUNT,
    ThresholdCondition,
    TradingCondition,
)
from core.exceptions import CheckError, ErrorCode, PriceValidationError
from core.models import PriceObservation, TraderConfig
from core.time import elapsed_since
from core.validators import validate_price_observation
from strategy.pairs import AssetPairPolicy

PRICE_VALIDATION_CODES = frozenset({
    ErrorCode.STALE_PRICE,
    ErrorCode.FUTURE_PRICE,
    ErrorCode.INVALID_PRICE,
    ErrorCode.PRICE_TOO_LARGE,
    ErrorCode.LOW_CONFIDENCE,
})


# =============================================================================
# GATE RESULT
# =============================================================================

class GateResult(NamedTuple):
    """Result of a gate check."""
    passed: bool
    reject_code: Optional[ErrorCode] = None
    details: Optional[dict] = None
    message: str = ""

    def raise_for_failure(self) -> None:
        """Raise the matching CheckError if the gate failed."""
        if self.passed:
            return
        code = self.reject_code or ErrorCode.UNKNOWN
        error_cls = PriceValidationError if code in PRICE_VALIDATION_CODES else CheckError
        raise error_cls(self.message or code.value, code, dict(self.details or {}))


PASS = GateResult(passed=True)


# =============================================================================
# INDIVIDUAL GATES
# =============================================================================

def gate_authority(config: TraderConfig, caller: str) -> GateResult:
    """Reject callers other than the config authority."""
    if caller != config.authority:
        return GateResult(
            passed=False,
            reject_code=ErrorCode.UNAUTHORIZED,
            details={"caller": caller},
            message="Caller is not the trader authority",
        )
    return PASS


def gate_not_paused(config: TraderConfig) -> GateResult:
    """Reject while the emergency stop is set."""
    if config.paused:
        return GateResult(
            passed=False,
            reject_code=ErrorCode.SYSTEM_PAUSED,
            message="Trader is paused",
        )
    return PASS


def gate_cooldown(
    last_swap_timestamp: int,
    current_time: int,
    cooldown_seconds: int = COOLDOWN_SECONDS,
) -> GateResult:
    """
    Rate limiter.

    First execution (last_swap_timestamp == 0) always passes. Otherwise at
    least cooldown_seconds must have elapsed; a current_time before the last
    execution never passes.

    current_time must be positive: 0 marks "never executed", so a swap
    recorded at t=0 would never arm the cooldown.
    """
    if current_time <= 0:
        return GateResult(
            passed=False,
            reject_code=ErrorCode.INVALID_INPUT,
            details={"current_time": current_time},
            message=f"Invalid execution time: {current_time}",
        )
    if last_swap_timestamp == 0:
        return PASS

    elapsed = elapsed_since(last_swap_timestamp, current_time)
    if elapsed < cooldown_seconds:
        return GateResult(
            passed=False,
            reject_code=ErrorCode.RATE_LIMITED,
            details={
                "elapsed_seconds": elapsed,
                "cooldown_seconds": cooldown_seconds,
                "retry_after_seconds": cooldown_seconds - elapsed,
            },
            message=f"Rate limited: wait {cooldown_seconds}s between swaps",
        )
    return PASS


def gate_pair(policy: AssetPairPolicy, source_asset: str, destination_asset: str) -> GateResult:
    """Reject pairs outside the allow-list (either direction accepted)."""
    if not policy.is_allowed(source_asset, destination_asset):
        return GateResult(
            passed=False,
            reject_code=ErrorCode.INVALID_TOKEN_PAIR,
            details={"source_asset": source_asset, "destination_asset": destination_asset},
            message=f"Pair {source_asset}->{destination_asset} is not allow-listed",
        )
    return PASS


def gate_amount(amount: int, max_amount: int = MAX_SWAP_AMOUNT) -> GateResult:
    """Require an integer 0 < amount <= max_amount."""
    if not isinstance(amount, int) or isinstance(amount, bool) or not 0 < amount <= max_amount:
        return GateResult(
            passed=False,
            reject_code=ErrorCode.INVALID_AMOUNT,
            details={"amount": amount, "max_amount": max_amount},
            message=f"Invalid swap amount: {amount}",
        )
    return PASS


def gate_slippage_config(slippage_bps: int) -> GateResult:
    """Revalidate the stored slippage tolerance."""
    if not 0 <= slippage_bps <= MAX_SLIPPAGE_BPS:
        return GateResult(
            passed=False,
            reject_code=ErrorCode.INVALID_INPUT,
            details={"slippage_bps": slippage_bps, "max_bps": MAX_SLIPPAGE_BPS},
            message=f"Stored slippage tolerance out of range: {slippage_bps} bps",
        )
    return PASS


def gate_balance(balance: int, amount: int) -> GateResult:
    """Require the caller to hold at least amount of the source asset."""
    if balance < amount:
        return GateResult(
            passed=False,
            reject_code=ErrorCode.INSUFFICIENT_BALANCE,
            details={"balance": balance, "amount": amount},
            message=f"Insufficient balance: {balance} < {amount}",
        )
    return PASS


def gate_price_observation(observation: PriceObservation, current_time: int) -> GateResult:
    """Oracle validation as a gate."""
    try:
        validate_price_observation(observation, current_time)
    except PriceValidationError as e:
        return GateResult(
            passed=False,
            reject_code=e.code,
            details=e.details,
            message=e.message,
        )
    return PASS


def gate_threshold(
    price: int,
    threshold: int,
    condition: ThresholdCondition = ThresholdCondition.ABOVE,
) -> GateResult:
    """
    Price trigger.

    ABOVE passes when price >= threshold, BELOW when price <= threshold.
    """
    if condition == ThresholdCondition.ABOVE:
        met = price >= threshold
    else:
        met = price <= threshold

    if not met:
        return GateResult(
            passed=False,
            reject_code=ErrorCode.PRICE_THRESHOLD_NOT_MET,
            details={"price": price, "threshold": threshold, "condition": condition.value},
            message=f"Price {price} not {condition.value.lower()} threshold {threshold}",
        )
    return PASS


def classify_price(price: int, short_threshold: int, long_threshold: int) -> TradingCondition:
    """Place a price in the SHORT / MID / LONG band."""
    if price <= short_threshold:
        return TradingCondition.SHORT
    if price >= long_threshold:
        return TradingCondition.LONG
    return TradingCondition.MID


def gate_band(
    price: int,
    short_threshold: int,
    long_threshold: int,
    target: TradingCondition,
) -> GateResult:
    """Band trigger: the price band must match target."""
    current = classify_price(price, short_threshold, long_threshold)
    if current != target:
        return GateResult(
            passed=False,
            reject_code=ErrorCode.PRICE_THRESHOLD_NOT_MET,
            details={
                "price": price,
                "short_threshold": short_threshold,
                "long_threshold": long_threshold,
                "current": current.value,
                "target": target.value,
            },
            message=f"Condition {current.value} doesn't match target {target.value}",
        )
    return PASS
