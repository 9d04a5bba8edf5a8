# PATH: core/constants.py
"""
Constants for SWAPGUARD.

Protocol limits are fixed here on purpose: they are part of the
execution guard's contract and are not read from configuration.
Only the asset-pair allow-list and venue/oracle wiring come from config/.
"""

from enum import Enum
from typing import Final

# =============================================================================
# EXECUTION LIMITS
# =============================================================================

# Minimum time between executions for one trader (seconds)
COOLDOWN_SECONDS: Final[int] = 60

# Maximum swap size, base units of the source asset (1T)
MAX_SWAP_AMOUNT: Final[int] = 1_000_000_000_000

# Slippage tolerance bounds (basis points)
MAX_SLIPPAGE_BPS: Final[int] = 1000  # 10%
BPS_DENOMINATOR: Final[int] = 10_000

# Counter ceiling (unsigned 64-bit)
MAX_SWAP_COUNT: Final[int] = 2**64 - 1

# =============================================================================
# ORACLE LIMITS
# =============================================================================

# Observations older than this are untrusted (seconds)
MAX_STALENESS_SECONDS: Final[int] = 120

# Exclusive upper bound on price and thresholds, raw feed units
PRICE_UPPER_BOUND: Final[int] = 10_000_000_000

# confidence / |price| must not exceed 5%
MAX_CONFIDENCE_BPS: Final[int] = 500


class ThresholdCondition(str, Enum):
    """Direction of the price trigger stored on a trader config."""
    ABOVE = "ABOVE"  # price >= threshold
    BELOW = "BELOW"  # price <= threshold


class TradingCondition(str, Enum):
    """Price band classification for band-triggered trades."""
    SHORT = "SHORT"  # price <= short threshold
    MID = "MID"
    LONG = "LONG"  # price >= long threshold


class SwapState(str, Enum):
    """Lifecycle of a single execution attempt."""
    PENDING = "PENDING"
    CHECKED = "CHECKED"
    COMMITTED = "COMMITTED"
    SUBMITTED = "SUBMITTED"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"
    FAILED = "FAILED"


class ErrorPhase(str, Enum):
    """Phase of the execution pipeline an error was raised in."""
    CONFIG = "CONFIG"
    CHECKS = "CHECKS"
    EFFECTS = "EFFECTS"
    INTERACTION = "INTERACTION"
