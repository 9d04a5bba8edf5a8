"""
core - Core utilities and models for SWAPGUARD.

This package contains:
- models.py: Data models (TraderConfig, SwapRequest, PriceObservation, ...)
- constants.py: Enums and protocol limits
- exceptions.py: Typed exceptions with error codes
- math.py: Integer-only output and counter arithmetic
- validators.py: Oracle and parameter validation
- time.py: Clock helpers
- logging.py: Structured JSON logging
"""

from core.constants import (
    COOLDOWN_SECONDS,
    MAX_SLIPPAGE_BPS,
    MAX_SWAP_AMOUNT,
    PRICE_UPPER_BOUND,
    SwapState,
    ThresholdCondition,
    TradingCondition,
)
from core.exceptions import (
    CheckError,
    ErrorCode,
    InputError,
    PriceValidationError,
    SwapGuardError,
    VenueError,
)
from core.logging import get_logger, setup_logging
from core.models import (
    AssetPair,
    PriceObservation,
    Rate,
    SwapOutcome,
    SwapRequest,
    TraderConfig,
)

__all__ = [
    # Constants
    "COOLDOWN_SECONDS",
    "MAX_SLIPPAGE_BPS",
    "MAX_SWAP_AMOUNT",
    "PRICE_UPPER_BOUND",
    "SwapState",
    "ThresholdCondition",
    "TradingCondition",
    # Exceptions
    "CheckError",
    "ErrorCode",
    "InputError",
    "PriceValidationError",
    "SwapGuardError",
    "VenueError",
    # Models
    "AssetPair",
    "PriceObservation",
    "Rate",
    "SwapOutcome",
    "SwapRequest",
    "TraderConfig",
    # Logging
    "get_logger",
    "setup_logging",
]
