# PATH: core/exceptions.py
"""
Typed exceptions for SWAPGUARD.

Every failure the engine can report is a subclass of SwapGuardError
carrying an ErrorCode, a details dict and the pipeline phase it came from.
"""

from enum import Enum
from typing import Optional

from core.constants import ErrorPhase


class ErrorCode(str, Enum):
    """Canonical error codes."""
    # Configuration
    INVALID_INPUT = "INVALID_INPUT"

    # Checks phase
    UNAUTHORIZED = "UNAUTHORIZED"
    SYSTEM_PAUSED = "SYSTEM_PAUSED"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_TOKEN_PAIR = "INVALID_TOKEN_PAIR"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    PRICE_THRESHOLD_NOT_MET = "PRICE_THRESHOLD_NOT_MET"

    # Oracle validation
    STALE_PRICE = "STALE_PRICE"
    FUTURE_PRICE = "FUTURE_PRICE"
    INVALID_PRICE = "INVALID_PRICE"
    PRICE_TOO_LARGE = "PRICE_TOO_LARGE"
    LOW_CONFIDENCE = "LOW_CONFIDENCE"
    ORACLE_UNAVAILABLE = "ORACLE_UNAVAILABLE"

    # Effects phase
    COUNTER_OVERFLOW = "COUNTER_OVERFLOW"

    # Venue (interaction phase)
    SLIPPAGE_EXCEEDED = "SLIPPAGE_EXCEEDED"
    INSUFFICIENT_LIQUIDITY = "INSUFFICIENT_LIQUIDITY"
    VENUE_UNAVAILABLE = "VENUE_UNAVAILABLE"

    # Store
    TRADER_NOT_FOUND = "TRADER_NOT_FOUND"
    ALREADY_INITIALIZED = "ALREADY_INITIALIZED"

    UNKNOWN = "UNKNOWN"


class SwapGuardError(Exception):
    """Base exception for SWAPGUARD."""

    phase: ErrorPhase = ErrorPhase.CHECKS

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "phase": self.phase.value,
            "message": self.message,
            "details": self.details,
        }


class InputError(SwapGuardError):
    """Configuration parameters rejected."""

    phase = ErrorPhase.CONFIG

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.INVALID_INPUT, details)


class CheckError(SwapGuardError):
    """A pre-execution check failed. Nothing was mutated."""
    pass


class PriceValidationError(CheckError):
    """Oracle observation failed validation."""
    pass


class OracleUnavailableError(SwapGuardError):
    """Oracle could not supply an observation."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.ORACLE_UNAVAILABLE, details)


class CounterOverflowError(SwapGuardError):
    """Swap counter would overflow."""

    phase = ErrorPhase.EFFECTS

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.COUNTER_OVERFLOW, details)


class VenueError(SwapGuardError):
    """
    Swap venue rejected or failed the swap.

    Raised after effects were committed; the engine marks this in
    details["effects_committed"].
    """

    phase = ErrorPhase.INTERACTION


class SlippageExceededError(VenueError):
    """Realized output would fall below the minimum output."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.SLIPPAGE_EXCEEDED, details)


class InsufficientLiquidityError(VenueError):
    """Venue cannot fill the requested size."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.INSUFFICIENT_LIQUIDITY, details)


class VenueUnavailableError(VenueError):
    """Venue unreachable or failed unexpectedly."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.VENUE_UNAVAILABLE, details)


class StoreError(SwapGuardError):
    """Trader configuration store lookup/creation failed."""

    phase = ErrorPhase.CONFIG
