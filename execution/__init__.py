# PATH: execution/__init__.py
"""
SWAPGUARD execution layer.

This module contains the execution layer components:
- state_machine: Swap attempt state machine with transitions
- rates: Expected-rate sources (oracle-implied, fixed)
- engine: Checks → effects → interaction pipeline
- store: Trader config store with per-authority locks
- service: Store- and oracle-backed front end
"""

from execution.state_machine import (
    SwapAttempt,
    StateTransition,
    InvalidTransitionError,
    VALID_TRANSITIONS,
)
from execution.rates import (
    RateSource,
    OracleRateSource,
    FixedRateSource,
)
from execution.engine import (
    BandTrigger,
    StagedSwap,
    SwapExecutionEngine,
    ThresholdTrigger,
)
from execution.store import TraderConfigStore
from execution.service import TraderService

__all__ = [
    # State machine
    "SwapAttempt",
    "StateTransition",
    "InvalidTransitionError",
    "VALID_TRANSITIONS",
    # Rates
    "RateSource",
    "OracleRateSource",
    "FixedRateSource",
    # Engine
    "BandTrigger",
    "StagedSwap",
    "SwapExecutionEngine",
    "ThresholdTrigger",
    # Store / service
    "TraderConfigStore",
    "TraderService",
]
