# PATH: tests/conftest.py
"""
Pytest configuration and fixtures for SWAPGUARD tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.models import PriceObservation, Rate, SwapRequest  # noqa: E402
from execution.engine import SwapExecutionEngine  # noqa: E402
from strategy.pairs import AssetPairPolicy  # noqa: E402
from venue import VENUE_ACCOUNT, InMemoryLedger, PaperSwapVenue  # noqa: E402

AUTHORITY = "trader-1"
NOW = 1_767_225_600


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# =============================================================================
# SHARED FIXTURES
# =============================================================================

@pytest.fixture
def pair_policy():
    return AssetPairPolicy.from_symbols("SOL/USDC", "BTC/USDC")


@pytest.fixture
def ledger():
    ledger = InMemoryLedger()
    ledger.credit(VENUE_ACCOUNT, "USDC", 10**15)
    ledger.credit(VENUE_ACCOUNT, "SOL", 10**15)
    ledger.credit(AUTHORITY, "SOL", 10**12)
    ledger.credit(AUTHORITY, "USDC", 10**12)
    return ledger


@pytest.fixture
def venue(ledger):
    return PaperSwapVenue(
        ledger,
        rates={
            ("SOL", "USDC"): Rate(45000),
            ("USDC", "SOL"): Rate(1, 45000),
        },
        fee_bps=0,
    )


@pytest.fixture
def engine(pair_policy, venue):
    return SwapExecutionEngine(pair_policy, venue)


@pytest.fixture
def config(engine):
    return engine.initialize_trader(AUTHORITY, 40000, 1_000_000, 200)


def _request(amount=1_000_000, caller=AUTHORITY, now=NOW, source="SOL", destination="USDC"):
    return SwapRequest(
        source_asset=source,
        destination_asset=destination,
        amount=amount,
        caller=caller,
        current_time=now,
    )


def _observation(price=45000, confidence=100, observed_at=NOW, exponent=0):
    return PriceObservation(
        price=price,
        confidence=confidence,
        observed_at=observed_at,
        exponent=exponent,
    )


@pytest.fixture
def make_request():
    return _request


@pytest.fixture
def make_observation():
    return _observation
