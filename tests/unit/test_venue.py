"""
tests/unit/test_venue.py - Paper venue and in-memory ledger tests.
"""

import unittest

from core.exceptions import (
    ErrorCode,
    InsufficientLiquidityError,
    SlippageExceededError,
    VenueUnavailableError,
)
from core.models import Rate
from venue import VENUE_ACCOUNT, InMemoryLedger, PaperSwapVenue
from venue.ledger import InsufficientFundsError


class TestInMemoryLedger(unittest.TestCase):

    def setUp(self):
        self.ledger = InMemoryLedger()
        self.ledger.credit("alice", "SOL", 100)

    def test_unknown_balance_is_zero(self):
        self.assertEqual(self.ledger.balance_of("bob", "SOL"), 0)

    def test_transfer(self):
        self.ledger.transfer("alice", "bob", "SOL", 40)

        self.assertEqual(self.ledger.balance_of("alice", "SOL"), 60)
        self.assertEqual(self.ledger.balance_of("bob", "SOL"), 40)

    def test_overdraft(self):
        with self.assertRaises(InsufficientFundsError):
            self.ledger.transfer("alice", "bob", "SOL", 101)
        self.assertEqual(self.ledger.balance_of("alice", "SOL"), 100)

    def test_negative_amounts(self):
        with self.assertRaises(ValueError):
            self.ledger.credit("alice", "SOL", -1)
        with self.assertRaises(ValueError):
            self.ledger.transfer("alice", "bob", "SOL", -1)

    def test_snapshot(self):
        self.ledger.credit("alice", "USDC", 5)
        self.assertEqual(self.ledger.snapshot(), {"alice": {"SOL": 100, "USDC": 5}})


class TestPaperSwapVenue(unittest.TestCase):

    def setUp(self):
        self.ledger = InMemoryLedger()
        self.ledger.credit(VENUE_ACCOUNT, "USDC", 10**12)
        self.ledger.credit("alice", "SOL", 1_000)
        self.venue = PaperSwapVenue(
            self.ledger,
            rates={("SOL", "USDC"): Rate(150)},
            fee_bps=30,
        )

    def test_quote_applies_fee(self):
        # 1000 * 150 = 150000, minus 0.3%
        self.assertEqual(self.venue.quote("SOL", "USDC", 1000), 149_550)

    def test_swap_settles_both_legs(self):
        fill = self.venue.swap("SOL", "USDC", 1000, 149_000, "alice")

        self.assertEqual(fill.realized_output, 149_550)
        self.assertEqual(fill.tx_reference, "paper_000001")
        self.assertEqual(self.ledger.balance_of("alice", "SOL"), 0)
        self.assertEqual(self.ledger.balance_of("alice", "USDC"), 149_550)
        self.assertEqual(self.ledger.balance_of(VENUE_ACCOUNT, "SOL"), 1000)

    def test_tx_references_increase(self):
        first = self.venue.swap("SOL", "USDC", 10, 0, "alice")
        second = self.venue.swap("SOL", "USDC", 10, 0, "alice")
        self.assertNotEqual(first.tx_reference, second.tx_reference)

    def test_slippage(self):
        with self.assertRaises(SlippageExceededError) as ctx:
            self.venue.swap("SOL", "USDC", 1000, 150_000, "alice")

        self.assertEqual(ctx.exception.code, ErrorCode.SLIPPAGE_EXCEEDED)
        self.assertEqual(self.ledger.balance_of("alice", "SOL"), 1000)

    def test_no_route(self):
        with self.assertRaises(VenueUnavailableError):
            self.venue.swap("USDC", "SOL", 10, 0, "alice")

    def test_offline(self):
        self.venue.available = False
        with self.assertRaises(VenueUnavailableError):
            self.venue.swap("SOL", "USDC", 10, 0, "alice")

    def test_insufficient_liquidity(self):
        venue = PaperSwapVenue(self.ledger, rates={("SOL", "USDC"): Rate(150)}, account="empty")
        with self.assertRaises(InsufficientLiquidityError):
            venue.swap("SOL", "USDC", 10, 0, "alice")

    def test_caller_without_funds(self):
        with self.assertRaises(VenueUnavailableError):
            self.venue.swap("SOL", "USDC", 10, 0, "bob")
        self.assertEqual(self.ledger.balance_of("bob", "USDC"), 0)

    def test_invalid_fee(self):
        with self.assertRaises(ValueError):
            PaperSwapVenue(self.ledger, fee_bps=10_000)


if __name__ == "__main__":
    unittest.main()
