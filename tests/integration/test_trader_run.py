# PATH: tests/integration/test_trader_run.py
"""
Integration tests for the run_trader CLI.

Runs the full stack (config → static oracle → engine → paper venue) in
process with a simulated clock; no network, no sleeping.
"""

import logging
import unittest

import pytest
from click.testing import CliRunner

from core.logging import clear_global_context
from run_trader import SimulatedClock, apply_overrides, main
from strategy.config import RunnerConfig

ENV = {"SWAPGUARD_ORACLE_URL": "", "SWAPGUARD_LOG_LEVEL": "WARNING"}


def _close_all_handlers():
    for handler in logging.root.handlers[:]:
        handler.close()
        logging.root.removeHandler(handler)


@pytest.mark.integration
class TestRunTraderCli(unittest.TestCase):

    def setUp(self):
        self.runner = CliRunner()

    def tearDown(self):
        _close_all_handlers()
        clear_global_context()

    def invoke(self, *args):
        return self.runner.invoke(main, list(args), env=ENV)

    def test_single_execution(self):
        result = self.invoke("--iterations", "1")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("SWAPGUARD TRADER SUMMARY", result.output)
        self.assertIn("Executed: 1", result.output)
        self.assertIn("Total swaps recorded: 1", result.output)
        self.assertIn("Slippage tolerance: 2.00%", result.output)
        # 1_000_000 BTC units at 45000, minus 30 bps venue fee
        self.assertIn("Balance USDC: 44865000000", result.output)

    def test_cooldown_respected_between_attempts(self):
        result = self.invoke("--iterations", "3", "--step-seconds", "30")

        self.assertEqual(result.exit_code, 0, result.output)
        # t=0 ok, t=30 limited, t=60 ok
        self.assertIn("Executed: 2", result.output)
        self.assertIn("RATE_LIMITED", result.output)
        self.assertIn("Total swaps recorded: 2", result.output)

    def test_spaced_attempts_all_execute(self):
        result = self.invoke("--iterations", "3", "--step-seconds", "60")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Executed: 3", result.output)

    def test_threshold_not_met(self):
        result = self.invoke("--iterations", "1", "--mock-price", "35000")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Executed: 0", result.output)
        self.assertIn("PRICE_THRESHOLD_NOT_MET", result.output)
        self.assertIn("Total swaps recorded: 0", result.output)

    def test_below_condition(self):
        result = self.invoke(
            "--iterations", "1", "--mock-price", "35000", "--condition", "BELOW"
        )
        self.assertIn("Executed: 1", result.output)

    def test_unlisted_pair(self):
        result = self.invoke("--iterations", "1", "--pair", "DOGE/USDC")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("INVALID_TOKEN_PAIR", result.output)

    def test_invalid_slippage_fails_startup(self):
        result = self.invoke("--slippage-bps", "1001")

        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("Startup failed", result.output)

    def test_malformed_pair_option(self):
        result = self.invoke("--pair", "BTCUSDC")

        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("SOURCE/DESTINATION", result.output)

    def test_malformed_pairs_file(self):
        with self.runner.isolated_filesystem():
            with open("pairs.yaml", "w", encoding="utf-8") as f:
                f.write("pairs:\n  - BTC/USDC\n")
            result = self.invoke("--pairs", "pairs.yaml")

        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("Startup failed", result.output)
        self.assertIsInstance(result.exception, SystemExit)


class TestCliHelpers(unittest.TestCase):

    def test_simulated_clock(self):
        clock = SimulatedClock(100, 60)
        self.assertEqual(clock(), 100)
        clock.tick()
        self.assertEqual(clock(), 160)

    def test_apply_overrides_keeps_unset_values(self):
        runner = apply_overrides(RunnerConfig(), amount=5, mock_price=None)

        self.assertEqual(runner.trader.swap_amount, 5)
        self.assertEqual(runner.trader.price_threshold, 40000)
        self.assertEqual(runner.oracle.mock_price, 45000)

    def test_apply_overrides_pair(self):
        runner = apply_overrides(RunnerConfig(), pair="SOL/USDC")
        self.assertEqual(runner.trader.source_asset, "SOL")
        self.assertEqual(runner.trader.destination_asset, "USDC")


if __name__ == "__main__":
    unittest.main()
