#!/usr/bin/env python3
"""
run_trader.py - CLI entrypoint for a conditional swap trader.

Wires the engine to a price oracle (static mock or HTTP) and a paper venue,
then executes the configured swap on an interval. Rejections are expected
(cooldown, threshold not met) and are counted, not fatal.

Usage:
    python run_trader.py --iterations 5 --interval 61
    python run_trader.py --oracle-url http://localhost:8080 --log-level DEBUG
    python run_trader.py --iterations 3 --step-seconds 60   # simulated clock
"""

import signal
import sys
import time
from collections import Counter
from dataclasses import replace
from pathlib import Path
from typing import Callable

import click

from config import get_setting
from core.constants import ThresholdCondition
from core.exceptions import SwapGuardError
from core.logging import get_logger, set_global_context, setup_logging
from core.math import bps_to_decimal
from core.models import SwapOutcome
from core.time import now_seconds
from execution.engine import SwapExecutionEngine
from execution.service import TraderService
from execution.store import TraderConfigStore
from oracle import HttpPriceOracle, StaticPriceOracle
from strategy.config import RunnerConfig, load_pair_policy, load_runner_config
from venue import VENUE_ACCOUNT, InMemoryLedger, PaperSwapVenue

logger = get_logger("swapguard.trader")

# Graceful shutdown flag
_shutdown_requested = False


def handle_shutdown(signum: int, frame: object) -> None:
    """Handle shutdown signals."""
    global _shutdown_requested
    _shutdown_requested = True
    logger.info("Shutdown requested", extra={"context": {"signal": signum}})


class TradingSession:
    """Counters for one CLI run."""

    def __init__(self):
        self.started_at = now_seconds()
        self.attempts = 0
        self.executed = 0
        self.total_output = 0
        self.rejections: Counter = Counter()
        self.failures: Counter = Counter()

    def record_outcome(self, outcome: SwapOutcome) -> None:
        self.attempts += 1
        self.executed += 1
        self.total_output += outcome.realized_output

    def record_error(self, error: SwapGuardError) -> None:
        self.attempts += 1
        if error.details.get("effects_committed"):
            self.failures[error.code.value] += 1
        else:
            self.rejections[error.code.value] += 1

    def get_summary(self) -> dict:
        return {
            "elapsed_seconds": now_seconds() - self.started_at,
            "attempts": self.attempts,
            "executed": self.executed,
            "total_output": self.total_output,
            "rejections": dict(self.rejections),
            "failures": dict(self.failures),
        }


class SimulatedClock:
    """Clock advancing by a fixed step per tick instead of sleeping."""

    def __init__(self, start: int, step_seconds: int):
        self.current = start
        self.step_seconds = step_seconds

    def __call__(self) -> int:
        return self.current

    def tick(self) -> None:
        self.current += self.step_seconds


def apply_overrides(runner: RunnerConfig, **overrides) -> RunnerConfig:
    """Apply CLI overrides (None = keep config value)."""
    trader_changes = {}
    pair = overrides.get("pair")
    if pair:
        source, _, destination = pair.partition("/")
        if not source or not destination:
            raise ValueError(f"Pair must look like SOURCE/DESTINATION: {pair!r}")
        trader_changes.update(source_asset=source, destination_asset=destination)
    if overrides.get("threshold") is not None:
        trader_changes["price_threshold"] = overrides["threshold"]
    if overrides.get("condition") is not None:
        trader_changes["condition"] = ThresholdCondition(overrides["condition"])
    if overrides.get("amount") is not None:
        trader_changes["swap_amount"] = overrides["amount"]
    if overrides.get("slippage_bps") is not None:
        trader_changes["slippage_bps"] = overrides["slippage_bps"]

    oracle_changes = {}
    if overrides.get("mock_price") is not None:
        oracle_changes["mock_price"] = overrides["mock_price"]
    if overrides.get("mock_confidence") is not None:
        oracle_changes["mock_confidence"] = overrides["mock_confidence"]

    return replace(
        runner,
        trader=replace(runner.trader, **trader_changes),
        oracle=replace(runner.oracle, **oracle_changes),
    )


def build_service(
    runner: RunnerConfig,
    pairs_file: Path | None,
    oracle_url: str,
    clock: Callable[[], int],
    authority: str,
) -> tuple[TraderService, InMemoryLedger]:
    """Assemble ledger, venue, oracle, engine and store."""
    policy = load_pair_policy(pairs_file)
    trader = runner.trader

    ledger = InMemoryLedger()
    for destination in sorted({dst for _, dst in runner.venue.rates}):
        ledger.credit(VENUE_ACCOUNT, destination, runner.venue.liquidity)
    ledger.credit(authority, trader.source_asset, trader.swap_amount * 1000)

    venue = PaperSwapVenue(ledger, rates=runner.venue.rates, fee_bps=runner.venue.fee_bps)

    if oracle_url:
        oracle = HttpPriceOracle(oracle_url, timeout_seconds=runner.oracle.timeout_seconds)
    else:
        pair = policy.lookup(trader.source_asset, trader.destination_asset)
        oracle = StaticPriceOracle(clock=clock)
        if pair is not None:
            oracle.set_price(
                pair.price_feed,
                runner.oracle.mock_price,
                runner.oracle.mock_confidence,
                runner.oracle.mock_exponent,
            )

    engine = SwapExecutionEngine(policy, venue, ledger=ledger)
    service = TraderService(engine, TraderConfigStore(), oracle, clock=clock)
    service.initialize(
        authority,
        trader.price_threshold,
        trader.swap_amount,
        trader.slippage_bps,
        trader.condition,
    )
    return service, ledger


def run_iterations(
    service: TraderService,
    session: TradingSession,
    runner: RunnerConfig,
    authority: str,
    iterations: int,
    interval: float,
    sim_clock: SimulatedClock | None,
) -> None:
    """Execute the configured swap up to `iterations` times (0 = until stopped)."""
    trader = runner.trader
    count = 0

    while not _shutdown_requested:
        if iterations and count >= iterations:
            break
        count += 1

        try:
            outcome = service.execute(
                authority,
                authority,
                trader.source_asset,
                trader.destination_asset,
            )
        except SwapGuardError as e:
            session.record_error(e)
            click.echo(f"[{count}] {e}")
        else:
            session.record_outcome(outcome)
            click.echo(
                f"[{count}] swapped {trader.swap_amount} {trader.source_asset} -> "
                f"{outcome.realized_output} {trader.destination_asset} "
                f"(min {outcome.min_output}, tx {outcome.tx_reference})"
            )

        if iterations and count >= iterations:
            break
        if sim_clock is not None:
            sim_clock.tick()
        elif interval > 0 and not _shutdown_requested:
            time.sleep(interval)


@click.command()
@click.option(
    "--config",
    "-c",
    "config_file",
    default=None,
    type=click.Path(path_type=Path),
    help="Trader YAML (default: config/trader.yaml or SWAPGUARD_TRADER_FILE)",
)
@click.option(
    "--pairs",
    "pairs_file",
    default=None,
    type=click.Path(exists=True, path_type=Path),
    help="Pair allow-list YAML (default: config/pairs.yaml or SWAPGUARD_PAIRS_FILE)",
)
@click.option(
    "--pair",
    "-p",
    default=None,
    help="Swap direction as SOURCE/DESTINATION, e.g. BTC/USDC",
)
@click.option(
    "--threshold",
    default=None,
    type=int,
    help="Price threshold (raw feed units)",
)
@click.option(
    "--condition",
    default=None,
    type=click.Choice(["ABOVE", "BELOW"]),
    help="Trigger when price is at/above or at/below the threshold",
)
@click.option(
    "--amount",
    default=None,
    type=int,
    help="Swap amount in source base units",
)
@click.option(
    "--slippage-bps",
    default=None,
    type=int,
    help="Slippage tolerance in basis points (max 1000)",
)
@click.option(
    "--mock-price",
    default=None,
    type=int,
    help="Static oracle price",
)
@click.option(
    "--mock-confidence",
    default=None,
    type=int,
    help="Static oracle confidence",
)
@click.option(
    "--authority",
    "-a",
    default="paper-trader",
    help="Trader authority identity",
)
@click.option(
    "--iterations",
    "-n",
    default=1,
    type=int,
    help="Execution attempts (0 = until interrupted)",
)
@click.option(
    "--interval",
    "-i",
    default=61.0,
    type=float,
    help="Seconds between attempts",
)
@click.option(
    "--step-seconds",
    default=None,
    type=int,
    help="Use a simulated clock advancing this many seconds per attempt",
)
@click.option(
    "--oracle-url",
    default=None,
    help="HTTP oracle base URL (default: SWAPGUARD_ORACLE_URL, else static mock)",
)
@click.option(
    "--log-level",
    "-l",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=False,
    help="Use JSON log format (also enabled by logging.json in config)",
)
def main(
    config_file: Path | None,
    pairs_file: Path | None,
    pair: str | None,
    threshold: int | None,
    condition: str | None,
    amount: int | None,
    slippage_bps: int | None,
    mock_price: int | None,
    mock_confidence: int | None,
    authority: str,
    iterations: int,
    interval: float,
    step_seconds: int | None,
    oracle_url: str | None,
    log_level: str | None,
    json_logs: bool,
) -> None:
    """
    SWAPGUARD conditional swap trader.

    Executes the configured swap against a paper venue whenever the
    price trigger holds.
    """
    try:
        runner = apply_overrides(
            load_runner_config(config_file),
            pair=pair,
            threshold=threshold,
            condition=condition,
            amount=amount,
            slippage_bps=slippage_bps,
            mock_price=mock_price,
            mock_confidence=mock_confidence,
        )
    except (ValueError, OSError) as e:
        raise click.ClickException(f"Invalid trader config: {e}")

    setup_logging(
        level=log_level or get_setting("SWAPGUARD_LOG_LEVEL", runner.log_level),
        json_output=json_logs or runner.json_logs,
    )
    set_global_context(service="swapguard-trader", authority=authority)

    signal.signal(signal.SIGINT, handle_shutdown)
    signal.signal(signal.SIGTERM, handle_shutdown)

    sim_clock = SimulatedClock(now_seconds(), step_seconds) if step_seconds else None
    clock = sim_clock or now_seconds
    oracle_url = oracle_url or get_setting("SWAPGUARD_ORACLE_URL", runner.oracle.url) or ""

    try:
        service, ledger = build_service(runner, pairs_file, oracle_url, clock, authority)
    except (SwapGuardError, ValueError, OSError) as e:
        raise click.ClickException(f"Startup failed: {e}")

    session = TradingSession()
    logger.info(
        "Starting SWAPGUARD trader",
        extra={
            "context": {
                "pair": f"{runner.trader.source_asset}/{runner.trader.destination_asset}",
                "iterations": iterations,
                "interval_seconds": interval,
                "oracle": oracle_url or "static",
            }
        },
    )

    try:
        run_iterations(service, session, runner, authority, iterations, interval, sim_clock)
    except KeyboardInterrupt:
        logger.info("Trader interrupted")
    except Exception as e:
        logger.error(
            f"Trader error: {e}",
            extra={"context": {"error": str(e)}},
            exc_info=True,
        )
        sys.exit(1)
    finally:
        close = getattr(service.oracle, "close", None)
        if close is not None:
            close()

    summary = session.get_summary()
    config = service.store.snapshot(authority)
    logger.info("Trader stopped", extra={"context": summary})

    click.echo("\n" + "=" * 60)
    click.echo("SWAPGUARD TRADER SUMMARY")
    click.echo("=" * 60)
    click.echo(f"Attempts: {summary['attempts']}")
    click.echo(f"Executed: {summary['executed']}")
    click.echo(f"Rejected: {sum(session.rejections.values())} {summary['rejections']}")
    click.echo(f"Failed: {sum(session.failures.values())} {summary['failures']}")
    click.echo(f"Total swaps recorded: {config['total_swaps']}")
    click.echo(f"Slippage tolerance: {bps_to_decimal(config['slippage_tolerance_bps']):.2%}")
    click.echo(
        f"Balance {runner.trader.destination_asset}: "
        f"{ledger.balance_of(authority, runner.trader.destination_asset)}"
    )
    click.echo("=" * 60)


if __name__ == "__main__":
    main()
