"""
execution/service.py - Trader service.

Binds the engine to a config store and a price oracle. Every call that
touches a config holds that config's lock from the oracle read through
the venue call, so two executions for the same trader can never both pass
the cooldown check.
"""

from typing import Callable, Optional

from core.constants import ThresholdCondition, TradingCondition
from core.exceptions import OracleUnavailableError
from core.logging import get_logger
from core.models import SwapOutcome, SwapRequest, TraderConfig
from core.time import now_seconds
from core.validators import validate_condition
from execution.engine import BandTrigger, SwapExecutionEngine
from execution.store import TraderConfigStore
from oracle.base import PriceOracle

logger = get_logger(__name__)


class TraderService:
    """Store-backed, oracle-fed front end for SwapExecutionEngine."""

    def __init__(
        self,
        engine: SwapExecutionEngine,
        store: TraderConfigStore,
        oracle: PriceOracle,
        clock: Callable[[], int] = now_seconds,
    ):
        self.engine = engine
        self.store = store
        self.oracle = oracle
        self.clock = clock

    def initialize(
        self,
        authority: str,
        price_threshold: int,
        swap_amount: int,
        slippage_bps: int,
        condition: ThresholdCondition = ThresholdCondition.ABOVE,
    ) -> TraderConfig:
        config = self.engine.initialize_trader(
            authority, price_threshold, swap_amount, slippage_bps, condition
        )
        return self.store.create(config)

    def set_paused(self, authority: str, caller: str, paused: bool) -> TraderConfig:
        with self.store.locked(authority) as config:
            return self.engine.set_paused(config, caller, paused)

    def update(self, authority: str, caller: str, **params) -> TraderConfig:
        with self.store.locked(authority) as config:
            return self.engine.update_trader(config, caller, **params)

    def execute(
        self,
        authority: str,
        caller: str,
        source_asset: str,
        destination_asset: str,
        amount: Optional[int] = None,
        now: Optional[int] = None,
    ) -> SwapOutcome:
        """
        Execute a threshold-triggered swap for authority's config.

        amount defaults to the config's default_swap_amount.

        Raises:
            StoreError: unknown authority
            OracleUnavailableError: no observation for the pair's feed
            SwapGuardError: any engine failure
        """
        with self.store.locked(authority) as config:
            request = self._build_request(config, caller, source_asset, destination_asset, amount, now)
            self.engine.precheck(config, request)
            observation = self._fetch_price(config, request)
            return self.engine.execute_trade(config, request, observation)

    def execute_condition(
        self,
        authority: str,
        caller: str,
        source_asset: str,
        destination_asset: str,
        short_threshold: int,
        long_threshold: int,
        target: TradingCondition,
        amount: Optional[int] = None,
        now: Optional[int] = None,
    ) -> SwapOutcome:
        """Execute a band-triggered swap for authority's config."""
        with self.store.locked(authority) as config:
            request = self._build_request(config, caller, source_asset, destination_asset, amount, now)
            trigger = BandTrigger(
                short_threshold, long_threshold, validate_condition(target, TradingCondition)
            )
            self.engine.precheck(config, request, trigger=trigger)
            observation = self._fetch_price(config, request)
            return self.engine.execute_condition_trade(
                config, request, observation, short_threshold, long_threshold, target
            )

    def _build_request(
        self,
        config: TraderConfig,
        caller: str,
        source_asset: str,
        destination_asset: str,
        amount: Optional[int],
        now: Optional[int],
    ) -> SwapRequest:
        return SwapRequest(
            source_asset=source_asset,
            destination_asset=destination_asset,
            amount=config.default_swap_amount if amount is None else amount,
            caller=caller,
            current_time=self.clock() if now is None else now,
        )

    def _fetch_price(self, config: TraderConfig, request: SwapRequest):
        # precheck guarantees the pair is allow-listed
        pair = self.engine.pair_policy.lookup(request.source_asset, request.destination_asset)
        try:
            return self.oracle.get_price(pair.price_feed)
        except OracleUnavailableError as e:
            logger.warning(
                f"Oracle unavailable: {e.message}",
                extra={"context": {"authority": config.authority, "feed_id": pair.price_feed}},
            )
            raise
