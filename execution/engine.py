"""
SWAPGUARD conditional swap execution engine.

EXECUTION CONTRACT:
===================

execute_trade(config, request, observation) → SwapOutcome

Phase 1 - stage (checks, pure, first failure aborts):
  1. authority          UNAUTHORIZED
  2. pause flag         SYSTEM_PAUSED
  3. cooldown           RATE_LIMITED
  4. pair allow-list    INVALID_TOKEN_PAIR
  5. amount bound       INVALID_AMOUNT
     stored slippage    INVALID_INPUT
     caller balance     INSUFFICIENT_BALANCE   (only with a ledger)
  6. oracle validation  STALE_PRICE / FUTURE_PRICE / INVALID_PRICE /
                        PRICE_TOO_LARGE / LOW_CONFIDENCE
     price trigger      PRICE_THRESHOLD_NOT_MET
  then rate + min_output are staged (min_output == 0 → INVALID_AMOUNT)

Phase 2 - commit (effects):
  total_swaps += 1 (checked, COUNTER_OVERFLOW), last_swap_timestamp = now

Phase 3 - interact:
  venue.swap(source, destination, amount, min_output, caller)
  Venue failures are raised with details["effects_committed"] = True and
  are NOT rolled back: a failed attempt still spends the cooldown window.

===================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, NamedTuple, Optional

from core.constants import ThresholdCondition, TradingCondition, SwapState
from core.exceptions import (
    CheckError,
    CounterOverflowError,
    ErrorCode,
    InputError,
    SlippageExceededError,
    VenueError,
    VenueUnavailableError,
)
from core.logging import get_logger, log_rejection, log_swap
from core.math import (
    calculate_expected_output,
    calculate_min_output,
    calculate_shortfall_bps,
    checked_increment,
)
from core.models import (
    AssetPair,
    PriceObservation,
    Rate,
    SwapOutcome,
    SwapRequest,
    TraderConfig,
)
from core.validators import (
    validate_band,
    validate_condition,
    validate_threshold,
    validate_trader_params,
)
from execution.rates import OracleRateSource, RateSource
from execution.state_machine import InvalidTransitionError, SwapAttempt
from strategy.gates import (
    GateResult,
    gate_amount,
    gate_authority,
    gate_balance,
    gate_band,
    gate_cooldown,
    gate_not_paused,
    gate_pair,
    gate_price_observation,
    gate_slippage_config,
    gate_threshold,
)
from strategy.pairs import AssetPairPolicy
from venue.base import SwapVenue, TokenLedger

logger = get_logger(__name__)


# =============================================================================
# PRICE TRIGGERS
# =============================================================================

class ThresholdTrigger(NamedTuple):
    """Single-threshold trigger stored on the trader config."""
    threshold: int
    condition: ThresholdCondition = ThresholdCondition.ABOVE

    def validate(self) -> None:
        validate_threshold(self.threshold)

    def evaluate(self, price: int) -> GateResult:
        return gate_threshold(price, self.threshold, self.condition)


class BandTrigger(NamedTuple):
    """SHORT / MID / LONG band trigger supplied per call."""
    short_threshold: int
    long_threshold: int
    target: TradingCondition

    def validate(self) -> None:
        validate_band(self.short_threshold, self.long_threshold)

    def evaluate(self, price: int) -> GateResult:
        return gate_band(price, self.short_threshold, self.long_threshold, self.target)


# =============================================================================
# STAGED SWAP
# =============================================================================

@dataclass
class StagedSwap:
    """A request that passed all checks, carrying what the later phases need."""
    authority: str
    request: SwapRequest
    pair: AssetPair
    observation: PriceObservation
    rate: Rate
    expected_output: int
    min_output: int
    seen_last_swap_timestamp: int
    attempt: SwapAttempt = field(default_factory=SwapAttempt)
    total_swaps: Optional[int] = None

    @property
    def attempt_id(self) -> str:
        return self.attempt.attempt_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attempt_id": self.attempt_id,
            "authority": self.authority,
            "source_asset": self.request.source_asset,
            "destination_asset": self.request.destination_asset,
            "amount": self.request.amount,
            "price": self.observation.price,
            "rate": str(self.rate),
            "expected_output": self.expected_output,
            "min_output": self.min_output,
            "state": self.attempt.state.value,
        }


# =============================================================================
# ENGINE
# =============================================================================

class SwapExecutionEngine:
    """
    Conditional swap execution engine.

    Owns no trader state itself: configs are passed in and mutated only in
    the commit phase. Callers must serialize calls per config (see
    execution/store.py).
    """

    def __init__(
        self,
        pair_policy: AssetPairPolicy,
        venue: SwapVenue,
        rate_source: Optional[RateSource] = None,
        ledger: Optional[TokenLedger] = None,
    ):
        self.pair_policy = pair_policy
        self.venue = venue
        self.rate_source = rate_source or OracleRateSource()
        self.ledger = ledger

    # -------------------------------------------------------------------------
    # Trader configuration
    # -------------------------------------------------------------------------

    def initialize_trader(
        self,
        authority: str,
        price_threshold: int,
        swap_amount: int,
        slippage_bps: int,
        condition: ThresholdCondition = ThresholdCondition.ABOVE,
    ) -> TraderConfig:
        """
        Create a trader config.

        Raises:
            InputError: threshold outside (0, 10**10), amount outside
                (0, MAX_SWAP_AMOUNT] or slippage above 1000 bps
        """
        if not authority:
            raise InputError("Authority must be a non-empty identity")
        validate_trader_params(price_threshold, swap_amount, slippage_bps)

        config = TraderConfig(
            authority=authority,
            price_threshold=price_threshold,
            default_swap_amount=swap_amount,
            slippage_tolerance_bps=slippage_bps,
            condition=validate_condition(condition, ThresholdCondition),
        )
        logger.info(
            "Trader initialized",
            extra={"context": {
                "authority": authority,
                "price_threshold": price_threshold,
                "swap_amount": swap_amount,
                "slippage_bps": slippage_bps,
                "condition": config.condition.value,
            }},
        )
        return config

    def set_paused(self, config: TraderConfig, caller: str, paused: bool) -> TraderConfig:
        """Set or clear the emergency stop. Authority only."""
        gate_authority(config, caller).raise_for_failure()
        config.paused = bool(paused)
        logger.warning(
            "Trader paused" if config.paused else "Trader resumed",
            extra={"context": {"authority": config.authority}},
        )
        return config

    def update_trader(
        self,
        config: TraderConfig,
        caller: str,
        price_threshold: Optional[int] = None,
        swap_amount: Optional[int] = None,
        slippage_bps: Optional[int] = None,
        condition: Optional[ThresholdCondition] = None,
    ) -> TraderConfig:
        """
        Update trigger and sizing parameters. Authority only.

        All values are validated before any is assigned.
        """
        gate_authority(config, caller).raise_for_failure()
        validate_trader_params(price_threshold, swap_amount, slippage_bps)
        new_condition = validate_condition(condition, ThresholdCondition) if condition is not None else None

        if price_threshold is not None:
            config.price_threshold = price_threshold
        if swap_amount is not None:
            config.default_swap_amount = swap_amount
        if slippage_bps is not None:
            config.slippage_tolerance_bps = slippage_bps
        if new_condition is not None:
            config.condition = new_condition

        logger.info("Trader updated", extra={"context": config.to_dict()})
        return config

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def execute_trade(
        self,
        config: TraderConfig,
        request: SwapRequest,
        observation: PriceObservation,
    ) -> SwapOutcome:
        """Run checks, effects and the venue call for the config's own trigger."""
        staged = self.stage(config, request, observation)
        self.commit(config, staged)
        return self.interact(staged)

    def execute_condition_trade(
        self,
        config: TraderConfig,
        request: SwapRequest,
        observation: PriceObservation,
        short_threshold: int,
        long_threshold: int,
        target: TradingCondition,
    ) -> SwapOutcome:
        """Same pipeline as execute_trade, gated on a price band instead."""
        trigger = BandTrigger(
            short_threshold, long_threshold, validate_condition(target, TradingCondition)
        )
        staged = self.stage(config, request, observation, trigger=trigger)
        self.commit(config, staged)
        return self.interact(staged)

    def precheck(
        self,
        config: TraderConfig,
        request: SwapRequest,
        trigger: Optional[Any] = None,
    ) -> None:
        """
        Run the checks that precede oracle validation (1-5).

        Lets callers skip the oracle read for requests that would be
        rejected anyway. stage() runs these again.
        """
        trigger = trigger or self._default_trigger(config)
        try:
            self._run_preconditions(config, request, trigger)
        except (CheckError, InputError) as e:
            self._log_rejection(config, request, e)
            raise

    def stage(
        self,
        config: TraderConfig,
        request: SwapRequest,
        observation: PriceObservation,
        trigger: Optional[Any] = None,
    ) -> StagedSwap:
        """
        Checks phase. Never mutates config.

        Raises:
            CheckError / PriceValidationError / InputError: first failed check
        """
        trigger = trigger or self._default_trigger(config)
        attempt = SwapAttempt()

        try:
            self._run_preconditions(config, request, trigger)
            gate_price_observation(observation, request.current_time).raise_for_failure()
            trigger.evaluate(observation.price).raise_for_failure()

            pair = self.pair_policy.lookup(request.source_asset, request.destination_asset)
            rate = self.rate_source.rate_for(pair, request, observation)
            expected_output = calculate_expected_output(request.amount, rate)
            min_output = calculate_min_output(request.amount, rate, config.slippage_tolerance_bps)
            if min_output <= 0:
                raise CheckError(
                    f"Amount {request.amount} too small to guarantee any output",
                    ErrorCode.INVALID_AMOUNT,
                    {"amount": request.amount, "rate": str(rate)},
                )
        except (CheckError, InputError) as e:
            attempt.fail(e.code.value, reason=e.message)
            self._log_rejection(config, request, e, attempt_id=attempt.attempt_id)
            raise

        attempt.transition_to(
            SwapState.CHECKED,
            metadata={"min_output": min_output, "price": observation.price},
        )
        return StagedSwap(
            authority=config.authority,
            request=request,
            pair=pair,
            observation=observation,
            rate=rate,
            expected_output=expected_output,
            min_output=min_output,
            seen_last_swap_timestamp=config.last_swap_timestamp,
            attempt=attempt,
        )

    def commit(self, config: TraderConfig, staged: StagedSwap) -> None:
        """
        Effects phase: advance counter and timestamp before the venue call.

        Raises:
            InvalidTransitionError: attempt is not in CHECKED
            CheckError: config changed since staging
            CounterOverflowError: counter at its ceiling (nothing written)
        """
        if staged.attempt.state != SwapState.CHECKED:
            raise InvalidTransitionError(
                f"Cannot commit attempt {staged.attempt_id} in state {staged.attempt.state.value}"
            )
        if config.authority != staged.authority:
            raise CheckError(
                "Staged swap belongs to another trader",
                ErrorCode.UNAUTHORIZED,
                {"staged_authority": staged.authority},
            )
        if config.last_swap_timestamp != staged.seen_last_swap_timestamp:
            staged.attempt.fail(ErrorCode.RATE_LIMITED.value, reason="config changed since staging")
            raise CheckError(
                "Another execution committed since staging",
                ErrorCode.RATE_LIMITED,
                {"last_swap_timestamp": config.last_swap_timestamp},
            )

        try:
            total_swaps = checked_increment(config.total_swaps)
        except CounterOverflowError as e:
            staged.attempt.fail(e.code.value)
            logger.error(
                "Swap counter overflow",
                extra={"context": {"authority": config.authority, "total_swaps": config.total_swaps}},
            )
            raise

        config.total_swaps = total_swaps
        config.last_swap_timestamp = staged.request.current_time
        staged.total_swaps = total_swaps
        staged.attempt.transition_to(SwapState.COMMITTED)

        log_swap(
            logger,
            staged.attempt_id,
            SwapState.COMMITTED.value,
            authority=config.authority,
            total_swaps=total_swaps,
            min_output=staged.min_output,
        )

    def interact(self, staged: StagedSwap) -> SwapOutcome:
        """
        Interaction phase: call the venue with the staged minimum output.

        Raises:
            InvalidTransitionError: effects were not committed first
            VenueError: venue failure (effects stay committed)
        """
        staged.attempt.transition_to(SwapState.SUBMITTED)
        request = staged.request

        try:
            fill = self.venue.swap(
                request.source_asset,
                request.destination_asset,
                request.amount,
                staged.min_output,
                request.caller,
            )
        except VenueError as e:
            self._record_venue_failure(staged, e)
            raise
        except Exception as e:
            error = VenueUnavailableError(f"Venue call failed: {e}")
            self._record_venue_failure(staged, error)
            raise error from e

        if fill.realized_output < staged.min_output:
            error = SlippageExceededError(
                f"Realized output {fill.realized_output} below minimum {staged.min_output}",
                details={"realized_output": fill.realized_output},
            )
            self._record_venue_failure(staged, error)
            raise error

        tx_reference = fill.tx_reference or staged.attempt_id
        staged.attempt.transition_to(SwapState.CONFIRMED, metadata={"tx_reference": tx_reference})
        log_swap(
            logger,
            staged.attempt_id,
            SwapState.CONFIRMED.value,
            tx_reference=tx_reference,
            realized_output=fill.realized_output,
            min_output=staged.min_output,
        )

        return SwapOutcome(
            realized_output=fill.realized_output,
            tx_reference=tx_reference,
            min_output=staged.min_output,
            expected_output=staged.expected_output,
            total_swaps=staged.total_swaps or 0,
            executed_at=request.current_time,
            attempt_id=staged.attempt_id,
            metadata={
                "pair": staged.pair.symbol,
                "price": staged.observation.price,
                "rate": str(staged.rate),
                "shortfall_bps": calculate_shortfall_bps(staged.expected_output, fill.realized_output),
            },
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _default_trigger(config: TraderConfig) -> ThresholdTrigger:
        return ThresholdTrigger(config.price_threshold, config.condition)

    def _run_preconditions(self, config: TraderConfig, request: SwapRequest, trigger: Any) -> None:
        """Checks 1-5 in order, then trigger parameter validation."""
        checks = (
            lambda: gate_authority(config, request.caller),
            lambda: gate_not_paused(config),
            lambda: gate_cooldown(config.last_swap_timestamp, request.current_time),
            lambda: gate_pair(self.pair_policy, request.source_asset, request.destination_asset),
            lambda: gate_amount(request.amount),
            lambda: gate_slippage_config(config.slippage_tolerance_bps),
            lambda: self._gate_balance(request),
        )
        for check in checks:
            check().raise_for_failure()
        trigger.validate()

    def _log_rejection(
        self,
        config: TraderConfig,
        request: SwapRequest,
        error: CheckError | InputError,
        attempt_id: Optional[str] = None,
    ) -> None:
        log_rejection(
            logger,
            authority=config.authority,
            error_code=error.code.value,
            message=error.message,
            attempt_id=attempt_id,
            caller=request.caller,
        )

    def _gate_balance(self, request: SwapRequest) -> GateResult:
        if self.ledger is None:
            return GateResult(passed=True)
        balance = self.ledger.balance_of(request.caller, request.source_asset)
        return gate_balance(balance, request.amount)

    def _record_venue_failure(self, staged: StagedSwap, error: VenueError) -> None:
        error.details.update({
            "attempt_id": staged.attempt_id,
            "min_output": staged.min_output,
            "effects_committed": True,
        })
        staged.attempt.fail(error.code.value, reason=error.message)
        logger.warning(
            f"Venue failure: [{error.code.value}] {error.message}",
            extra={"context": {
                "authority": staged.authority,
                "attempt_id": staged.attempt_id,
                "error_code": error.code.value,
                "total_swaps": staged.total_swaps,
            }},
        )
