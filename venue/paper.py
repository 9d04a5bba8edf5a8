"""
venue/paper.py - Paper swap venue.

Fills swaps at a configured rate minus a flat fee, settling both legs on an
InMemoryLedger. Used by the CLI and tests in place of a real venue.

Failure modes mirror a real venue:
  - VENUE_UNAVAILABLE: venue switched offline or no rate for the route
  - INSUFFICIENT_LIQUIDITY: venue cannot pay out the output amount
  - SLIPPAGE_EXCEEDED: output after fee below min_output
"""

import itertools
import threading
from typing import Dict, Optional, Tuple

from core.constants import BPS_DENOMINATOR
from core.exceptions import (
    InsufficientLiquidityError,
    SlippageExceededError,
    VenueUnavailableError,
)
from core.logging import get_logger
from core.models import Rate, VenueFill
from venue.ledger import InMemoryLedger, InsufficientFundsError

logger = get_logger(__name__)

VENUE_ACCOUNT = "paper-venue"


class PaperSwapVenue:
    """Simulated venue settling against an in-memory ledger."""

    def __init__(
        self,
        ledger: InMemoryLedger,
        rates: Optional[Dict[Tuple[str, str], Rate]] = None,
        fee_bps: int = 30,
        account: str = VENUE_ACCOUNT,
    ):
        if not 0 <= fee_bps < BPS_DENOMINATOR:
            raise ValueError(f"fee_bps out of range: {fee_bps}")
        self.ledger = ledger
        self.rates: Dict[Tuple[str, str], Rate] = dict(rates or {})
        self.fee_bps = fee_bps
        self.account = account
        self.available = True
        self._tx_counter = itertools.count(1)
        self._lock = threading.Lock()

    def set_rate(self, source_asset: str, destination_asset: str, rate: Rate) -> None:
        self.rates[(source_asset, destination_asset)] = rate

    def quote(self, source_asset: str, destination_asset: str, amount: int) -> int:
        """Output the venue would pay for amount, after fee."""
        rate = self.rates.get((source_asset, destination_asset))
        if rate is None:
            raise VenueUnavailableError(
                f"No route {source_asset}->{destination_asset}",
                details={"source_asset": source_asset, "destination_asset": destination_asset},
            )
        gross = rate.apply(amount)
        return gross * (BPS_DENOMINATOR - self.fee_bps) // BPS_DENOMINATOR

    def swap(
        self,
        source_asset: str,
        destination_asset: str,
        amount: int,
        min_output: int,
        caller: str,
    ) -> VenueFill:
        if not self.available:
            raise VenueUnavailableError("Paper venue is offline")

        output = self.quote(source_asset, destination_asset, amount)
        details = {
            "source_asset": source_asset,
            "destination_asset": destination_asset,
            "amount": amount,
            "output": output,
            "min_output": min_output,
        }

        if output < min_output:
            raise SlippageExceededError(
                f"Output {output} below minimum {min_output}",
                details=details,
            )

        with self._lock:
            if self.ledger.balance_of(self.account, destination_asset) < output:
                raise InsufficientLiquidityError(
                    f"Venue cannot pay {output} {destination_asset}",
                    details=details,
                )

            try:
                self.ledger.transfer(caller, self.account, source_asset, amount)
            except InsufficientFundsError as e:
                raise VenueUnavailableError(f"Settlement failed: {e}", details=details) from e
            self.ledger.transfer(self.account, caller, destination_asset, output)

            tx_reference = f"paper_{next(self._tx_counter):06d}"
        logger.debug(
            "Paper swap filled",
            extra={"context": {**details, "tx_reference": tx_reference}},
        )
        return VenueFill(realized_output=output, tx_reference=tx_reference)
