"""
execution/rates.py - Expected-rate sources for min-output computation.

A rate source answers "how many destination units should one source unit
buy" for a request. The engine applies slippage tolerance on top.

- OracleRateSource: implied by the validated oracle price (default)
- FixedRateSource: configured per route, e.g. for paper runs and tests
"""

from typing import Dict, Optional, Protocol, Tuple

from core.exceptions import CheckError, ErrorCode
from core.math import price_to_rate
from core.models import AssetPair, PriceObservation, Rate, SwapRequest


class RateSource(Protocol):
    def rate_for(
        self,
        pair: AssetPair,
        request: SwapRequest,
        observation: PriceObservation,
    ) -> Rate:
        ...


class OracleRateSource:
    """
    Rate implied by the oracle price.

    The pair's feed quotes `quote` per `base`: base -> quote uses the price
    as is, quote -> base uses its inverse.
    """

    def rate_for(
        self,
        pair: AssetPair,
        request: SwapRequest,
        observation: PriceObservation,
    ) -> Rate:
        rate = price_to_rate(observation.price, observation.exponent)
        if pair.is_forward(request.source_asset):
            return rate
        return rate.inverse()


class FixedRateSource:
    """Configured rates keyed by (source, destination)."""

    def __init__(self, rates: Optional[Dict[Tuple[str, str], Rate]] = None):
        self._rates = dict(rates or {})

    def rate_for(
        self,
        pair: AssetPair,
        request: SwapRequest,
        observation: PriceObservation,
    ) -> Rate:
        route = (request.source_asset, request.destination_asset)
        rate = self._rates.get(route)
        if rate is None:
            raise CheckError(
                f"No configured rate for {route[0]}->{route[1]}",
                ErrorCode.INVALID_TOKEN_PAIR,
                {"source_asset": route[0], "destination_asset": route[1]},
            )
        return rate
