"""
oracle/base.py - Price oracle contract and static oracle.
"""

from typing import Callable, Dict, Optional, Protocol

from core.exceptions import OracleUnavailableError
from core.logging import get_logger
from core.models import PriceObservation
from core.time import now_seconds

logger = get_logger(__name__)


class PriceOracle(Protocol):
    """
    Price oracle contract.

    get_price(feed_id) -> PriceObservation
    Raises OracleUnavailableError when no observation can be produced.
    """

    def get_price(self, feed_id: str) -> PriceObservation:
        ...


class StaticPriceOracle:
    """
    Oracle serving fixed prices (mock feed).

    Each feed maps to (price, confidence, exponent). The observation is
    stamped with the clock at read time unless a fixed observed_at is set.
    """

    def __init__(
        self,
        prices: Optional[Dict[str, tuple[int, int, int]]] = None,
        observed_at: Optional[int] = None,
        clock: Callable[[], int] = now_seconds,
    ):
        self._prices: Dict[str, tuple[int, int, int]] = dict(prices or {})
        self._observed_at = observed_at
        self._clock = clock

    def set_price(self, feed_id: str, price: int, confidence: int = 0, exponent: int = 0) -> None:
        self._prices[feed_id] = (price, confidence, exponent)

    def remove_price(self, feed_id: str) -> None:
        self._prices.pop(feed_id, None)

    def get_price(self, feed_id: str) -> PriceObservation:
        if feed_id not in self._prices:
            raise OracleUnavailableError(
                f"No price for feed {feed_id}",
                details={"feed_id": feed_id},
            )

        price, confidence, exponent = self._prices[feed_id]
        observed_at = self._observed_at if self._observed_at is not None else self._clock()

        logger.debug(
            "Static price served",
            extra={"context": {"feed_id": feed_id, "price": price, "observed_at": observed_at}},
        )
        return PriceObservation(
            price=price,
            confidence=confidence,
            observed_at=observed_at,
            exponent=exponent,
            feed_id=feed_id,
        )
