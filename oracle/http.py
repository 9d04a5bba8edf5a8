"""
oracle/http.py - HTTP price service adapter with failover.

Fetches GET {base_url}/price/{feed_id} and expects JSON:

    {"price": 4500000, "conf": 1000, "expo": -2, "publish_time": 1767225600}

Provides:
- Multiple endpoint failover
- Request timeout handling
- Latency tracking per endpoint
"""

import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from core.exceptions import OracleUnavailableError
from core.logging import get_logger
from core.models import PriceObservation

logger = get_logger(__name__)

REQUIRED_FIELDS = ("price", "conf", "publish_time")


@dataclass
class OracleStats:
    """Statistics for an oracle endpoint."""
    url: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None

    @property
    def avg_latency_ms(self) -> int:
        if self.successful_requests == 0:
            return 0
        return self.total_latency_ms // self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests


def parse_price_payload(payload: Any, feed_id: str) -> PriceObservation:
    """
    Parse a price service response body.

    Only shape is checked here; value validation belongs to the engine.

    Raises:
        OracleUnavailableError: If the payload is malformed
    """
    if not isinstance(payload, dict):
        raise OracleUnavailableError(
            f"Malformed price payload for {feed_id}",
            details={"feed_id": feed_id, "payload_type": type(payload).__name__},
        )

    missing = [name for name in REQUIRED_FIELDS if name not in payload]
    if missing:
        raise OracleUnavailableError(
            f"Price payload for {feed_id} missing fields: {missing}",
            details={"feed_id": feed_id, "missing": missing},
        )

    try:
        return PriceObservation(
            price=int(payload["price"]),
            confidence=int(payload["conf"]),
            observed_at=int(payload["publish_time"]),
            exponent=int(payload.get("expo", 0)),
            feed_id=feed_id,
        )
    except (TypeError, ValueError) as e:
        raise OracleUnavailableError(
            f"Non-integer field in price payload for {feed_id}: {e}",
            details={"feed_id": feed_id},
        ) from e


class HttpPriceOracle:
    """
    HTTP price oracle with failover.

    Tries endpoints in order until one returns a well-formed observation.
    """

    def __init__(
        self,
        base_urls: list[str] | str,
        timeout_seconds: float = 5.0,
        client: httpx.Client | None = None,
    ):
        if isinstance(base_urls, str):
            base_urls = [base_urls]
        self.base_urls = [url.rstrip("/") for url in base_urls if url]
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._owns_client = client is None
        self.stats: dict[str, OracleStats] = {
            url: OracleStats(url=url) for url in self.base_urls
        }

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(max_connections=10),
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client if we created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
        self._client = None

    def __enter__(self) -> "HttpPriceOracle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_price(self, feed_id: str) -> PriceObservation:
        """
        Fetch the latest observation for a feed.

        Raises:
            OracleUnavailableError: If all endpoints fail
        """
        if not self.base_urls:
            raise OracleUnavailableError(
                "No oracle endpoints configured",
                details={"feed_id": feed_id},
            )

        client = self._get_client()
        last_error: Exception | None = None

        for base_url in self.base_urls:
            stats = self.stats[base_url]
            stats.total_requests += 1
            url = f"{base_url}/price/{quote(feed_id, safe='')}"
            start_ms = int(time.time() * 1000)

            try:
                resp = client.get(url)
                resp.raise_for_status()
                observation = parse_price_payload(resp.json(), feed_id)
            except httpx.TimeoutException as e:
                latency_ms = int(time.time() * 1000) - start_ms
                stats.failed_requests += 1
                stats.last_error = f"Timeout after {latency_ms}ms"
                last_error = e
                logger.debug(f"Oracle timeout for {url}: {latency_ms}ms")
                continue
            except (httpx.HTTPError, ValueError, OracleUnavailableError) as e:
                stats.failed_requests += 1
                stats.last_error = str(e)
                last_error = e
                logger.debug(f"Oracle request failed for {url}: {e}")
                continue

            latency_ms = int(time.time() * 1000) - start_ms
            stats.successful_requests += 1
            stats.total_latency_ms += latency_ms
            logger.debug(
                "Oracle price fetched",
                extra={"context": {"feed_id": feed_id, "endpoint": base_url, "latency_ms": latency_ms}},
            )
            return observation

        logger.warning(
            "All oracle endpoints failed",
            extra={"context": {"feed_id": feed_id, "last_error": str(last_error)}},
        )
        raise OracleUnavailableError(
            f"All oracle endpoints failed for {feed_id}",
            details={
                "feed_id": feed_id,
                "endpoints_tried": len(self.base_urls),
                "last_error": str(last_error),
            },
        )
