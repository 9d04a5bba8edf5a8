"""
oracle/ - Price oracle adapters.

Modules:
- base: PriceOracle protocol and the static (mock) oracle
- http: HTTP price service adapter (httpx)

Adapters only fetch and parse. Staleness, bounds and confidence are
validated by the engine on every execution.
"""

from oracle.base import PriceOracle, StaticPriceOracle
from oracle.http import HttpPriceOracle, parse_price_payload

__all__ = [
    "PriceOracle",
    "StaticPriceOracle",
    "HttpPriceOracle",
    "parse_price_payload",
]
