"""
tests/unit/test_oracle.py - Tests for price oracle adapters.

The HTTP adapter is exercised against httpx.MockTransport; no network.
"""

import httpx
import pytest

from core.exceptions import ErrorCode, OracleUnavailableError
from oracle import HttpPriceOracle, StaticPriceOracle, parse_price_payload

NOW = 1_767_225_600

PAYLOAD = {"price": 4_500_000, "conf": 1000, "expo": -2, "publish_time": NOW}


def mock_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


# =============================================================================
# STATIC ORACLE
# =============================================================================

class TestStaticPriceOracle:

    def test_serves_configured_price(self):
        oracle = StaticPriceOracle({"SOL/USD": (45000, 100, 0)}, clock=lambda: NOW)

        obs = oracle.get_price("SOL/USD")

        assert obs.price == 45000
        assert obs.confidence == 100
        assert obs.observed_at == NOW
        assert obs.feed_id == "SOL/USD"

    def test_fixed_observed_at(self):
        oracle = StaticPriceOracle({"SOL/USD": (45000, 100, 0)}, observed_at=NOW - 500)
        assert oracle.get_price("SOL/USD").observed_at == NOW - 500

    def test_unknown_feed(self):
        with pytest.raises(OracleUnavailableError) as exc_info:
            StaticPriceOracle().get_price("BTC/USD")
        assert exc_info.value.code == ErrorCode.ORACLE_UNAVAILABLE

    def test_set_and_remove(self):
        oracle = StaticPriceOracle(clock=lambda: NOW)
        oracle.set_price("BTC/USD", 60000, 10, -1)
        assert oracle.get_price("BTC/USD").exponent == -1

        oracle.remove_price("BTC/USD")
        with pytest.raises(OracleUnavailableError):
            oracle.get_price("BTC/USD")


# =============================================================================
# PAYLOAD PARSING
# =============================================================================

class TestParsePricePayload:

    def test_full_payload(self):
        obs = parse_price_payload(PAYLOAD, "SOL/USD")
        assert (obs.price, obs.confidence, obs.exponent, obs.observed_at) == (4_500_000, 1000, -2, NOW)

    def test_expo_optional(self):
        payload = {k: v for k, v in PAYLOAD.items() if k != "expo"}
        assert parse_price_payload(payload, "SOL/USD").exponent == 0

    def test_string_numbers_accepted(self):
        payload = {**PAYLOAD, "price": "4500000"}
        assert parse_price_payload(payload, "SOL/USD").price == 4_500_000

    def test_missing_field(self):
        with pytest.raises(OracleUnavailableError) as exc_info:
            parse_price_payload({"price": 1}, "SOL/USD")
        assert exc_info.value.details["missing"] == ["conf", "publish_time"]

    def test_non_mapping(self):
        with pytest.raises(OracleUnavailableError):
            parse_price_payload([1, 2, 3], "SOL/USD")

    def test_non_integer(self):
        with pytest.raises(OracleUnavailableError):
            parse_price_payload({**PAYLOAD, "conf": "wide"}, "SOL/USD")

    def test_values_not_validated_here(self):
        # negative price is the engine's problem
        obs = parse_price_payload({**PAYLOAD, "price": -1}, "SOL/USD")
        assert obs.price == -1


# =============================================================================
# HTTP ORACLE
# =============================================================================

class TestHttpPriceOracle:

    def test_fetch(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json=PAYLOAD)

        oracle = HttpPriceOracle("http://oracle.test/", client=mock_client(handler))
        obs = oracle.get_price("SOL/USD")

        assert obs.price == 4_500_000
        assert obs.feed_id == "SOL/USD"
        assert seen == ["http://oracle.test/price/SOL%2FUSD"]
        assert oracle.stats["http://oracle.test"].successful_requests == 1

    def test_failover_to_second_endpoint(self):
        def handler(request):
            if request.url.host == "primary.test":
                return httpx.Response(503)
            return httpx.Response(200, json=PAYLOAD)

        oracle = HttpPriceOracle(
            ["http://primary.test", "http://backup.test"],
            client=mock_client(handler),
        )

        assert oracle.get_price("SOL/USD").price == 4_500_000
        assert oracle.stats["http://primary.test"].failed_requests == 1
        assert oracle.stats["http://backup.test"].successful_requests == 1

    def test_all_endpoints_fail(self):
        oracle = HttpPriceOracle(
            ["http://a.test", "http://b.test"],
            client=mock_client(lambda request: httpx.Response(500)),
        )

        with pytest.raises(OracleUnavailableError) as exc_info:
            oracle.get_price("SOL/USD")
        assert exc_info.value.details["endpoints_tried"] == 2

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        oracle = HttpPriceOracle("http://oracle.test", client=mock_client(handler))

        with pytest.raises(OracleUnavailableError):
            oracle.get_price("SOL/USD")
        assert oracle.stats["http://oracle.test"].last_error.startswith("Timeout")

    def test_invalid_json(self):
        oracle = HttpPriceOracle(
            "http://oracle.test",
            client=mock_client(lambda request: httpx.Response(200, content=b"not json")),
        )
        with pytest.raises(OracleUnavailableError):
            oracle.get_price("SOL/USD")

    def test_malformed_payload(self):
        oracle = HttpPriceOracle(
            "http://oracle.test",
            client=mock_client(lambda request: httpx.Response(200, json={"price": 1})),
        )
        with pytest.raises(OracleUnavailableError):
            oracle.get_price("SOL/USD")

    def test_no_endpoints(self):
        with pytest.raises(OracleUnavailableError):
            HttpPriceOracle([]).get_price("SOL/USD")

    def test_context_manager_keeps_injected_client(self):
        client = mock_client(lambda request: httpx.Response(200, json=PAYLOAD))

        with HttpPriceOracle("http://oracle.test", client=client) as oracle:
            oracle.get_price("SOL/USD")

        assert not client.is_closed
        client.close()
