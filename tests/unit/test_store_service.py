"""
tests/unit/test_store_service.py - Trader store and service tests.

Includes the concurrency check: parallel executions for one trader must
serialize so that only one passes the cooldown.
"""

import threading
import time

import pytest

from core.constants import TradingCondition
from core.exceptions import CheckError, ErrorCode, InputError, OracleUnavailableError, StoreError
from core.models import TraderConfig
from execution.service import TraderService
from execution.store import TraderConfigStore
from oracle import StaticPriceOracle

AUTHORITY = "trader-1"
NOW = 1_767_225_600


def make_config(authority=AUTHORITY):
    return TraderConfig(
        authority=authority,
        price_threshold=40000,
        default_swap_amount=1_000_000,
        slippage_tolerance_bps=200,
    )


# =============================================================================
# STORE
# =============================================================================

class TestTraderConfigStore:

    def test_create_and_get(self):
        store = TraderConfigStore()
        config = store.create(make_config())

        assert store.get(AUTHORITY) is config
        assert AUTHORITY in store
        assert len(store) == 1

    def test_duplicate_authority(self):
        store = TraderConfigStore()
        store.create(make_config())

        with pytest.raises(StoreError) as exc_info:
            store.create(make_config())
        assert exc_info.value.code == ErrorCode.ALREADY_INITIALIZED

    def test_missing_authority(self):
        with pytest.raises(StoreError) as exc_info:
            TraderConfigStore().get("nobody")
        assert exc_info.value.code == ErrorCode.TRADER_NOT_FOUND

    def test_snapshot_is_a_copy(self):
        store = TraderConfigStore()
        store.create(make_config())

        snapshot = store.snapshot(AUTHORITY)
        snapshot["total_swaps"] = 99

        assert store.get(AUTHORITY).total_swaps == 0
        assert snapshot["condition"] == "ABOVE"

    def test_authorities_sorted(self):
        store = TraderConfigStore()
        store.create(make_config("b"))
        store.create(make_config("a"))
        assert store.authorities() == ["a", "b"]

    def test_locked_serializes(self):
        store = TraderConfigStore()
        store.create(make_config())
        order = []

        def worker(name):
            with store.locked(AUTHORITY):
                order.append(f"{name}-in")
                time.sleep(0.02)
                order.append(f"{name}-out")

        threads = [threading.Thread(target=worker, args=(n,)) for n in ("a", "b")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # No interleaving: each enter is followed by its own exit
        assert order[0].split("-")[0] == order[1].split("-")[0]
        assert order[2].split("-")[0] == order[3].split("-")[0]


# =============================================================================
# SERVICE
# =============================================================================

@pytest.fixture
def oracle():
    return StaticPriceOracle({"SOL/USDC": (45000, 100, 0)}, clock=lambda: NOW)


@pytest.fixture
def service(engine, oracle):
    service = TraderService(engine, TraderConfigStore(), oracle, clock=lambda: NOW)
    service.initialize(AUTHORITY, 40000, 1_000_000, 200)
    return service


class TestTraderService:

    def test_execute_uses_default_amount(self, service):
        outcome = service.execute(AUTHORITY, AUTHORITY, "SOL", "USDC")

        assert outcome.min_output == 44_100_000_000
        assert service.store.get(AUTHORITY).total_swaps == 1

    def test_execute_with_explicit_amount_and_time(self, service, oracle):
        oracle._clock = lambda: NOW + 500
        outcome = service.execute(AUTHORITY, AUTHORITY, "SOL", "USDC", amount=10, now=NOW + 500)

        assert outcome.expected_output == 450_000
        assert outcome.executed_at == NOW + 500

    def test_unknown_trader(self, service):
        with pytest.raises(StoreError):
            service.execute("nobody", "nobody", "SOL", "USDC")

    def test_initialize_twice(self, service):
        with pytest.raises(StoreError):
            service.initialize(AUTHORITY, 40000, 1_000_000, 200)

    def test_oracle_unavailable(self, service, oracle):
        oracle.remove_price("SOL/USDC")

        with pytest.raises(OracleUnavailableError):
            service.execute(AUTHORITY, AUTHORITY, "SOL", "USDC")
        assert service.store.get(AUTHORITY).total_swaps == 0

    def test_rejected_before_oracle_read(self, service, oracle):
        oracle.remove_price("SOL/USDC")

        # unauthorized wins even though the oracle is down
        with pytest.raises(CheckError) as exc_info:
            service.execute(AUTHORITY, "mallory", "SOL", "USDC")
        assert exc_info.value.code == ErrorCode.UNAUTHORIZED

    def test_unlisted_pair_never_reads_oracle(self, service):
        with pytest.raises(CheckError) as exc_info:
            service.execute(AUTHORITY, AUTHORITY, "ETH", "USDC")
        assert exc_info.value.code == ErrorCode.INVALID_TOKEN_PAIR

    def test_pause_and_update(self, service):
        service.set_paused(AUTHORITY, AUTHORITY, True)
        with pytest.raises(CheckError) as exc_info:
            service.execute(AUTHORITY, AUTHORITY, "SOL", "USDC")
        assert exc_info.value.code == ErrorCode.SYSTEM_PAUSED

        service.set_paused(AUTHORITY, AUTHORITY, False)
        service.update(AUTHORITY, AUTHORITY, price_threshold=50000)
        with pytest.raises(CheckError) as exc_info:
            service.execute(AUTHORITY, AUTHORITY, "SOL", "USDC")
        assert exc_info.value.code == ErrorCode.PRICE_THRESHOLD_NOT_MET

    def test_execute_condition(self, service):
        outcome = service.execute_condition(
            AUTHORITY, AUTHORITY, "SOL", "USDC", 40000, 50000, TradingCondition.MID
        )
        assert outcome.total_swaps == 1

    def test_execute_condition_unknown_target(self, service):
        with pytest.raises(InputError):
            service.execute_condition(AUTHORITY, AUTHORITY, "SOL", "USDC", 40000, 50000, "SIDEWAYS")
        assert service.store.snapshot(AUTHORITY)["total_swaps"] == 0

    def test_concurrent_executions_serialize(self, service):
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            try:
                service.execute(AUTHORITY, AUTHORITY, "SOL", "USDC")
                results.append("ok")
            except CheckError as e:
                results.append(e.code)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count("ok") == 1
        assert results.count(ErrorCode.RATE_LIMITED) == 7
        assert service.store.get(AUTHORITY).total_swaps == 1

    def test_independent_traders(self, service):
        service.initialize("trader-2", 40000, 1_000_000, 200)
        service.engine.venue.ledger.credit("trader-2", "SOL", 10**9)

        service.execute(AUTHORITY, AUTHORITY, "SOL", "USDC")
        service.execute("trader-2", "trader-2", "SOL", "USDC")

        assert service.store.get(AUTHORITY).total_swaps == 1
        assert service.store.get("trader-2").total_swaps == 1
