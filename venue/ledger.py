"""
venue/ledger.py - In-memory token ledger.

Backs the paper venue and tests. Balances are integers in base units.
"""

import threading
from collections import defaultdict
from typing import Dict, Tuple


class InsufficientFundsError(Exception):
    """Transfer exceeds the sender's balance."""
    pass


class InMemoryLedger:
    """Thread-safe account/asset balance table."""

    def __init__(self):
        self._balances: Dict[Tuple[str, str], int] = defaultdict(int)
        self._lock = threading.Lock()

    def balance_of(self, account: str, asset: str) -> int:
        with self._lock:
            return self._balances.get((account, asset), 0)

    def credit(self, account: str, asset: str, amount: int) -> None:
        """Mint amount to account (setup only)."""
        if amount < 0:
            raise ValueError(f"Credit amount must be non-negative: {amount}")
        with self._lock:
            self._balances[(account, asset)] += amount

    def transfer(self, sender: str, receiver: str, asset: str, amount: int) -> None:
        """
        Move amount of asset from sender to receiver.

        Raises:
            InsufficientFundsError: If sender balance < amount
        """
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        with self._lock:
            available = self._balances.get((sender, asset), 0)
            if available < amount:
                raise InsufficientFundsError(
                    f"{sender} holds {available} {asset}, needs {amount}"
                )
            self._balances[(sender, asset)] = available - amount
            self._balances[(receiver, asset)] += amount

    def snapshot(self) -> Dict[str, Dict[str, int]]:
        """Balances grouped by account."""
        with self._lock:
            result: Dict[str, Dict[str, int]] = {}
            for (account, asset), amount in self._balances.items():
                result.setdefault(account, {})[asset] = amount
            return result
