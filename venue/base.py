"""
venue/base.py - External collaborator contracts.

The engine depends only on these protocols, never on a venue's
internal representation.
"""

from typing import Protocol

from core.models import VenueFill


class SwapVenue(Protocol):
    """
    Swap venue contract.

    swap(source, destination, amount, min_output, caller) -> VenueFill
    Raises SlippageExceededError, InsufficientLiquidityError or
    VenueUnavailableError.
    """

    def swap(
        self,
        source_asset: str,
        destination_asset: str,
        amount: int,
        min_output: int,
        caller: str,
    ) -> VenueFill:
        ...


class TokenLedger(Protocol):
    """Token ledger contract (read side only is used by the engine)."""

    def balance_of(self, account: str, asset: str) -> int:
        ...
