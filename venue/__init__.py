"""
venue/ - Swap venue and token ledger collaborators.

Modules:
- base: SwapVenue / TokenLedger contracts
- ledger: in-memory token ledger
- paper: paper swap venue settling against the in-memory ledger
"""

from venue.base import SwapVenue, TokenLedger
from venue.ledger import InMemoryLedger
from venue.paper import PaperSwapVenue, VENUE_ACCOUNT

__all__ = [
    "SwapVenue",
    "TokenLedger",
    "InMemoryLedger",
    "PaperSwapVenue",
    "VENUE_ACCOUNT",
]
