# PATH: strategy/__init__.py
"""Strategy package for SWAPGUARD: check gates, pair policy, configuration."""

from strategy.gates import GateResult, classify_price
from strategy.pairs import AssetPairPolicy

__all__ = [
    "GateResult",
    "classify_price",
    "AssetPairPolicy",
]
