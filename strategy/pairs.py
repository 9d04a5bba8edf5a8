"""
strategy/pairs.py - Asset-pair allow-list.

The allow-list is an immutable value built once at startup (usually from
config/pairs.yaml) and injected into the engine. There is no runtime
registration: adding a pair means changing configuration.
"""

from typing import Dict, FrozenSet, Iterable, Iterator, Optional

from core.models import AssetPair


class AssetPairPolicy:
    """
    Immutable set of permitted unordered asset pairs.

    (A, B) and (B, A) are both allowed when {A, B} is listed.
    """

    __slots__ = ("_pairs",)

    def __init__(self, pairs: Iterable[AssetPair]):
        index: Dict[FrozenSet[str], AssetPair] = {}
        for pair in pairs:
            if pair.base == pair.quote:
                raise ValueError(f"Pair must have two distinct assets: {pair.symbol}")
            if pair.assets in index:
                raise ValueError(f"Duplicate pair in allow-list: {pair.symbol}")
            index[pair.assets] = pair
        self._pairs = index

    def __setattr__(self, name, value):
        if hasattr(self, "_pairs"):
            raise AttributeError("AssetPairPolicy is immutable")
        super().__setattr__(name, value)

    def lookup(self, source_asset: str, destination_asset: str) -> Optional[AssetPair]:
        """Return the listed pair for these assets, in either direction."""
        if source_asset == destination_asset:
            return None
        return self._pairs.get(frozenset((source_asset, destination_asset)))

    def is_allowed(self, source_asset: str, destination_asset: str) -> bool:
        return self.lookup(source_asset, destination_asset) is not None

    def __contains__(self, assets) -> bool:
        source_asset, destination_asset = assets
        return self.is_allowed(source_asset, destination_asset)

    def __iter__(self) -> Iterator[AssetPair]:
        return iter(self._pairs.values())

    def __len__(self) -> int:
        return len(self._pairs)

    def symbols(self) -> list[str]:
        return sorted(pair.symbol for pair in self._pairs.values())

    def __repr__(self):
        return f"AssetPairPolicy({self.symbols()})"

    @classmethod
    def from_symbols(cls, *symbols: str) -> "AssetPairPolicy":
        """
        Build from "BASE/QUOTE" strings; the feed defaults to the symbol.

        Example:
            AssetPairPolicy.from_symbols("SOL/USDC", "BTC/USDC")
        """
        pairs = []
        for symbol in symbols:
            base, _, quote = symbol.partition("/")
            if not base or not quote:
                raise ValueError(f"Invalid pair symbol: {symbol!r}")
            pairs.append(AssetPair(base=base, quote=quote, price_feed=symbol))
        return cls(pairs)
