"""
strategy/config.py - Engine and trader configuration.

Builds the immutable asset-pair policy and the trader defaults from YAML.
Protocol limits (cooldown, staleness, bounds) are not configurable; see
core/constants.py.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from config import load_pairs, load_trader_defaults
from core.constants import ThresholdCondition
from core.models import AssetPair, Rate
from strategy.pairs import AssetPairPolicy


@dataclass
class TraderDefaults:
    """Defaults for a trader created from the CLI."""
    price_threshold: int = 40000
    swap_amount: int = 1_000_000
    slippage_bps: int = 200
    condition: ThresholdCondition = ThresholdCondition.ABOVE
    source_asset: str = "BTC"
    destination_asset: str = "USDC"


@dataclass
class OracleSettings:
    """Oracle wiring."""
    url: str = ""
    timeout_seconds: float = 5.0
    mock_price: int = 45000
    mock_confidence: int = 100
    mock_exponent: int = 0


@dataclass
class VenueSettings:
    """Paper venue wiring."""
    fee_bps: int = 30
    rates: dict[tuple[str, str], Rate] = field(default_factory=dict)
    liquidity: int = 10**15


@dataclass
class RunnerConfig:
    """Full runner configuration."""
    trader: TraderDefaults = field(default_factory=TraderDefaults)
    oracle: OracleSettings = field(default_factory=OracleSettings)
    venue: VenueSettings = field(default_factory=VenueSettings)
    log_level: str = "INFO"
    json_logs: bool = False


def parse_pairs(data: dict[str, Any]) -> AssetPairPolicy:
    """
    Build an AssetPairPolicy from parsed YAML.

    Expected shape:
        pairs:
          - {base: SOL, quote: USDC, price_feed: SOL/USD}
    """
    entries = data.get("pairs") or []
    if not isinstance(entries, list):
        raise ValueError("'pairs' must be a list")

    pairs = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"Pair entry must be a mapping with base and quote: {entry!r}")
        base = entry.get("base")
        quote = entry.get("quote")
        if not base or not quote:
            raise ValueError(f"Pair entry needs base and quote: {entry}")
        pairs.append(AssetPair(
            base=str(base),
            quote=str(quote),
            price_feed=str(entry.get("price_feed") or f"{base}/{quote}"),
        ))
    return AssetPairPolicy(pairs)


def load_pair_policy(config_path: Path | None = None) -> AssetPairPolicy:
    """
    Load the asset-pair allow-list.

    Args:
        config_path: Explicit YAML path (default: config/pairs.yaml or
            SWAPGUARD_PAIRS_FILE)
    """
    if config_path is None:
        return parse_pairs(load_pairs())

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return parse_pairs(data)


def _parse_rates(raw: dict[str, Any]) -> dict[tuple[str, str], Rate]:
    rates = {}
    for symbol, value in (raw or {}).items():
        source, _, destination = symbol.partition("/")
        if isinstance(value, (list, tuple)):
            numerator, denominator = int(value[0]), int(value[1])
        else:
            numerator, denominator = int(value), 1
        rates[(source, destination)] = Rate(numerator=numerator, denominator=denominator)
    return rates


def parse_runner_config(data: dict[str, Any]) -> RunnerConfig:
    """Build RunnerConfig from parsed YAML, falling back to dataclass defaults."""
    trader_data = data.get("trader", {})
    pair_data = data.get("pair", {})
    oracle_data = data.get("oracle", {})
    venue_data = data.get("venue", {})
    logging_data = data.get("logging", {})

    defaults = TraderDefaults()
    trader = TraderDefaults(
        price_threshold=int(trader_data.get("price_threshold", defaults.price_threshold)),
        swap_amount=int(trader_data.get("swap_amount", defaults.swap_amount)),
        slippage_bps=int(trader_data.get("slippage_bps", defaults.slippage_bps)),
        condition=ThresholdCondition(trader_data.get("condition", defaults.condition.value)),
        source_asset=pair_data.get("source", defaults.source_asset),
        destination_asset=pair_data.get("destination", defaults.destination_asset),
    )

    oracle_defaults = OracleSettings()
    oracle = OracleSettings(
        url=oracle_data.get("url") or "",
        timeout_seconds=float(oracle_data.get("timeout_seconds", oracle_defaults.timeout_seconds)),
        mock_price=int(oracle_data.get("mock_price", oracle_defaults.mock_price)),
        mock_confidence=int(oracle_data.get("mock_confidence", oracle_defaults.mock_confidence)),
        mock_exponent=int(oracle_data.get("mock_exponent", oracle_defaults.mock_exponent)),
    )

    venue = VenueSettings(
        fee_bps=int(venue_data.get("fee_bps", VenueSettings.fee_bps)),
        rates=_parse_rates(venue_data.get("rates", {})),
        liquidity=int(venue_data.get("liquidity", VenueSettings.liquidity)),
    )

    return RunnerConfig(
        trader=trader,
        oracle=oracle,
        venue=venue,
        log_level=str(logging_data.get("level", "INFO")),
        json_logs=bool(logging_data.get("json", False)),
    )


def load_runner_config(config_path: Path | None = None) -> RunnerConfig:
    """
    Load runner configuration from YAML.

    Missing file = dataclass defaults.
    """
    if config_path is None:
        try:
            data = load_trader_defaults()
        except FileNotFoundError:
            return RunnerConfig()
        return parse_runner_config(data)

    if not config_path.exists():
        return RunnerConfig()

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return parse_runner_config(data)
