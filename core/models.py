# PATH: core/models.py
"""
Core data models for SWAPGUARD.

TRADER CONFIG CONTRACT
======================
One TraderConfig per authority. Mutated only by the execution engine:
  - total_swaps never decreases (checked increment, no wrap)
  - last_swap_timestamp only moves forward (0 = never executed)
  - slippage_tolerance_bps <= MAX_SLIPPAGE_BPS
  - authority is fixed at creation

All amounts and prices are integers in base units. Prices are the raw
feed mantissa; the real price is price * 10**exponent.
======================
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from core.constants import ThresholdCondition


@dataclass
class TraderConfig:
    """Persisted per-trader state."""
    authority: str
    price_threshold: int
    default_swap_amount: int
    slippage_tolerance_bps: int
    condition: ThresholdCondition = ThresholdCondition.ABOVE
    total_swaps: int = 0
    last_swap_timestamp: int = 0
    paused: bool = False

    @property
    def has_executed(self) -> bool:
        return self.last_swap_timestamp != 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["condition"] = self.condition.value
        return data


@dataclass(frozen=True)
class SwapRequest:
    """Single execution request. Not persisted."""
    source_asset: str
    destination_asset: str
    amount: int
    caller: str
    current_time: int


@dataclass(frozen=True)
class PriceObservation:
    """Price reported by an oracle. Untrusted until validated."""
    price: int
    confidence: int
    observed_at: int
    exponent: int = 0
    feed_id: Optional[str] = None

    def age(self, current_time: int) -> int:
        return current_time - self.observed_at


@dataclass(frozen=True)
class AssetPair:
    """
    Allow-listed unordered asset pair.

    price_feed quotes `quote` per one `base`.
    """
    base: str
    quote: str
    price_feed: str = ""

    @property
    def assets(self) -> FrozenSet[str]:
        return frozenset((self.base, self.quote))

    @property
    def symbol(self) -> str:
        return f"{self.base}/{self.quote}"

    def is_forward(self, source_asset: str) -> bool:
        """True when swapping base -> quote."""
        return source_asset == self.base


@dataclass(frozen=True)
class Rate:
    """Exchange rate as an exact fraction: destination units per source unit."""
    numerator: int
    denominator: int = 1

    def __post_init__(self):
        if self.denominator <= 0:
            raise ValueError(f"Rate denominator must be positive: {self.denominator}")
        if self.numerator < 0:
            raise ValueError(f"Rate numerator must be non-negative: {self.numerator}")

    def inverse(self) -> "Rate":
        return Rate(numerator=self.denominator, denominator=self.numerator)

    def apply(self, amount: int) -> int:
        """amount * rate, rounded down."""
        return amount * self.numerator // self.denominator

    def __str__(self):
        if self.denominator == 1:
            return str(self.numerator)
        return f"{self.numerator}/{self.denominator}"


@dataclass(frozen=True)
class VenueFill:
    """What a swap venue reports back for a completed swap."""
    realized_output: int
    tx_reference: Optional[str] = None


@dataclass(frozen=True)
class SwapOutcome:
    """Result of a successful execution."""
    realized_output: int
    tx_reference: str
    min_output: int
    expected_output: int
    total_swaps: int
    executed_at: int
    attempt_id: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "realized_output": self.realized_output,
            "tx_reference": self.tx_reference,
            "min_output": self.min_output,
            "expected_output": self.expected_output,
            "total_swaps": self.total_swaps,
            "executed_at": self.executed_at,
            "attempt_id": self.attempt_id,
            "metadata": self.metadata,
        }
