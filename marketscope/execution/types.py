"""
Execution simulation types and configuration.
"""
from dataclasses import dataclass
from enum import Enum

from marketscope.config.settings import Config
from marketscope.models import Outcome, TradeSide

# Fill shortfalls below this are float noise from walking the levels
FILL_TOLERANCE = 1e-9


class DepthSource(str, Enum):
    """Where the simulated depth came from."""
    ORDERBOOK = "orderbook"
    SYNTHETIC = "synthetic"


@dataclass(frozen=True)
class ExecutionConfig:
    """Shape of the synthetic depth used when no live book is available."""
    synthetic_levels: int = 5
    tick_fraction: float = 0.02      # tick as a fraction of mid
    min_tick: float = 0.0001
    min_price: float = 0.0001
    base_size_floor: float = 1000.0
    liquidity_fraction: float = 0.08  # base level size as a fraction of market liquidity
    size_growth: float = 0.35         # each deeper level is this much larger than the first

    @classmethod
    def from_settings(cls, settings: Config) -> "ExecutionConfig":
        return cls(
            synthetic_levels=settings.synthetic_depth_levels,
            liquidity_fraction=settings.synthetic_liquidity_fraction,
            tick_fraction=settings.synthetic_tick_fraction,
            size_growth=settings.synthetic_size_growth,
            base_size_floor=settings.synthetic_base_size_floor,
            min_tick=settings.synthetic_min_tick,
            min_price=settings.synthetic_min_price,
        )


@dataclass(frozen=True)
class ExecutionEstimate:
    """Result from simulating a leg's fill against real or synthetic depth."""
    market: str
    outcome: Outcome
    side: TradeSide
    requested: float
    filled: float
    vwap: float
    mid: float
    slippage: float  # vwap - mid
    source: DepthSource

    @property
    def shortfall(self) -> float:
        """Shares that could not be filled."""
        return max(self.requested - self.filled, 0.0)

    @property
    def partial_fill(self) -> bool:
        """Check if this was a partial fill."""
        return self.shortfall > FILL_TOLERANCE

    @property
    def cost(self) -> float:
        """Cash value of the filled shares at the VWAP."""
        return self.vwap * self.filled
