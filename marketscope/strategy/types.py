"""
Strategy construction types and configuration.
"""
from dataclasses import dataclass
from typing import Tuple

from marketscope.config.settings import Config
from marketscope.models import MarketMetadata


@dataclass(frozen=True)
class StrategyConfig:
    """Sizing, hedge-selection and projection settings."""
    default_correlation_weight: float = 0.5
    min_entry_price: float = 0.01

    # Hedge suggestions
    hedge_correlation_ceiling: float = -0.3   # correlations below this hedge the primary
    spread_correlation_floor: float = 0.7     # correlations above this can be spread-traded
    hedge_confidence: float = 0.6
    spread_trade_confidence: float = 0.8
    max_suggestions: int = 5

    # Projections
    ev_grid_step: float = 0.05
    time_decay_horizons: Tuple[int, ...] = (7, 30, 90, 180)

    @classmethod
    def from_settings(cls, settings: Config) -> "StrategyConfig":
        return cls(
            default_correlation_weight=settings.default_correlation_weight,
            min_entry_price=settings.min_entry_price,
            hedge_correlation_ceiling=settings.hedge_correlation_ceiling,
            spread_correlation_floor=settings.spread_trade_correlation_floor,
            hedge_confidence=settings.hedge_confidence,
            spread_trade_confidence=settings.spread_trade_confidence,
            max_suggestions=settings.max_suggestions,
            ev_grid_step=settings.ev_grid_step,
            time_decay_horizons=tuple(settings.time_decay_horizons),
        )


@dataclass(frozen=True)
class HedgeSuggestion:
    """A candidate market that hedges or pairs with the primary."""
    market: MarketMetadata
    correlation: float
    hedge_ratio: float
    rationale: str
    confidence: float

    @property
    def is_spread_trade(self) -> bool:
        return self.correlation > 0
