"""
Inefficiency detection types and configuration.
"""
from dataclasses import dataclass, field
from typing import List

from marketscope.config.settings import Config
from marketscope.models import InefficiencySignal, SignalType
from marketscope.result import AnalysisError


@dataclass(frozen=True)
class InefficiencyConfig:
    """Thresholds and fixed confidences for inefficiency signals."""
    # Momentum over the most recent window
    momentum_window: int = 10
    momentum_threshold: float = 0.1
    momentum_confidence: float = 0.7

    # Mean reversion (z-score of the current price over the full history)
    zscore_threshold: float = 1.5
    zscore_scale: float = 3.0           # |z| at which the score saturates at 1
    mean_reversion_confidence: float = 0.6

    # Pair divergence between correlated markets
    pair_correlation_threshold: float = 0.7
    pair_divergence_ratio: float = 1.5  # recent diff / average diff
    arbitrage_confidence: float = 0.8

    # Extreme prices (off unless enabled)
    detect_extreme_prices: bool = False
    extreme_low: float = 0.05
    extreme_high: float = 0.95
    mispricing_confidence: float = 0.3

    # Regression-residual divergence (off unless enabled): the latest residual
    # of B regressed on A, as a z-score over all residuals
    detect_residual_divergence: bool = False
    residual_correlation_floor: float = 0.5
    residual_min_points: int = 3
    residual_zscore_threshold: float = 2.0
    residual_medium_zscore: float = 2.5
    residual_high_zscore: float = 3.0

    # Complementary-sum spread (off unless enabled): latest prices of two
    # negatively correlated markets should add up to 1
    detect_spread_opportunities: bool = False
    spread_correlation_ceiling: float = -0.5
    spread_deviation_threshold: float = 0.05
    spread_medium_deviation: float = 0.07
    spread_high_deviation: float = 0.10
    spread_typical_deviation: float = 0.02  # score = deviation / this

    # Confidence of graded signals
    high_confidence: float = 0.8
    medium_confidence: float = 0.6
    low_confidence: float = 0.4

    @classmethod
    def from_settings(cls, settings: Config) -> "InefficiencyConfig":
        return cls(
            momentum_window=settings.momentum_window,
            momentum_threshold=settings.momentum_threshold,
            momentum_confidence=settings.momentum_confidence,
            zscore_threshold=settings.zscore_threshold,
            zscore_scale=settings.zscore_scale,
            mean_reversion_confidence=settings.mean_reversion_confidence,
            pair_correlation_threshold=settings.pair_correlation_threshold,
            pair_divergence_ratio=settings.pair_divergence_ratio,
            arbitrage_confidence=settings.arbitrage_confidence,
            detect_extreme_prices=settings.detect_extreme_prices,
            extreme_low=settings.extreme_low,
            extreme_high=settings.extreme_high,
            mispricing_confidence=settings.mispricing_confidence,
            detect_residual_divergence=settings.detect_residual_divergence,
            residual_correlation_floor=settings.residual_correlation_floor,
            residual_min_points=settings.residual_min_points,
            residual_zscore_threshold=settings.residual_zscore_threshold,
            residual_medium_zscore=settings.residual_medium_zscore,
            residual_high_zscore=settings.residual_high_zscore,
            detect_spread_opportunities=settings.detect_spread_opportunities,
            spread_correlation_ceiling=settings.spread_correlation_ceiling,
            spread_deviation_threshold=settings.spread_deviation_threshold,
            spread_medium_deviation=settings.spread_medium_deviation,
            spread_high_deviation=settings.spread_high_deviation,
            spread_typical_deviation=settings.spread_typical_deviation,
            high_confidence=settings.high_confidence,
            medium_confidence=settings.medium_confidence,
            low_confidence=settings.low_confidence,
        )


@dataclass(frozen=True)
class InefficiencyReport:
    """
    Signals found for one primary market.

    Related markets that could not be compared (no history, no aligned
    points) are listed in errors rather than failing the whole report.
    """
    primary_market: str
    signals: List[InefficiencySignal] = field(default_factory=list)
    errors: List[AnalysisError] = field(default_factory=list)

    def by_type(self, signal_type: SignalType) -> List[InefficiencySignal]:
        return [s for s in self.signals if s.signal_type == signal_type]

    @property
    def has_signals(self) -> bool:
        return bool(self.signals)
