"""
Single-market metrics from a price history.

Volatility of returns, recent momentum, maximum drawdown, a coarse health
score and the prevailing trend regime.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from marketscope.config.settings import Config
from marketscope.exceptions import ErrorKind
from marketscope.models import OrderbookFeatures, PricePoint, prices_of
from marketscope.result import AnalysisResult

logger = logging.getLogger(__name__)


class Trend(str, Enum):
    UPTREND = "uptrend"
    DOWNTREND = "downtrend"
    SIDEWAYS = "sideways"
    VOLATILE = "volatile"


@dataclass(frozen=True)
class MetricsConfig:
    momentum_window: int = 10
    base_health: float = 0.5
    calm_volatility: float = 0.1     # +0.2 health below this
    shallow_drawdown: float = 0.1    # +0.15 health below this
    healthy_bid_depth: float = 100.0 # +0.15 health above this
    volatile_threshold: float = 0.15
    trend_threshold: float = 0.05

    @classmethod
    def from_settings(cls, settings: Config) -> "MetricsConfig":
        return cls(
            momentum_window=settings.momentum_window,
            base_health=settings.base_health,
            calm_volatility=settings.calm_volatility,
            shallow_drawdown=settings.shallow_drawdown,
            healthy_bid_depth=settings.healthy_bid_depth,
            volatile_threshold=settings.volatile_threshold,
            trend_threshold=settings.trend_threshold,
        )


@dataclass(frozen=True)
class TrendRegime:
    trend: Trend
    strength: float
    volatility: float
    momentum: float
    recent_drawdown: float


@dataclass(frozen=True)
class MarketMetrics:
    volatility: float
    momentum: float
    max_drawdown: float
    health_score: float
    trend_regime: TrendRegime


class MarketMetricsCalculator:
    """Computes MarketMetrics for one price history."""

    def __init__(self, config: Optional[MetricsConfig] = None):
        self.config = config or MetricsConfig()

    def compute(
        self,
        history: Sequence[PricePoint],
        features: Optional[OrderbookFeatures] = None,
        key: Optional[str] = None
    ) -> AnalysisResult[MarketMetrics]:
        """
        Compute metrics for a history of at least 2 points.

        Args:
            history: Price history ordered by timestamp
            features: Orderbook features for the same market, improves the health score
            key: Identifier attached to the result

        Returns:
            AnalysisResult with MarketMetrics, or INSUFFICIENT_DATA
        """
        if len(history) < 2:
            return AnalysisResult.failure(
                ErrorKind.INSUFFICIENT_DATA,
                f"{len(history)} price point(s), need at least 2",
                key=key,
            )

        cfg = self.config
        prices = pd.Series(prices_of(history), dtype=float)

        volatility = self.volatility(prices)
        momentum = self.momentum(prices)
        drawdown = self.max_drawdown(prices)

        health = cfg.base_health
        if volatility < cfg.calm_volatility:
            health += 0.2
        if drawdown < cfg.shallow_drawdown:
            health += 0.15
        if features is not None and features.depth.bid > cfg.healthy_bid_depth:
            health += 0.15
        health = max(0.0, min(1.0, health))

        if volatility > cfg.volatile_threshold:
            trend = Trend.VOLATILE
        elif momentum > cfg.trend_threshold:
            trend = Trend.UPTREND
        elif momentum < -cfg.trend_threshold:
            trend = Trend.DOWNTREND
        else:
            trend = Trend.SIDEWAYS

        regime = TrendRegime(
            trend=trend,
            strength=min(1.0, abs(momentum) / (volatility + 0.01)),
            volatility=volatility,
            momentum=momentum,
            recent_drawdown=drawdown,
        )
        logger.debug(f"Metrics for {key}: volatility={volatility:.4f}, trend={trend.value}")
        return AnalysisResult.success(
            MarketMetrics(
                volatility=volatility,
                momentum=momentum,
                max_drawdown=drawdown,
                health_score=health,
                trend_regime=regime,
            ),
            key=key,
        )

    @staticmethod
    def volatility(prices: pd.Series) -> float:
        """Population standard deviation of simple returns."""
        returns = prices.pct_change().replace([np.inf, -np.inf], np.nan).dropna()
        if returns.empty:
            return 0.0
        return float(returns.std(ddof=0))

    def momentum(self, prices: pd.Series) -> float:
        window = prices.iloc[-min(self.config.momentum_window, len(prices)):]
        first = float(window.iloc[0])
        if first <= 0:
            return 0.0
        return (float(window.iloc[-1]) - first) / first

    @staticmethod
    def max_drawdown(prices: pd.Series) -> float:
        peaks = prices.cummax()
        drawdowns = ((peaks - prices) / peaks).where(peaks > 0, 0.0)
        return float(drawdowns.max())
