"""
Single-market analysis.
"""
from .metrics import MarketMetrics, MarketMetricsCalculator, MetricsConfig, Trend, TrendRegime

__all__ = [
    "MarketMetrics", "MarketMetricsCalculator", "MetricsConfig", "Trend", "TrendRegime",
]
