"""
Statistical relationships between price histories.
"""

from .timeseries import TimeSeriesAligner, ALIGNMENT_MODES
from .methods import pearson_correlation, correlation_pvalue, rolling_correlation, cointegration_test
from .leadlag import LeadLagDetector, LeadLagResult
from .detector import CorrelationAnalyzer, CorrelationConfig

__all__ = [
    "TimeSeriesAligner",
    "ALIGNMENT_MODES",
    "pearson_correlation",
    "correlation_pvalue",
    "rolling_correlation",
    "cointegration_test",
    "LeadLagDetector",
    "LeadLagResult",
    "CorrelationAnalyzer",
    "CorrelationConfig",
]
