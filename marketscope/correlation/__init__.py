"""
Cross-market correlation analysis.
"""

from marketscope.correlation.statistical import CorrelationAnalyzer, CorrelationConfig

__all__ = ["CorrelationAnalyzer", "CorrelationConfig"]
