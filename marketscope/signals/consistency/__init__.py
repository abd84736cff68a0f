"""
Cross-market consistency checks.
"""

from .scanner import ConsistencyConfig, ConsistencyScanner

__all__ = ["ConsistencyConfig", "ConsistencyScanner"]
