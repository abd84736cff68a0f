"""
marketscope: microstructure and cross-market analytics for binary-outcome markets.
"""

__version__ = "0.1.0"
