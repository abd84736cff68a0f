"""
Orderbook normalization and liquidity features.
"""

from marketscope.orderbook.book import (
    normalize_side,
    build_orderbook,
    walk_orderbook,
    available_depth,
)
from marketscope.orderbook.features import (
    OrderbookConfig,
    OrderbookFeatureExtractor,
    CROSSED_BOOK_NOTE,
)

__all__ = [
    "normalize_side",
    "build_orderbook",
    "walk_orderbook",
    "available_depth",
    "OrderbookConfig",
    "OrderbookFeatureExtractor",
    "CROSSED_BOOK_NOTE",
]
