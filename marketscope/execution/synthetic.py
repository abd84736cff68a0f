"""
Deterministic synthetic depth for markets without a live book.
"""
from typing import Optional, Tuple

from marketscope.models import BookSide, OrderBookLevel

from .types import ExecutionConfig


def build_synthetic_depth(
    mid: float,
    liquidity: float,
    side: BookSide,
    config: Optional[ExecutionConfig] = None
) -> Tuple[OrderBookLevel, ...]:
    """
    Generate a ladder of levels around mid.

    Level i (1-based) sits i ticks away from mid on the requested side with
    size base * (1 + (i - 1) * size_growth). The same inputs always give
    the same levels.

    Args:
        mid: Reference price
        liquidity: Market liquidity figure, scales the level sizes
        side: ASK builds levels above mid, BID below (never below min_price)

    Returns:
        Levels ordered best first
    """
    cfg = config or ExecutionConfig()
    tick = max(mid * cfg.tick_fraction, cfg.min_tick)
    base_size = max(cfg.base_size_floor, liquidity * cfg.liquidity_fraction)

    levels = []
    for i in range(1, cfg.synthetic_levels + 1):
        if side == BookSide.ASK:
            price = mid + i * tick
        else:
            price = max(cfg.min_price, mid - i * tick)
        size = base_size * (1 + (i - 1) * cfg.size_growth)
        levels.append(OrderBookLevel(price=price, size=size, side=side))
    return tuple(levels)
