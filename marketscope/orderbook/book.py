"""
Orderbook normalization and depth walking.

Raw levels arrive as lists of [price, size] pairs, lists of
{"price": .., "size": ..} objects, or price-keyed maps ({"0.51": "120"}),
in any order and with numbers possibly encoded as strings.
"""
import logging
import math
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, Iterable, List, Optional, Tuple

from marketscope.exceptions import InvalidInputError
from marketscope.models.orderbook import BookSide, OrderBook, OrderBookLevel

logger = logging.getLogger(__name__)


def _to_number(value: Any) -> Optional[float]:
    """Coerce a price or size to a finite float, or None."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _read_entry(entry: Any) -> Optional[Tuple[Any, Any]]:
    """Extract (price, size) from one raw level, or None if it has no such shape."""
    if isinstance(entry, OrderBookLevel):
        return entry.price, entry.size
    if isinstance(entry, Mapping):
        if "price" in entry and "size" in entry:
            return entry["price"], entry["size"]
        return None
    if isinstance(entry, Sequence) and not isinstance(entry, (str, bytes)) and len(entry) >= 2:
        return entry[0], entry[1]
    return None


def _raw_pairs(raw: Any) -> Iterable[Tuple[Any, Any]]:
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        return list(raw.items())
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        pairs = []
        for entry in raw:
            pair = _read_entry(entry)
            if pair is not None:
                pairs.append(pair)
        return pairs
    raise InvalidInputError(f"Orderbook side must be a sequence or mapping, got {type(raw).__name__}")


def normalize_side(raw: Any, side: BookSide) -> Tuple[OrderBookLevel, ...]:
    """
    Normalize one side of a book.

    Drops non-finite or negative entries, merges duplicate prices by summing
    sizes, and sorts bids descending / asks ascending.

    Args:
        raw: Levels in any supported encoding (None means an empty side)
        side: Which side the levels belong to

    Returns:
        Tuple of levels, best price first

    Raises:
        InvalidInputError: If raw is neither a sequence nor a mapping
    """
    merged = {}
    dropped = 0
    for raw_price, raw_size in _raw_pairs(raw):
        price = _to_number(raw_price)
        size = _to_number(raw_size)
        if price is None or size is None or price < 0 or size < 0:
            dropped += 1
            continue
        merged[price] = merged.get(price, 0.0) + size

    if dropped:
        logger.debug(f"Dropped {dropped} unreadable {side.value} levels")

    prices = sorted(merged, reverse=(side == BookSide.BID))
    return tuple(OrderBookLevel(price=p, size=merged[p], side=side) for p in prices)


def build_orderbook(
    raw: Any,
    market_id: str = "",
    token_id: str = "",
    timestamp: Optional[datetime] = None
) -> OrderBook:
    """
    Create a normalized OrderBook from a raw {"bids": .., "asks": ..} payload.

    An OrderBook built by the caller is normalized again, so its levels end
    up sorted and merged like any other input.
    """
    if isinstance(raw, OrderBook):
        return raw.model_copy(update={
            "bids": normalize_side(raw.bids, BookSide.BID),
            "asks": normalize_side(raw.asks, BookSide.ASK),
        })
    if not isinstance(raw, Mapping):
        raise InvalidInputError(f"Orderbook must be a mapping with bids/asks, got {type(raw).__name__}")

    return OrderBook(
        market_id=raw.get("market", market_id) or market_id,
        token_id=raw.get("asset_id", token_id) or token_id,
        timestamp=timestamp,
        bids=normalize_side(raw.get("bids"), BookSide.BID),
        asks=normalize_side(raw.get("asks"), BookSide.ASK),
    )


def walk_orderbook(levels: Sequence[OrderBookLevel], size: float) -> Tuple[float, float]:
    """
    Walk through orderbook levels to simulate a fill.

    Args:
        levels: Sorted orderbook levels (best price first)
        size: Amount to fill

    Returns:
        Tuple of (filled_size, total_cost)
    """
    remaining = size
    total_cost = 0.0
    filled = 0.0

    for level in levels:
        if remaining <= 0:
            break
        fill_amount = min(remaining, level.size)
        total_cost += fill_amount * level.price
        filled += fill_amount
        remaining -= fill_amount

    return filled, total_cost


def excess_cost(levels: Sequence[OrderBookLevel], size: float) -> float:
    """Cost above the best price of filling size, assuming enough depth."""
    if not levels:
        return 0.0
    best = levels[0].price
    remaining = size
    excess = 0.0
    for level in levels:
        if remaining <= 0:
            break
        fill_amount = min(remaining, level.size)
        excess += fill_amount * (level.price - best)
        remaining -= fill_amount
    return excess


def available_depth(levels: Sequence[OrderBookLevel]) -> float:
    return sum(level.size for level in levels)

