"""
Orderbook feature extraction.

Turns a raw or normalized orderbook into spread, depth, imbalance,
per-size slippage and a short qualitative reading of the book.
"""
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from marketscope.config.settings import Config
from marketscope.exceptions import ErrorKind, InvalidInputError, MarketAnalyticsError
from marketscope.models.orderbook import (
    DepthSummary,
    FilledSlippage,
    OrderBook,
    OrderBookLevel,
    OrderbookFeatures,
    SlippageProfile,
    SlippageResult,
    TopLevels,
    Unfillable,
)
from marketscope.orderbook.book import available_depth, build_orderbook, excess_cost
from marketscope.result import AnalysisResult

logger = logging.getLogger(__name__)

CROSSED_BOOK_NOTE = "Crossed book (best bid above best ask)"


@dataclass(frozen=True)
class OrderbookConfig:
    """Configuration for orderbook feature extraction."""
    top_n: int = 10
    slippage_sizes: Tuple[float, float, float] = (100.0, 500.0, 1000.0)
    reject_crossed_books: bool = False

    # Interpretation thresholds
    very_tight_spread_pct: float = 0.5
    tight_spread_pct: float = 2.0
    moderate_spread_pct: float = 5.0
    imbalance_pressure: float = 0.3
    deep_depth: float = 1000.0
    adequate_depth: float = 100.0
    high_slippage: float = 0.05

    def __post_init__(self):
        if self.top_n < 1:
            raise InvalidInputError(f"top_n must be at least 1, got {self.top_n}")
        if len(self.slippage_sizes) != 3 or any(s <= 0 for s in self.slippage_sizes):
            raise InvalidInputError(
                f"slippage_sizes must be three positive sizes, got {self.slippage_sizes}"
            )

    @classmethod
    def from_settings(cls, settings: Config) -> "OrderbookConfig":
        return cls(
            top_n=settings.orderbook_top_n,
            slippage_sizes=tuple(settings.slippage_sizes),
            reject_crossed_books=settings.reject_crossed_books,
            very_tight_spread_pct=settings.very_tight_spread_pct,
            tight_spread_pct=settings.tight_spread_pct,
            moderate_spread_pct=settings.moderate_spread_pct,
            imbalance_pressure=settings.imbalance_pressure,
            deep_depth=settings.deep_depth,
            adequate_depth=settings.adequate_depth,
            high_slippage=settings.high_slippage,
        )


class OrderbookFeatureExtractor:
    """
    Computes liquidity features from an orderbook snapshot.

    Empty sides never raise: prices and depth fall back to 0, the
    imbalance to neutral, and slippage on an empty ask side is Unfillable.
    """

    def __init__(self, config: Optional[OrderbookConfig] = None):
        self.config = config or OrderbookConfig()

    def build_orderbook(self, raw: Any, market_id: str = "", token_id: str = "") -> OrderBook:
        return build_orderbook(raw, market_id=market_id, token_id=token_id)

    def slippage(self, asks: Sequence[OrderBookLevel], size: float) -> SlippageResult:
        """
        Slippage of a buy of the given size walked up the ask levels.

        Args:
            asks: Ask levels, best (lowest) first
            size: Order size in shares

        Returns:
            FilledSlippage, or Unfillable when the levels hold less than size
        """
        available = available_depth(asks)
        if not asks or available < size:
            return Unfillable(size=size, available=available)

        best_ask = asks[0].price
        avg_fill_price = best_ask + excess_cost(asks, size) / size
        slippage = (avg_fill_price - best_ask) / best_ask if best_ask > 0 else 0.0
        return FilledSlippage(size=size, avg_fill_price=avg_fill_price, slippage=slippage)

    def extract(self, raw: Any) -> OrderbookFeatures:
        """
        Compute features for one book.

        Args:
            raw: An OrderBook, or a mapping with "bids"/"asks" in any supported encoding

        Returns:
            OrderbookFeatures

        Raises:
            InvalidInputError: If the book cannot be normalized
        """
        book = build_orderbook(raw)
        cfg = self.config

        best_bid = book.best_bid or 0.0
        best_ask = book.best_ask or 0.0
        two_sided = bool(book.bids) and bool(book.asks)

        spread = best_ask - best_bid if two_sided else 0.0
        spread_percent = spread / best_ask * 100 if two_sided and best_ask > 0 else 0.0
        is_crossed = two_sided and best_bid > best_ask
        if is_crossed:
            logger.warning(
                f"Crossed book for {book.token_id or 'unknown token'}: "
                f"bid {best_bid} > ask {best_ask}"
            )

        bid_depth = available_depth(book.bids)
        ask_depth = available_depth(book.asks)
        total_depth = bid_depth + ask_depth
        imbalance = (bid_depth - ask_depth) / total_depth if total_depth > 0 else 0.0

        top_asks = book.asks[:cfg.top_n]
        small, medium, large = (self.slippage(top_asks, size) for size in cfg.slippage_sizes)
        profile = SlippageProfile(small=small, medium=medium, large=large)

        interpretation = self._interpret(
            two_sided=two_sided,
            is_crossed=is_crossed,
            spread_percent=spread_percent,
            imbalance=imbalance,
            total_depth=total_depth,
            profile=profile,
            has_asks=bool(book.asks),
        )

        return OrderbookFeatures(
            best_bid=best_bid,
            best_ask=best_ask,
            mid_price=(best_bid + best_ask) / 2 if two_sided else 0.0,
            spread=spread,
            spread_percent=spread_percent,
            depth=DepthSummary(bid=bid_depth, ask=ask_depth, total=total_depth),
            imbalance=max(-1.0, min(1.0, imbalance)),
            slippage=profile,
            top_levels=TopLevels(bids=book.bids[:cfg.top_n], asks=top_asks),
            is_crossed=is_crossed,
            interpretation=interpretation,
        )

    def try_extract(self, raw: Any, key: Optional[str] = None) -> AnalysisResult[OrderbookFeatures]:
        """extract() wrapped in a result; crossed books fail here when rejection is enabled."""
        try:
            features = self.extract(raw)
        except MarketAnalyticsError as e:
            logger.warning(f"Orderbook features failed for {key}: {e.message}")
            return AnalysisResult.from_exception(e, key=key)

        if features.is_crossed and self.config.reject_crossed_books:
            return AnalysisResult.failure(
                ErrorKind.INVALID_INPUT,
                f"crossed book: best bid {features.best_bid} above best ask {features.best_ask}",
                key=key,
            )
        return AnalysisResult.success(features, key=key)

    def _interpret(
        self,
        two_sided: bool,
        is_crossed: bool,
        spread_percent: float,
        imbalance: float,
        total_depth: float,
        profile: SlippageProfile,
        has_asks: bool
    ) -> str:
        cfg = self.config
        clauses: List[str] = []

        # Spread
        if is_crossed:
            clauses.append(CROSSED_BOOK_NOTE)
        elif two_sided:
            if spread_percent < cfg.very_tight_spread_pct:
                clauses.append("Very tight spread indicates high liquidity")
            elif spread_percent < cfg.tight_spread_pct:
                clauses.append("Tight spread indicates good liquidity")
            elif spread_percent < cfg.moderate_spread_pct:
                clauses.append("Moderate spread")
            else:
                clauses.append("Wide spread suggests low liquidity or high uncertainty")

        # Imbalance
        if imbalance > cfg.imbalance_pressure:
            clauses.append("Strong bid pressure (bullish sentiment)")
        elif imbalance < -cfg.imbalance_pressure:
            clauses.append("Strong ask pressure (bearish sentiment)")
        else:
            clauses.append("Balanced orderbook")

        # Depth
        if total_depth > cfg.deep_depth:
            clauses.append("Deep orderbook with strong liquidity")
        elif total_depth > cfg.adequate_depth:
            clauses.append("Adequate liquidity")
        else:
            clauses.append("Shallow orderbook, low liquidity")

        # Slippage
        if has_asks:
            for label, result in (("medium", profile.medium), ("large", profile.large)):
                if isinstance(result, Unfillable):
                    clauses.append(f"Insufficient depth for {label} orders")
                    break
                if result.slippage > cfg.high_slippage:
                    clauses.append(f"High slippage for {label} orders")
                    break

        return ". ".join(clauses) + "."
