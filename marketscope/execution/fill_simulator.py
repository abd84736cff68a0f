"""
Fill simulation for strategy legs.

Walks a leg's size through real orderbook levels when a book is supplied,
otherwise through deterministic synthetic depth.
"""
import logging
from typing import Any, List, Mapping, Optional

from marketscope.models import BookSide, OrderBook, Strategy, StrategyLeg, TradeSide
from marketscope.orderbook.book import build_orderbook, walk_orderbook

from .synthetic import build_synthetic_depth
from .types import DepthSource, ExecutionConfig, ExecutionEstimate

logger = logging.getLogger(__name__)


class ExecutionSimulator:
    """
    Estimates execution cost of strategy legs.

    Buys consume asks from the lowest price up; sells consume bids from the
    highest price down. A fill that runs out of depth is reported with
    partial_fill set and the shortfall, never rounded up to the request.
    """

    def __init__(self, config: Optional[ExecutionConfig] = None):
        self.config = config or ExecutionConfig()

    def simulate_leg(
        self,
        leg: StrategyLeg,
        book: Optional[Any] = None,
        liquidity: float = 0.0
    ) -> ExecutionEstimate:
        """
        Simulate one leg's fill.

        Args:
            leg: Leg to fill
            book: Orderbook for the leg's token (OrderBook or raw payload), optional
            liquidity: Market liquidity, used to size synthetic depth

        Returns:
            ExecutionEstimate with VWAP, filled size and slippage against mid
        """
        book_side = BookSide.ASK if leg.side == TradeSide.BUY else BookSide.BID

        orderbook: Optional[OrderBook] = build_orderbook(book) if book is not None else None
        levels = orderbook.levels(book_side) if orderbook is not None else ()

        if levels:
            source = DepthSource.ORDERBOOK
            mid = orderbook.mid_price if orderbook.mid_price is not None else leg.price
        else:
            source = DepthSource.SYNTHETIC
            mid = leg.price
            levels = build_synthetic_depth(mid, liquidity, book_side, self.config)

        filled, total_cost = walk_orderbook(levels, leg.size)
        vwap = total_cost / filled if filled > 0 else 0.0
        slippage = vwap - mid if filled > 0 else 0.0

        estimate = ExecutionEstimate(
            market=leg.market,
            outcome=leg.outcome,
            side=leg.side,
            requested=leg.size,
            filled=filled,
            vwap=vwap,
            mid=mid,
            slippage=slippage,
            source=source,
        )
        if estimate.partial_fill:
            logger.warning(
                f"Partial fill for {leg.market} {leg.outcome.value}: "
                f"{filled:.2f}/{leg.size:.2f} shares ({source.value} depth)"
            )
        return estimate

    def simulate(
        self,
        strategy: Strategy,
        books: Optional[Mapping[str, Any]] = None,
        liquidity: Optional[Mapping[str, float]] = None
    ) -> List[ExecutionEstimate]:
        """
        Simulate every leg of a strategy, in leg order.

        Args:
            strategy: Strategy whose legs to fill
            books: Orderbooks keyed by token id (a leg uses the book for its token_id)
            liquidity: Market liquidity keyed by market id, for synthetic depth
        """
        books = books or {}
        liquidity = liquidity or {}
        estimates = []
        for leg in strategy.legs:
            book = books.get(leg.token_id) if leg.token_id else None
            estimates.append(self.simulate_leg(leg, book, liquidity.get(leg.market, 0.0)))
        if estimates:
            logger.debug(
                f"Simulated {len(estimates)} legs for {strategy.primary_market}: "
                f"cost {sum(e.cost for e in estimates):.2f}"
            )
        return estimates
