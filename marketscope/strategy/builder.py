"""
Hedge structure construction.

Builds one- or two-leg structures around a primary market from a view
(bullish, bearish or relative), a size and a risk cap.
"""
import logging
from typing import List, Optional, Sequence, Tuple

from marketscope.models import (
    CorrelationEdge,
    HedgeRequest,
    InefficiencySignal,
    MarketMetadata,
    Outcome,
    SignalType,
    SizeMode,
    Strategy,
    StrategyLeg,
    TradeSide,
    ViewMode,
)

from .types import HedgeSuggestion, StrategyConfig

logger = logging.getLogger(__name__)

# Signals that mark a correlated pair as diverging
DIVERGENCE_SIGNALS = (SignalType.ARBITRAGE, SignalType.DIVERGENCE)


def _leg(
    market: MarketMetadata,
    outcome: Outcome,
    size: float,
    rationale: str,
    side: TradeSide = TradeSide.BUY
) -> StrategyLeg:
    return StrategyLeg(
        market=market.id,
        market_title=market.title,
        side=side,
        outcome=outcome,
        price=market.yes_mid if outcome == Outcome.YES else market.no_mid,
        size=size,
        rationale=rationale,
        market_yes_mid=market.yes_mid,
        token_id=market.yes_token_id if outcome == Outcome.YES else market.no_token_id,
    )


class HedgeStrategyBuilder:
    """
    Constructs hedge structures and hedge suggestions.

    Sizes are in shares. The primary leg never risks more than the risk cap;
    the hedge leg is the primary size scaled by the correlation weight.
    """

    def __init__(self, config: Optional[StrategyConfig] = None):
        self.config = config or StrategyConfig()

    def size_shares(self, entry_price: float, request: HedgeRequest) -> Tuple[float, float]:
        """
        Convert the requested size into shares and cap it by the risk budget.

        Returns:
            Tuple of (requested_shares, capped_shares)
        """
        entry = max(entry_price, self.config.min_entry_price)
        requested = request.size / entry if request.size_mode == SizeMode.NOTIONAL else request.size
        return requested, min(requested, request.risk_cap / entry)

    def build(
        self,
        primary: MarketMetadata,
        candidates: Sequence[MarketMetadata],
        request: Optional[HedgeRequest] = None,
    ) -> Strategy:
        """
        Build a structure around the primary market.

        Args:
            primary: Market the view is about
            candidates: Other markets in the cluster (the primary is ignored if present)
            request: View, sizing and correlation weight

        Returns:
            Strategy with legs and rationale; projections are left empty
        """
        request = request or HedgeRequest(correlation_weight=self.config.default_correlation_weight)
        w = request.correlation_weight
        others = [m for m in candidates if m.id != primary.id]

        primary_outcome = Outcome.YES if request.mode == ViewMode.BULLISH else Outcome.NO
        entry = primary.yes_mid if primary_outcome == Outcome.YES else primary.no_mid
        requested, capped = self.size_shares(entry, request)

        legs: List[StrategyLeg] = []
        rationale: List[str] = []

        if request.mode == ViewMode.BULLISH:
            legs.append(_leg(primary, Outcome.YES, capped, "Primary view"))
            rationale.append("Primary long YES expresses bullish view.")
        elif request.mode == ViewMode.BEARISH:
            legs.append(_leg(primary, Outcome.NO, capped, "Primary view"))
            rationale.append("Primary long NO expresses bearish view.")
        else:
            alternative = self._relative_alternative(primary, others)
            if alternative is None:
                rationale.append("No alternative market available for a relative structure.")
                logger.info(f"Relative structure for {primary.id} has no alternative market")
            else:
                legs.append(_leg(primary, Outcome.NO, capped, "Fade primary"))
                legs.append(_leg(alternative, Outcome.YES, capped * w, "Relative pair"))
                rationale.append(
                    "Relative structure: fade primary, pair with higher-liquidity alternative."
                )
                rationale.append("Hedge size scaled by correlation weight.")

        if legs:
            if capped < requested:
                rationale.append(
                    f"Sizing capped by risk budget ({capped:.0f} of {requested:.0f} shares)."
                )
            else:
                rationale.append("Requested size fits within the risk budget.")

        if len(legs) == 1 and others:
            hedge = max(others, key=lambda m: m.yes_mid)
            legs.append(_leg(hedge, Outcome.YES, capped * w, "Hedge"))
            rationale.append("Hedge leg chosen from top alternative in the cluster.")

        logger.debug(f"Built {request.mode.value} structure on {primary.id} with {len(legs)} legs")
        return Strategy(
            primary_market=primary.id,
            primary_yes_mid=primary.yes_mid,
            correlation_weight=w,
            legs=tuple(legs),
            rationale=tuple(rationale),
        )

    def _relative_alternative(
        self,
        primary: MarketMetadata,
        others: Sequence[MarketMetadata]
    ) -> Optional[MarketMetadata]:
        """Most liquid market in the primary's cluster, else the most liquid overall."""
        if not others:
            return None
        same_cluster = [
            m for m in others
            if primary.cluster_key is not None and m.cluster_key == primary.cluster_key
        ]
        pool = same_cluster or list(others)
        return max(pool, key=lambda m: m.liquidity)

    def suggest_hedges(
        self,
        primary: MarketMetadata,
        candidates: Sequence[MarketMetadata],
        edges: Sequence[CorrelationEdge],
        signals: Sequence[InefficiencySignal] = (),
    ) -> List[HedgeSuggestion]:
        """
        Rank candidates as hedges or spread trades from their correlation with the primary.

        Negatively correlated markets hedge the primary (ratio |corr|). Highly
        correlated markets only qualify when a divergence signal was raised on
        the pair. Markets are matched to edges by their history key.
        """
        cfg = self.config
        primary_key = primary.history_key
        suggestions: List[HedgeSuggestion] = []

        for candidate in candidates:
            if candidate.id == primary.id:
                continue
            key = candidate.history_key
            edge = next(
                (e for e in edges if e.touches(primary_key) and e.other(primary_key) == key),
                None,
            )
            if edge is None:
                continue

            pair_signals = [
                s for s in signals
                if s.primary_market == primary_key and s.related_market == key
            ]

            if edge.correlation < cfg.hedge_correlation_ceiling:
                rationale = (
                    f"Negative correlation ({edge.correlation * 100:.0f}%) provides downside protection"
                )
                if pair_signals:
                    signal = pair_signals[0]
                    rationale += f". {signal.signal_type.value} opportunity (score: {signal.score:.2f})"
                suggestions.append(HedgeSuggestion(
                    market=candidate,
                    correlation=edge.correlation,
                    hedge_ratio=abs(edge.correlation),
                    rationale=rationale,
                    confidence=cfg.hedge_confidence,
                ))
            elif edge.correlation > cfg.spread_correlation_floor:
                if any(s.signal_type in DIVERGENCE_SIGNALS for s in pair_signals):
                    suggestions.append(HedgeSuggestion(
                        market=candidate,
                        correlation=edge.correlation,
                        hedge_ratio=1.0,
                        rationale=(
                            f"High correlation ({edge.correlation * 100:.0f}%) with divergence "
                            f"detected - spread trade opportunity"
                        ),
                        confidence=cfg.spread_trade_confidence,
                    ))

        # Stable sort keeps candidate order among equal confidences
        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        return suggestions[:cfg.max_suggestions]
