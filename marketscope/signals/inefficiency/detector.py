"""
Inefficiency detection for a primary market.

Looks for momentum, stretched prices (z-score), divergence from
correlated markets and complementary markets whose prices do not add up.
"""
import logging
from typing import List, Mapping, Optional, Sequence

import numpy as np

from marketscope.correlation.statistical.timeseries import TimeSeriesAligner
from marketscope.exceptions import ErrorKind, MarketAnalyticsError
from marketscope.models import CorrelationEdge, InefficiencySignal, PricePoint, SignalType, prices_of
from marketscope.result import AnalysisError, AnalysisResult

from .types import InefficiencyConfig, InefficiencyReport

logger = logging.getLogger(__name__)


class InefficiencyDetector:
    """
    Scores inefficiencies on one primary market.

    Pair signals need correlation edges (from CorrelationAnalyzer) and the
    related markets' histories; without them only the single-market checks run.
    """

    def __init__(
        self,
        config: Optional[InefficiencyConfig] = None,
        aligner: Optional[TimeSeriesAligner] = None,
    ):
        self.config = config or InefficiencyConfig()
        self.aligner = aligner or TimeSeriesAligner()

    # --- Entry Points ---

    def try_detect(
        self,
        primary: str,
        histories: Mapping[str, Sequence[PricePoint]],
        edges: Sequence[CorrelationEdge] = (),
    ) -> AnalysisResult[InefficiencyReport]:
        """
        Run every check against the primary market.

        Args:
            primary: Key of the primary market in histories
            histories: Price histories by market/token key
            edges: Correlation edges; only those touching primary are used

        Returns:
            AnalysisResult with the InefficiencyReport, or UPSTREAM_DATA_GAP when
            the primary history is missing and INSUFFICIENT_DATA when it has
            fewer than 2 points
        """
        history = histories.get(primary)
        if not history:
            return AnalysisResult.failure(
                ErrorKind.UPSTREAM_DATA_GAP, f"no price history for {primary}", key=primary
            )
        if len(history) < 2:
            return AnalysisResult.failure(
                ErrorKind.INSUFFICIENT_DATA,
                f"{len(history)} price point(s), need at least 2",
                key=primary,
            )

        signals: List[InefficiencySignal] = []
        errors: List[AnalysisError] = []

        prices = np.array(prices_of(history), dtype=float)
        for check in (self.detect_momentum, self.detect_mean_reversion, self.detect_extreme_price):
            signal = check(primary, prices)
            if signal is not None:
                signals.append(signal)

        pair_signals, pair_errors = self.detect_pair_divergence(primary, histories, edges)
        signals.extend(pair_signals)
        errors.extend(pair_errors)

        for s in signals:
            logger.debug(f"{s.signal_type.value} on {primary}: score={s.score:.3f}")

        return AnalysisResult.success(
            InefficiencyReport(primary_market=primary, signals=signals, errors=errors),
            key=primary,
        )

    def detect(
        self,
        primary: str,
        histories: Mapping[str, Sequence[PricePoint]],
        edges: Sequence[CorrelationEdge] = (),
    ) -> InefficiencyReport:
        """Like try_detect, but a primary-level failure becomes an empty report carrying the error."""
        result = self.try_detect(primary, histories, edges)
        if result.ok:
            return result.value
        return InefficiencyReport(primary_market=primary, errors=[result.error])

    # --- Single-Market Checks ---

    def detect_momentum(self, primary: str, prices: np.ndarray) -> Optional[InefficiencySignal]:
        cfg = self.config
        window = prices[-min(cfg.momentum_window, len(prices)):]
        first, last = float(window[0]), float(window[-1])
        if first <= 0:
            return None

        momentum = (last - first) / first
        if abs(momentum) <= cfg.momentum_threshold:
            return None

        direction = "bullish" if momentum > 0 else "bearish"
        return InefficiencySignal(
            signal_type=SignalType.MOMENTUM,
            primary_market=primary,
            score=abs(momentum),
            confidence=cfg.momentum_confidence,
            description=f"Strong {direction} momentum detected ({momentum * 100:.1f}%)",
            metadata={"momentum": momentum, "window": len(window)},
        )

    def detect_mean_reversion(self, primary: str, prices: np.ndarray) -> Optional[InefficiencySignal]:
        cfg = self.config
        sigma = float(prices.std())
        if sigma == 0 or np.ptp(prices) == 0:
            return None

        mean = float(prices.mean())
        z_score = (float(prices[-1]) - mean) / sigma
        if abs(z_score) <= cfg.zscore_threshold:
            return None

        return InefficiencySignal(
            signal_type=SignalType.MEAN_REVERSION,
            primary_market=primary,
            score=min(1.0, abs(z_score) / cfg.zscore_scale),
            confidence=cfg.mean_reversion_confidence,
            description=f"Price is {abs(z_score):.1f} standard deviations from mean",
            metadata={"z_score": z_score, "mean": mean, "std": sigma},
        )

    def detect_extreme_price(self, primary: str, prices: np.ndarray) -> Optional[InefficiencySignal]:
        cfg = self.config
        if not cfg.detect_extreme_prices:
            return None

        current = float(prices[-1])
        if current < cfg.extreme_low:
            score = (cfg.extreme_low - current) / cfg.extreme_low
        elif current > cfg.extreme_high:
            score = (current - cfg.extreme_high) / (1 - cfg.extreme_high)
        else:
            return None

        return InefficiencySignal(
            signal_type=SignalType.MISPRICING,
            primary_market=primary,
            score=score,
            confidence=cfg.mispricing_confidence,
            description=f"Price at extreme level ({current * 100:.1f}%) may be mispriced",
            metadata={"price": current},
        )

    # --- Pair Checks ---

    def detect_pair_divergence(
        self,
        primary: str,
        histories: Mapping[str, Sequence[PricePoint]],
        edges: Sequence[CorrelationEdge],
    ):
        """
        Run the pair checks against every related market they apply to.

        The ratio check runs on edges above pair_correlation_threshold, the
        residual check on |correlation| at or above residual_correlation_floor
        and the spread check on correlations at or below
        spread_correlation_ceiling. The last two only run when enabled.

        Returns:
            Tuple of (signals, errors) where errors name the related markets
            that could not be compared
        """
        cfg = self.config
        signals: List[InefficiencySignal] = []
        errors: List[AnalysisError] = []

        for edge in edges:
            if not edge.touches(primary):
                continue
            related = edge.other(primary)
            if related == primary:
                continue

            ratio = edge.correlation > cfg.pair_correlation_threshold
            residual = (
                cfg.detect_residual_divergence
                and abs(edge.correlation) >= cfg.residual_correlation_floor
            )
            spread = cfg.detect_spread_opportunities and edge.correlation <= cfg.spread_correlation_ceiling
            if not (ratio or residual or spread):
                continue

            related_history = histories.get(related)
            if not related_history:
                logger.warning(f"Skipping pair {primary}/{related}: no history for {related}")
                errors.append(AnalysisError(
                    ErrorKind.UPSTREAM_DATA_GAP, f"no price history for {related}", key=related
                ))
                continue

            found: List[Optional[InefficiencySignal]] = []
            if spread:
                found.append(self.detect_spread_opportunity(
                    primary, related, histories[primary][-1].price, related_history[-1].price
                ))

            if ratio or residual:
                aligned, error = self._align_pair(primary, related, histories[primary], related_history)
                if error is not None:
                    errors.append(error)
                else:
                    a, b = aligned
                    if ratio:
                        found.append(self.detect_ratio_divergence(primary, related, edge, a, b))
                    if residual:
                        found.append(self.detect_residual_divergence(primary, related, edge, a, b))

            signals.extend(s for s in found if s is not None)

        return signals, errors

    def _align_pair(
        self,
        primary: str,
        related: str,
        history: Sequence[PricePoint],
        related_history: Sequence[PricePoint],
    ):
        """Aligned price arrays for a pair, or the error that prevented aligning them."""
        try:
            a, b = self.aligner.align(history, related_history)
        except MarketAnalyticsError as e:
            logger.warning(f"Skipping pair {primary}/{related}: {e.message}")
            return None, AnalysisError(e.kind, e.message, key=related)
        if len(a) == 0:
            logger.warning(f"Skipping pair {primary}/{related}: no aligned timestamps")
            return None, AnalysisError(
                ErrorKind.INSUFFICIENT_DATA, f"no aligned points with {related}", key=related
            )
        return (a, b), None

    def detect_ratio_divergence(
        self,
        primary: str,
        related: str,
        edge: CorrelationEdge,
        a: np.ndarray,
        b: np.ndarray,
    ) -> Optional[InefficiencySignal]:
        """Latest price gap against the average gap over the aligned points."""
        cfg = self.config
        recent_diff = abs(float(a[-1]) - float(b[-1]))
        avg_diff = float(np.mean(np.abs(a - b)))
        if avg_diff == 0 or recent_diff <= cfg.pair_divergence_ratio * avg_diff:
            return None

        return InefficiencySignal(
            signal_type=SignalType.ARBITRAGE,
            primary_market=primary,
            related_market=related,
            score=max((recent_diff / avg_diff - 1) / 2, 0.0),
            confidence=cfg.arbitrage_confidence,
            description=(
                f"Divergence detected with correlated market "
                f"({edge.correlation * 100:.0f}% correlation)"
            ),
            metadata={"recent_diff": recent_diff, "avg_diff": avg_diff},
        )

    def detect_residual_divergence(
        self,
        primary: str,
        related: str,
        edge: CorrelationEdge,
        a: np.ndarray,
        b: np.ndarray,
    ) -> Optional[InefficiencySignal]:
        """
        Z-score of the latest residual of the related market regressed on the primary.

        Fires when |z| exceeds residual_zscore_threshold. Confidence is graded
        by residual_medium_zscore and residual_high_zscore.
        """
        cfg = self.config
        if len(a) < cfg.residual_min_points or np.ptp(a) == 0:
            return None

        slope, intercept = np.polyfit(a, b, 1)
        residuals = b - (slope * a + intercept)
        sigma = float(residuals.std())
        if sigma == 0:
            return None

        z_score = (float(residuals[-1]) - float(residuals.mean())) / sigma
        if abs(z_score) <= cfg.residual_zscore_threshold:
            return None

        direction = "positive" if z_score > 0 else "negative"
        return InefficiencySignal(
            signal_type=SignalType.DIVERGENCE,
            primary_market=primary,
            related_market=related,
            score=min(1.0, abs(z_score) / cfg.zscore_scale),
            confidence=self._graded_confidence(
                abs(z_score), cfg.residual_medium_zscore, cfg.residual_high_zscore
            ),
            description=(
                f"Detected {direction} divergence from {related} (r={edge.correlation:.2f}): "
                f"spread is {abs(z_score):.1f} standard deviations from mean"
            ),
            metadata={
                "z_score": z_score,
                "residual": float(residuals[-1]),
                "slope": float(slope),
                "intercept": float(intercept),
            },
        )

    def detect_spread_opportunity(
        self,
        primary: str,
        related: str,
        primary_price: float,
        related_price: float,
    ) -> Optional[InefficiencySignal]:
        """Latest prices of two complementary markets that do not add up to 1."""
        cfg = self.config
        total = primary_price + related_price
        deviation = abs(total - 1.0)
        if deviation <= cfg.spread_deviation_threshold:
            return None

        return InefficiencySignal(
            signal_type=SignalType.SPREAD,
            primary_market=primary,
            related_market=related,
            score=deviation / cfg.spread_typical_deviation,
            confidence=self._graded_confidence(
                deviation, cfg.spread_medium_deviation, cfg.spread_high_deviation
            ),
            description=(
                f"Potential spread opportunity: {primary} ({primary_price * 100:.0f}¢) + "
                f"{related} ({related_price * 100:.0f}¢) = {total * 100:.0f}¢ (expected: 100¢)"
            ),
            metadata={"sum": total, "deviation": deviation, "residual": total - 1.0},
        )

    def _graded_confidence(self, value: float, medium: float, high: float) -> float:
        cfg = self.config
        if value > high:
            return cfg.high_confidence
        if value > medium:
            return cfg.medium_confidence
        return cfg.low_confidence
