import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from itertools import combinations
from typing import List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from marketscope.config.settings import Config
from marketscope.exceptions import ErrorKind, MarketAnalyticsError
from marketscope.models import CorrelationConfidence, CorrelationEdge, PricePoint
from marketscope.result import AnalysisResult
from .timeseries import TimeSeriesAligner
from .methods import pearson_correlation, correlation_pvalue, rolling_correlation, cointegration_test
from .leadlag import LeadLagDetector, LeadLagResult

logger = logging.getLogger(__name__)

History = Sequence[PricePoint]

@dataclass(frozen=True)
class CorrelationConfig:
    """Configuration for pairwise correlation analysis."""
    alignment_mode: str = "exact"
    alignment_tolerance_seconds: float = 0.0
    max_lag: int = 5
    min_reported_lag: int = 2
    min_aligned_points: int = 2
    cointegration_min_points: int = 100
    max_workers: int = 1

    # Confidence grades: |correlation| above the floor and p-value below the ceiling
    high_confidence_correlation: float = 0.7
    high_confidence_pvalue: float = 0.05
    medium_confidence_correlation: float = 0.5
    medium_confidence_pvalue: float = 0.10

    @classmethod
    def from_settings(cls, settings: Config) -> "CorrelationConfig":
        return cls(
            alignment_mode=settings.alignment_mode,
            alignment_tolerance_seconds=settings.alignment_tolerance_seconds,
            max_lag=settings.max_lead_lag,
            min_reported_lag=settings.min_reported_lag,
            min_aligned_points=settings.min_aligned_points,
            cointegration_min_points=settings.cointegration_min_points,
            max_workers=settings.max_workers,
            high_confidence_correlation=settings.high_confidence_correlation,
            high_confidence_pvalue=settings.high_confidence_pvalue,
            medium_confidence_correlation=settings.medium_confidence_correlation,
            medium_confidence_pvalue=settings.medium_confidence_pvalue,
        )

class CorrelationAnalyzer:
    """
    Pearson correlation and lead-lag between price histories.

    Pairwise results are returned per pair, so one empty or short history
    does not prevent the others from being analyzed.
    """

    def __init__(self, config: Optional[CorrelationConfig] = None):
        self.config = config or CorrelationConfig()
        self.aligner = TimeSeriesAligner(
            mode=self.config.alignment_mode,
            tolerance_seconds=self.config.alignment_tolerance_seconds,
        )
        self.lead_lag_detector = LeadLagDetector(
            max_lag=self.config.max_lag,
            min_reported_lag=self.config.min_reported_lag,
        )

    def correlate(self, series_a: History, series_b: History) -> float:
        """Pearson correlation of two histories over their aligned timestamps."""
        a, b = self.aligner.align(series_a, series_b)
        return pearson_correlation(a, b)

    def lead_lag(self, series_a: History, series_b: History) -> LeadLagResult:
        a, b = self.aligner.align(series_a, series_b)
        return self.lead_lag_detector.find_lead_lag(a, b)

    def rolling_correlation(self, history_a: History, history_b: History, window: int = 10) -> pd.Series:
        """Rolling Pearson correlation over the aligned histories, indexed by timestamp."""
        a, b = self.aligner.align_series(history_a, history_b)
        return rolling_correlation(a, b, window=window)

    def confidence(self, correlation: float, pvalue: float) -> CorrelationConfidence:
        """Grade a correlation by its strength and significance."""
        cfg = self.config
        strength = abs(correlation)
        if strength > cfg.high_confidence_correlation and pvalue < cfg.high_confidence_pvalue:
            return CorrelationConfidence.HIGH
        if strength > cfg.medium_confidence_correlation and pvalue < cfg.medium_confidence_pvalue:
            return CorrelationConfidence.MEDIUM
        return CorrelationConfidence.LOW

    def analyze_pair(
        self,
        token_a: str,
        history_a: History,
        token_b: str,
        history_b: History
    ) -> AnalysisResult[CorrelationEdge]:
        """
        Correlation edge between two tokens.

        Args:
            token_a: Identifier of the first token
            history_a: Its price history, ordered by timestamp
            token_b: Identifier of the second token
            history_b: Its price history

        Returns:
            AnalysisResult holding the CorrelationEdge, or an UPSTREAM_DATA_GAP,
            INSUFFICIENT_DATA or INVALID_INPUT (unusable timestamps) error
        """
        key = f"{token_a}:{token_b}"
        for token, history in ((token_a, history_a), (token_b, history_b)):
            if not history:
                return AnalysisResult.failure(
                    ErrorKind.UPSTREAM_DATA_GAP, f"no price history for {token}", key=key
                )

        try:
            a, b = self.aligner.align(history_a, history_b)
        except MarketAnalyticsError as e:
            logger.warning(f"Could not align {key}: {e.message}")
            return AnalysisResult.from_exception(e, key=key)
        if len(a) < self.config.min_aligned_points:
            return AnalysisResult.failure(
                ErrorKind.INSUFFICIENT_DATA,
                f"{len(a)} aligned points, need {self.config.min_aligned_points}",
                key=key,
            )

        if token_a == token_b:
            return AnalysisResult.success(
                CorrelationEdge(
                    token_a=token_a,
                    token_b=token_b,
                    correlation=1.0,
                    data_points=len(a),
                    pvalue=0.0,
                    confidence=CorrelationConfidence.HIGH,
                ),
                key=key,
            )

        correlation = pearson_correlation(a, b)
        pvalue = correlation_pvalue(correlation, len(a))
        ll = self.lead_lag_detector.find_lead_lag(a, b)

        cointegrated, coint_pvalue = None, None
        if len(a) >= self.config.cointegration_min_points:
            cointegrated, coint_pvalue = cointegration_test(a, b, min_points=self.config.cointegration_min_points)

        edge = CorrelationEdge(
            token_a=token_a,
            token_b=token_b,
            correlation=correlation,
            lead_lag=ll.to_model(),
            data_points=len(a),
            pvalue=pvalue,
            confidence=self.confidence(correlation, pvalue),
            cointegrated=cointegrated,
            cointegration_pvalue=coint_pvalue,
        )
        return AnalysisResult.success(edge, key=key)

    def correlation_matrix(
        self,
        histories: Mapping[str, History],
        max_workers: Optional[int] = None
    ) -> List[AnalysisResult[CorrelationEdge]]:
        """
        Analyze every unordered pair of histories.

        Pairs are produced for i < j in the mapping's order and the output
        keeps that order regardless of how many workers run.
        """
        tokens = list(histories)
        pairs: List[Tuple[str, str]] = list(combinations(tokens, 2))
        workers = max_workers if max_workers is not None else self.config.max_workers

        def _analyze(pair: Tuple[str, str]) -> AnalysisResult[CorrelationEdge]:
            token_a, token_b = pair
            return self.analyze_pair(token_a, histories[token_a], token_b, histories[token_b])

        if workers > 1 and len(pairs) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(_analyze, pairs))
        else:
            results = [_analyze(pair) for pair in pairs]

        failed = [r for r in results if not r.ok]
        if failed:
            logger.warning(f"Correlation matrix: {len(failed)}/{len(results)} pairs skipped")
        logger.debug(f"Correlation matrix computed for {len(tokens)} tokens, {len(results)} pairs")
        return results

    @staticmethod
    def edges(results: Sequence[AnalysisResult[CorrelationEdge]]) -> List[CorrelationEdge]:
        """The successful edges of a correlation matrix."""
        return [r.value for r in results if r.ok]

