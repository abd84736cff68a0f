import numpy as np
from typing import Dict, Iterator, Sequence
from dataclasses import dataclass, field

from marketscope.models import LeadLag, LeadLagDirection
from .methods import pearson_correlation

@dataclass
class LeadLagResult:
    direction: LeadLagDirection
    lag_periods: int       # magnitude of the winning lag, 0 when direction is none
    best_lag: int          # signed winning lag, positive when A leads
    correlation: float     # correlation at best_lag
    cross_correlation: Dict[int, float] = field(default_factory=dict)

    def to_model(self) -> LeadLag:
        return LeadLag(direction=self.direction, lag_periods=self.lag_periods)

def _lag_order(max_lag: int) -> Iterator[int]:
    yield 0
    for k in range(1, max_lag + 1):
        yield k
        yield -k

class LeadLagDetector:
    """
    Finds the integer offset at which two aligned series correlate best.

    For lag k > 0 A's past (A[:-k]) is compared with B's present (B[k:]),
    so a winning positive lag means A leads B.
    """

    TIE_EPSILON = 1e-12

    def __init__(self, max_lag: int = 5, min_reported_lag: int = 2):
        self.max_lag = max_lag
        self.min_reported_lag = min_reported_lag

    def shifted_correlation(self, a: np.ndarray, b: np.ndarray, lag: int) -> float:
        if lag > 0:
            return pearson_correlation(a[:-lag], b[lag:])
        if lag < 0:
            k = -lag
            return pearson_correlation(a[k:], b[:-k])
        return pearson_correlation(a, b)

    def find_lead_lag(self, series_a: Sequence[float], series_b: Sequence[float]) -> LeadLagResult:
        """
        Determine if one market leads the other using shifted correlation.

        Lags are examined in the order 0, +1, -1, +2, -2, ... and a lag only
        replaces the incumbent when its absolute correlation is strictly larger,
        so ties keep the smaller offset.
        """
        a = np.asarray(series_a, dtype=float)
        b = np.asarray(series_b, dtype=float)
        n = min(len(a), len(b))
        if n < 3:
            return LeadLagResult(LeadLagDirection.NONE, 0, 0, 0.0, {})
        a, b = a[:n], b[:n]

        bound = min(self.max_lag, n // 2)
        corrs: Dict[int, float] = {}
        best_lag = 0
        best_corr = None
        for lag in _lag_order(bound):
            c = self.shifted_correlation(a, b, lag)
            corrs[lag] = c
            if best_corr is None or abs(c) > abs(best_corr) + self.TIE_EPSILON:
                best_lag, best_corr = lag, c

        if abs(best_lag) < self.min_reported_lag:
            direction = LeadLagDirection.NONE
            magnitude = 0
        else:
            direction = LeadLagDirection.LEADS if best_lag > 0 else LeadLagDirection.LAGS
            magnitude = abs(best_lag)

        return LeadLagResult(
            direction=direction,
            lag_periods=magnitude,
            best_lag=best_lag,
            correlation=best_corr,
            cross_correlation=corrs
        )
