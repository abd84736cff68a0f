import logging
import math
from typing import Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.tsa.stattools import coint

logger = logging.getLogger(__name__)

def pearson_correlation(series_a: Sequence[float], series_b: Sequence[float]) -> float:
    """
    Standard linear correlation.

    Returns 0 for fewer than 2 points or a constant series. The result is
    clamped into [-1, 1] and identical when the arguments are swapped.
    """
    a = np.asarray(series_a, dtype=float)
    b = np.asarray(series_b, dtype=float)
    n = min(len(a), len(b))
    if n < 2:
        return 0.0
    a, b = a[:n], b[:n]
    if np.ptp(a) == 0 or np.ptp(b) == 0:
        return 0.0

    da = a - a.mean()
    db = b - b.mean()
    denom = math.sqrt(float(np.dot(da, da)) * float(np.dot(db, db)))
    if denom == 0:
        return 0.0
    r = float(np.dot(da, db)) / denom
    return max(-1.0, min(1.0, r))

def correlation_pvalue(correlation: float, n: int) -> float:
    """
    Two-sided p-value of a Pearson correlation over n points (t-test, n - 2 dof).

    Returns 1 when there are fewer than 3 points and 0 for a perfect correlation.
    """
    if n < 3:
        return 1.0
    r = abs(correlation)
    if r >= 1:
        return 0.0
    t = r * math.sqrt((n - 2) / (1 - r * r))
    return float(min(1.0, 2 * stats.t.sf(t, n - 2)))

def rolling_correlation(series_a: pd.Series, series_b: pd.Series, window: int = 10) -> pd.Series:
    """Time-varying correlation."""
    return series_a.rolling(window=window).corr(series_b)

def cointegration_test(series_a: Sequence[float], series_b: Sequence[float], min_points: int = 100) -> Tuple[bool, float]:
    """
    Test for cointegration (long-term relationship).
    Returns (is_cointegrated, p_value)
    """
    if len(series_a) < min_points: # Need sufficient data
        return False, 1.0

    try:
        # Engle-Granger test
        _, pvalue, _ = coint(np.asarray(series_a, dtype=float), np.asarray(series_b, dtype=float))
    except (ValueError, np.linalg.LinAlgError) as e:
        logger.debug(f"Cointegration test failed: {e}")
        return False, 1.0
    if not np.isfinite(pvalue):
        return False, 1.0
    return bool(pvalue < 0.05), float(pvalue)
