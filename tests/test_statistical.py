"""
Tests for time-series alignment, correlation and lead-lag detection.

Tests cover:
1. Exact and nearest timestamp alignment
2. Pearson correlation edge cases
3. Lead-lag direction and tie-breaking
4. Pairwise analysis and the correlation matrix
"""
from datetime import datetime, timedelta, timezone

import numpy as np
import pandas as pd
import pytest

from marketscope.exceptions import ErrorKind, InvalidInputError
from marketscope.models import CorrelationConfidence, LeadLagDirection, PricePoint
from marketscope.correlation.statistical import (
    CorrelationAnalyzer,
    CorrelationConfig,
    LeadLagDetector,
    TimeSeriesAligner,
    cointegration_test,
    correlation_pvalue,
    pearson_correlation,
)

START = datetime(2024, 1, 1)


def make_history(prices, step_minutes=1, start=START):
    return [
        PricePoint(timestamp=start + timedelta(minutes=i * step_minutes), price=float(p))
        for i, p in enumerate(prices)
    ]


def random_walk(n, seed=0, scale=0.01):
    rng = np.random.default_rng(seed)
    return np.clip(0.5 + np.cumsum(rng.normal(0, scale, n)), 0.01, 0.99)


def leading_pair(n=200, shift=3, seed=0):
    """Two histories on the same clock where the first leads the second by shift steps."""
    base = random_walk(n + shift, seed=seed)
    return make_history(base[shift:]), make_history(base[:n])


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def analyzer():
    return CorrelationAnalyzer()


@pytest.fixture
def walk_history():
    return make_history(random_walk(120, seed=7))


# ============================================================================
# Alignment Tests
# ============================================================================

class TestTimeSeriesAligner:
    """Test cases for TimeSeriesAligner."""

    def test_exact_keeps_common_timestamps_in_a_order(self):
        a = make_history([0.1, 0.2, 0.3, 0.4])
        b = [
            PricePoint(timestamp=START + timedelta(minutes=3), price=0.9),
            PricePoint(timestamp=START + timedelta(minutes=1), price=0.7),
        ]

        xa, xb = TimeSeriesAligner().align(a, b)

        assert list(xa) == [0.2, 0.4]
        assert list(xb) == [0.7, 0.9]

    def test_exact_uses_first_duplicate_in_b(self):
        a = make_history([0.1, 0.2])
        b = [
            PricePoint(timestamp=START, price=0.5),
            PricePoint(timestamp=START, price=0.6),
        ]

        xa, xb = TimeSeriesAligner().align(a, b)

        assert list(xa) == [0.1]
        assert list(xb) == [0.5]

    def test_empty_side_aligns_to_nothing(self):
        xa, xb = TimeSeriesAligner().align(make_history([0.1, 0.2]), [])
        assert len(xa) == 0 and len(xb) == 0

    def test_nearest_within_tolerance(self):
        a = make_history([0.1, 0.2, 0.3])
        b = [
            PricePoint(timestamp=START + timedelta(seconds=5), price=0.5),
            PricePoint(timestamp=START + timedelta(minutes=1, seconds=-3), price=0.6),
        ]

        xa, xb = TimeSeriesAligner(mode="nearest", tolerance_seconds=10).align(a, b)

        # The third point of A is two minutes out and has no partner
        assert list(xa) == [0.1, 0.2]
        assert list(xb) == [0.5, 0.6]

    def test_nearest_preserves_a_order(self):
        times = [START + timedelta(minutes=m) for m in (2, 0, 1)]
        a = [PricePoint(timestamp=t, price=p) for t, p in zip(times, (0.3, 0.1, 0.2))]
        b = make_history([0.7, 0.8, 0.9])

        xa, xb = TimeSeriesAligner(mode="nearest", tolerance_seconds=1).align(a, b)

        assert list(xa) == [0.3, 0.1, 0.2]
        assert list(xb) == [0.9, 0.7, 0.8]

    def test_to_series_index(self, walk_history):
        series = TimeSeriesAligner().to_series(walk_history)

        assert isinstance(series.index, pd.DatetimeIndex)
        assert len(series) == 120

    def test_invalid_mode(self):
        with pytest.raises(InvalidInputError):
            TimeSeriesAligner(mode="linear")
        with pytest.raises(InvalidInputError):
            TimeSeriesAligner(mode="nearest", tolerance_seconds=-1)


# ============================================================================
# Pearson Correlation Tests
# ============================================================================

class TestPearsonCorrelation:
    """Test cases for pearson_correlation."""

    def test_perfect_positive(self):
        assert pearson_correlation([1, 2, 3, 4], [2, 4, 6, 8]) == pytest.approx(1.0)

    def test_perfect_negative(self):
        assert pearson_correlation([1, 2, 3, 4], [8, 6, 4, 2]) == pytest.approx(-1.0)

    def test_constant_series_is_zero(self):
        assert pearson_correlation([0.5, 0.5, 0.5], [0.1, 0.2, 0.3]) == 0.0

    def test_too_few_points(self):
        assert pearson_correlation([0.5], [0.4]) == 0.0
        assert pearson_correlation([], []) == 0.0

    @pytest.mark.parametrize("seed", range(5))
    def test_symmetric_and_bounded(self, seed):
        rng = np.random.default_rng(seed)
        a, b = rng.random(50), rng.random(50)

        r = pearson_correlation(a, b)

        assert r == pearson_correlation(b, a)
        assert -1.0 <= r <= 1.0

    def test_self_correlation(self):
        walk = random_walk(80, seed=3)
        assert abs(pearson_correlation(walk, walk) - 1.0) < 1e-9


# ============================================================================
# Lead-Lag Tests
# ============================================================================

class TestLeadLag:
    """Test cases for LeadLagDetector."""

    def test_detects_leader(self):
        a, b = leading_pair(shift=3)
        xa = np.array([p.price for p in a])
        xb = np.array([p.price for p in b])

        result = LeadLagDetector().find_lead_lag(xa, xb)

        assert result.direction == LeadLagDirection.LEADS
        assert result.lag_periods == 3
        assert result.correlation == pytest.approx(1.0)

    def test_detects_follower(self):
        a, b = leading_pair(shift=3)
        xa = np.array([p.price for p in a])
        xb = np.array([p.price for p in b])

        result = LeadLagDetector().find_lead_lag(xb, xa)

        assert result.direction == LeadLagDirection.LAGS
        assert result.lag_periods == 3
        assert result.best_lag == -3

    def test_single_step_lag_is_not_reported(self):
        a, b = leading_pair(shift=1)
        xa = np.array([p.price for p in a])
        xb = np.array([p.price for p in b])

        result = LeadLagDetector().find_lead_lag(xa, xb)

        assert result.best_lag == 1
        assert result.direction == LeadLagDirection.NONE
        assert result.lag_periods == 0

    def test_identical_series(self):
        walk = random_walk(100, seed=11)

        result = LeadLagDetector().find_lead_lag(walk, walk)

        assert result.direction == LeadLagDirection.NONE
        assert result.lag_periods == 0
        assert result.best_lag == 0

    def test_lag_bounded_by_half_length(self):
        result = LeadLagDetector(max_lag=5).find_lead_lag(random_walk(6), random_walk(6, seed=1))
        assert set(result.cross_correlation) == {0, 1, -1, 2, -2, 3, -3}

    def test_short_series(self):
        result = LeadLagDetector().find_lead_lag([0.1, 0.2], [0.2, 0.3])

        assert result.direction == LeadLagDirection.NONE
        assert result.cross_correlation == {}


# ============================================================================
# Pairwise Analysis Tests
# ============================================================================

class TestCorrelationAnalyzer:
    """Test cases for CorrelationAnalyzer."""

    def test_self_pair(self, analyzer, walk_history):
        result = analyzer.analyze_pair("tok", walk_history, "tok", walk_history)

        assert result.ok
        assert result.value.correlation == 1.0
        assert result.value.lead_lag.direction == LeadLagDirection.NONE

    def test_symmetric_correlation(self, analyzer):
        a = make_history(random_walk(60, seed=1))
        b = make_history(random_walk(60, seed=2))

        ab = analyzer.analyze_pair("a", a, "b", b).value
        ba = analyzer.analyze_pair("b", b, "a", a).value

        assert ab.correlation == ba.correlation

    def test_edge_lead_lag(self, analyzer):
        a, b = leading_pair(shift=3)

        edge = analyzer.analyze_pair("a", a, "b", b).unwrap()

        assert edge.lead_lag.direction == LeadLagDirection.LEADS
        assert edge.lead_lag.lag_periods == 3
        assert edge.data_points == 200

    def test_empty_history_is_data_gap(self, analyzer, walk_history):
        result = analyzer.analyze_pair("a", walk_history, "b", [])

        assert not result.ok
        assert result.error.kind == ErrorKind.UPSTREAM_DATA_GAP
        assert result.key == "a:b"

    def test_single_aligned_point_is_insufficient(self, analyzer):
        a = make_history([0.1, 0.2])
        b = make_history([0.3], start=START + timedelta(minutes=1))

        result = analyzer.analyze_pair("a", a, "b", b)

        assert result.error.kind == ErrorKind.INSUFFICIENT_DATA

    def test_disjoint_timestamps_are_insufficient(self, analyzer):
        a = make_history([0.1, 0.2, 0.3])
        b = make_history([0.1, 0.2, 0.3], start=START + timedelta(days=1))

        assert analyzer.analyze_pair("a", a, "b", b).error.kind == ErrorKind.INSUFFICIENT_DATA

    def test_naive_and_utc_timestamps_align(self, analyzer):
        prices = random_walk(30, seed=3)
        naive = make_history(prices)
        aware = make_history(prices, start=START.replace(tzinfo=timezone.utc))

        result = analyzer.analyze_pair("a", naive, "b", aware)

        assert result.ok
        assert result.value.data_points == 30
        assert result.value.correlation == pytest.approx(1.0)

    def test_cointegration_only_with_enough_points(self, analyzer):
        short_a, short_b = leading_pair(n=50)
        long_a, long_b = leading_pair(n=150)

        short_edge = analyzer.analyze_pair("a", short_a, "b", short_b).unwrap()
        long_edge = analyzer.analyze_pair("a", long_a, "b", long_b).unwrap()

        assert short_edge.cointegrated is None
        assert long_edge.cointegrated is not None
        assert 0.0 <= long_edge.cointegration_pvalue <= 1.0

    def test_cointegration_requires_min_points(self):
        assert cointegration_test([0.1] * 10, [0.2] * 10) == (False, 1.0)

    def test_rolling_correlation(self, analyzer):
        a = make_history(random_walk(40, seed=1))
        b = make_history(random_walk(40, seed=2))

        rolling = analyzer.rolling_correlation(a, b, window=10)

        assert len(rolling) == 40
        assert rolling.iloc[:9].isna().all()
        assert rolling.iloc[9:].between(-1.0001, 1.0001).all()


# ============================================================================
# Correlation Confidence Tests
# ============================================================================

class TestCorrelationConfidence:
    """Test cases for correlation p-values and confidence grades."""

    def test_pvalue_bounds(self):
        assert correlation_pvalue(0.0, 50) == pytest.approx(1.0)
        assert correlation_pvalue(1.0, 50) == 0.0
        assert correlation_pvalue(-1.0, 50) == 0.0
        assert correlation_pvalue(0.9, 2) == 1.0

    def test_pvalue_falls_with_strength_and_length(self):
        assert 0.10 < correlation_pvalue(0.5, 10) < 0.20
        assert correlation_pvalue(0.5, 10) == correlation_pvalue(-0.5, 10)
        assert correlation_pvalue(0.8, 10) < correlation_pvalue(0.5, 10)
        assert correlation_pvalue(0.5, 100) < correlation_pvalue(0.5, 10)

    @pytest.mark.parametrize("correlation,pvalue,expected", [
        (0.8, 0.01, CorrelationConfidence.HIGH),
        (-0.75, 0.04, CorrelationConfidence.HIGH),
        (0.8, 0.07, CorrelationConfidence.MEDIUM),
        (0.6, 0.01, CorrelationConfidence.MEDIUM),
        (0.6, 0.2, CorrelationConfidence.LOW),
        (0.4, 0.001, CorrelationConfidence.LOW),
    ])
    def test_grades(self, analyzer, correlation, pvalue, expected):
        assert analyzer.confidence(correlation, pvalue) == expected

    def test_configured_thresholds(self):
        strict = CorrelationAnalyzer(CorrelationConfig(high_confidence_correlation=0.9))
        assert strict.confidence(0.8, 0.01) == CorrelationConfidence.MEDIUM

    def test_edge_carries_pvalue_and_confidence(self, analyzer):
        a, b = leading_pair(n=200)

        edge = analyzer.analyze_pair("a", a, "b", b).unwrap()

        assert edge.pvalue == correlation_pvalue(edge.correlation, edge.data_points)
        assert edge.pvalue < 0.05
        assert edge.confidence == CorrelationConfidence.HIGH

    def test_short_pair_is_low_confidence(self, analyzer):
        a = make_history([0.1, 0.2])
        b = make_history([0.2, 0.1])

        edge = analyzer.analyze_pair("a", a, "b", b).unwrap()

        assert edge.correlation == pytest.approx(-1.0)
        assert edge.pvalue == 1.0
        assert edge.confidence == CorrelationConfidence.LOW


# ============================================================================
# Correlation Matrix Tests
# ============================================================================

class TestCorrelationMatrix:
    """Test cases for correlation_matrix."""

    def test_pair_order_and_error_slots(self, analyzer):
        histories = {
            "a": make_history(random_walk(30, seed=1)),
            "b": make_history(random_walk(30, seed=2)),
            "c": [],
            "d": make_history(random_walk(30, seed=4)),
        }

        results = analyzer.correlation_matrix(histories)

        assert [r.key for r in results] == ["a:b", "a:c", "a:d", "b:c", "b:d", "c:d"]
        failed = [r.key for r in results if not r.ok]
        assert failed == ["a:c", "b:c", "c:d"]
        assert len(CorrelationAnalyzer.edges(results)) == 3

    def test_workers_do_not_change_results(self):
        histories = {
            f"t{i}": make_history(random_walk(40, seed=i)) for i in range(6)
        }

        serial = CorrelationAnalyzer(CorrelationConfig(max_workers=1)).correlation_matrix(histories)
        parallel = CorrelationAnalyzer(CorrelationConfig(max_workers=4)).correlation_matrix(histories)

        assert len(serial) == 15
        assert [r.key for r in serial] == [r.key for r in parallel]
        assert [r.value for r in serial] == [r.value for r in parallel]

    def test_mixed_timezones_keep_every_slot(self, analyzer):
        prices = random_walk(30, seed=4)
        histories = {
            "naive": make_history(prices),
            "utc": make_history(prices, start=START.replace(tzinfo=timezone.utc)),
            "tokyo": make_history(prices, start=datetime(2024, 1, 1, 9, tzinfo=timezone(timedelta(hours=9)))),
        }

        results = analyzer.correlation_matrix(histories)

        assert [r.key for r in results] == ["naive:utc", "naive:tokyo", "utc:tokyo"]
        assert all(r.ok and r.value.data_points == 30 for r in results)

    def test_single_history(self, analyzer, walk_history):
        assert analyzer.correlation_matrix({"a": walk_history}) == []

    def test_nearest_alignment_config(self):
        analyzer = CorrelationAnalyzer(
            CorrelationConfig(alignment_mode="nearest", alignment_tolerance_seconds=30)
        )
        walk = random_walk(20, seed=5)
        a = make_history(walk)
        b = make_history(walk, start=START + timedelta(seconds=10))

        edge = analyzer.analyze_pair("a", a, "b", b).unwrap()

        assert edge.data_points == 20
        assert edge.correlation == pytest.approx(1.0)
