"""
Tests for hedge structure construction and hedge suggestions.

Tests cover:
1. Sizing in shares and notional with the risk cap
2. Bullish, bearish and relative structures
3. Automatic hedge leg
4. Hedge suggestion ranking
"""
import pytest

from marketscope.models import (
    CorrelationEdge,
    HedgeRequest,
    InefficiencySignal,
    MarketMetadata,
    Outcome,
    SignalType,
    SizeMode,
    TradeSide,
    ViewMode,
)
from marketscope.strategy import HedgeStrategyBuilder, StrategyConfig


def market(market_id, yes_mid, liquidity=50000.0, cluster_key="fed", **kwargs):
    return MarketMetadata(
        id=market_id,
        title=kwargs.pop("title", market_id.title()),
        yes_mid=yes_mid,
        no_mid=kwargs.pop("no_mid", round(1 - yes_mid, 4)),
        liquidity=liquidity,
        cluster_key=cluster_key,
        yes_token_id=f"{market_id}-yes",
        no_token_id=f"{market_id}-no",
        **kwargs,
    )


def edge(a, b, correlation):
    return CorrelationEdge(token_a=a, token_b=b, correlation=correlation, data_points=50)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def builder():
    return HedgeStrategyBuilder()


@pytest.fixture
def primary():
    return market("primary", 0.60, liquidity=80000)


@pytest.fixture
def cluster():
    return [
        market("deep", 0.30, liquidity=200000),
        market("top", 0.45, liquidity=50000),
        market("elsewhere", 0.20, liquidity=900000, cluster_key="ecb"),
    ]


# ============================================================================
# Sizing Tests
# ============================================================================

class TestSizing:
    """Test cases for share sizing and the risk cap."""

    def test_capped_by_risk_budget(self, builder):
        request = HedgeRequest(mode=ViewMode.BULLISH, size=5000, risk_cap=1500)

        requested, capped = builder.size_shares(0.60, request)

        assert requested == 5000
        assert capped == pytest.approx(2500)

    def test_fits_within_budget(self, builder):
        requested, capped = builder.size_shares(0.60, HedgeRequest(size=100, risk_cap=1000))
        assert requested == capped == 100

    def test_notional_sizing(self, builder):
        request = HedgeRequest(size_mode=SizeMode.NOTIONAL, size=60, risk_cap=1000)

        requested, capped = builder.size_shares(0.60, request)

        assert requested == pytest.approx(100)
        assert capped == pytest.approx(100)

    def test_entry_price_floor(self, builder):
        requested, capped = builder.size_shares(0.0, HedgeRequest(size=1000, risk_cap=5))

        assert requested == 1000
        assert capped == pytest.approx(500)

    def test_risk_cap_bounds_primary_cost(self, builder, primary, cluster):
        request = HedgeRequest(size=1e6, risk_cap=750)

        strategy = builder.build(primary, cluster, request)

        leg = strategy.legs[0]
        assert leg.price * leg.size <= request.risk_cap + 1e-9


# ============================================================================
# Structure Tests
# ============================================================================

class TestBuild:
    """Test cases for HedgeStrategyBuilder.build."""

    def test_bullish_structure(self, builder, primary, cluster):
        request = HedgeRequest(mode=ViewMode.BULLISH, size=5000, risk_cap=1500, correlation_weight=0.5)

        strategy = builder.build(primary, cluster, request)

        assert len(strategy.legs) == 2
        main, hedge = strategy.legs
        assert main.market == "primary"
        assert main.outcome == Outcome.YES
        assert main.side == TradeSide.BUY
        assert main.price == 0.60
        assert main.size == pytest.approx(2500)
        assert main.token_id == "primary-yes"

        # Hedge is the alternative with the highest YES mid
        assert hedge.market == "top"
        assert hedge.outcome == Outcome.YES
        assert hedge.size == pytest.approx(1250)
        assert hedge.rationale == "Hedge"

        assert strategy.rationale == (
            "Primary long YES expresses bullish view.",
            "Sizing capped by risk budget (2500 of 5000 shares).",
            "Hedge leg chosen from top alternative in the cluster.",
        )

    def test_bearish_structure(self, builder, primary):
        strategy = builder.build(primary, [], HedgeRequest(mode=ViewMode.BEARISH, size=100))

        assert len(strategy.legs) == 1
        leg = strategy.legs[0]
        assert leg.outcome == Outcome.NO
        assert leg.price == 0.40
        assert leg.token_id == "primary-no"
        assert strategy.rationale == (
            "Primary long NO expresses bearish view.",
            "Requested size fits within the risk budget.",
        )

    def test_relative_prefers_same_cluster(self, builder, primary, cluster):
        request = HedgeRequest(mode=ViewMode.RELATIVE, size=100, correlation_weight=0.4)

        strategy = builder.build(primary, cluster, request)

        fade, pair = strategy.legs
        assert fade.market == "primary"
        assert fade.outcome == Outcome.NO
        assert fade.rationale == "Fade primary"
        assert pair.market == "deep"
        assert pair.outcome == Outcome.YES
        assert pair.size == pytest.approx(40)
        assert "Hedge size scaled by correlation weight." in strategy.rationale

    def test_relative_without_cluster_key(self, builder, cluster):
        primary = market("primary", 0.60, cluster_key=None)

        strategy = builder.build(primary, cluster, HedgeRequest(mode=ViewMode.RELATIVE))

        assert strategy.legs[1].market == "elsewhere"

    def test_relative_without_alternative(self, builder, primary):
        strategy = builder.build(primary, [primary], HedgeRequest(mode=ViewMode.RELATIVE))

        assert strategy.is_empty
        assert strategy.rationale == ("No alternative market available for a relative structure.",)

    def test_single_market_has_no_hedge(self, builder, primary):
        strategy = builder.build(primary, [primary], HedgeRequest())

        assert len(strategy.legs) == 1
        assert strategy.legs[0].market == "primary"

    def test_default_request(self, builder, primary):
        strategy = builder.build(primary, [])

        assert strategy.correlation_weight == 0.5
        assert strategy.legs[0].size == 100

    def test_primary_in_candidates_is_ignored(self, builder, primary, cluster):
        strategy = builder.build(primary, [primary, *cluster], HedgeRequest())
        assert [leg.market for leg in strategy.legs] == ["primary", "top"]


# ============================================================================
# Hedge Suggestion Tests
# ============================================================================

class TestSuggestHedges:
    """Test cases for suggest_hedges."""

    def test_negative_correlation_hedges(self, builder, primary):
        hedger = market("hedger", 0.3)

        suggestions = builder.suggest_hedges(primary, [hedger], [edge("primary-yes", "hedger-yes", -0.6)])

        assert len(suggestions) == 1
        assert suggestions[0].hedge_ratio == pytest.approx(0.6)
        assert suggestions[0].confidence == 0.6
        assert suggestions[0].rationale == "Negative correlation (-60%) provides downside protection"
        assert not suggestions[0].is_spread_trade

    def test_spread_trade_needs_divergence(self, builder, primary):
        twin = market("twin", 0.58)
        calm = market("calm", 0.57)
        edges = [edge("primary-yes", "twin-yes", 0.9), edge("calm-yes", "primary-yes", 0.95)]
        signals = [InefficiencySignal(
            signal_type=SignalType.ARBITRAGE,
            primary_market="primary-yes",
            related_market="twin-yes",
            score=2.0,
            confidence=0.8,
            description="Divergence detected with correlated market (90% correlation)",
        )]

        suggestions = builder.suggest_hedges(primary, [calm, twin], edges, signals)

        assert [s.market.id for s in suggestions] == ["twin"]
        assert suggestions[0].hedge_ratio == 1.0
        assert suggestions[0].confidence == 0.8
        assert suggestions[0].is_spread_trade

    @pytest.mark.parametrize("signal_type,qualifies", [
        (SignalType.DIVERGENCE, True),
        (SignalType.SPREAD, False),
        (SignalType.MOMENTUM, False),
    ])
    def test_which_signals_mark_divergence(self, builder, primary, signal_type, qualifies):
        twin = market("twin", 0.58)
        signals = [InefficiencySignal(
            signal_type=signal_type,
            primary_market="primary-yes",
            related_market="twin-yes",
            score=1.0,
            confidence=0.8,
            description="signal",
        )]

        suggestions = builder.suggest_hedges(primary, [twin], [edge("primary-yes", "twin-yes", 0.9)], signals)

        assert bool(suggestions) == qualifies

    def test_uncorrelated_markets_are_skipped(self, builder, primary):
        other = market("other", 0.5)
        assert builder.suggest_hedges(primary, [other], [edge("primary-yes", "other-yes", 0.1)]) == []

    def test_no_edge_no_suggestion(self, builder, primary, cluster):
        assert builder.suggest_hedges(primary, cluster, []) == []

    def test_ranked_and_capped(self, builder, primary):
        hedgers = [market(f"h{i}", 0.3) for i in range(6)]
        edges = [edge("primary-yes", f"h{i}-yes", -0.5) for i in range(6)]
        edges.append(edge("primary-yes", "twin-yes", 0.9))
        twin = market("twin", 0.6)
        signals = [InefficiencySignal(
            signal_type=SignalType.ARBITRAGE,
            primary_market="primary-yes",
            related_market="twin-yes",
            score=1.0,
            confidence=0.8,
            description="divergence",
        )]

        suggestions = builder.suggest_hedges(primary, [*hedgers, twin], edges, signals)

        assert len(suggestions) == 5
        assert suggestions[0].market.id == "twin"
        assert [s.market.id for s in suggestions[1:]] == ["h0", "h1", "h2", "h3"]

    def test_custom_suggestion_cap(self, primary):
        builder = HedgeStrategyBuilder(StrategyConfig(max_suggestions=1))
        hedgers = [market(f"h{i}", 0.3) for i in range(3)]
        edges = [edge("primary-yes", f"h{i}-yes", -0.5) for i in range(3)]

        assert len(builder.suggest_hedges(primary, hedgers, edges)) == 1
