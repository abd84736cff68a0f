"""
Tests for cross-market consistency scanning.

Tests cover:
1. Overround / underround of exclusive outcomes
2. YES/NO parity and term structure
3. Spread, liquidity and staleness checks
4. Ordering and truncation of findings
"""
import pytest

from marketscope.models import MarketMetadata, RelationshipType, Severity
from marketscope.signals.consistency import ConsistencyConfig, ConsistencyScanner
from marketscope.signals.consistency.scanner import format_percent, format_price, format_usd


def market(market_id, yes_mid, **kwargs):
    fields = {
        "id": market_id,
        "title": kwargs.pop("title", market_id.upper()),
        "yes_mid": yes_mid,
        "no_mid": kwargs.pop("no_mid", 1 - yes_mid),
        "liquidity": kwargs.pop("liquidity", 100000.0),
    }
    fields.update(kwargs)
    return MarketMetadata(**fields)


def exclusive(market_id, yes_mid, **kwargs):
    return market(
        market_id, yes_mid, relationship=RelationshipType.EXCLUSIVE, cluster_key="election", **kwargs
    )


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def scanner():
    return ConsistencyScanner()


# ============================================================================
# Exclusive Sum Tests
# ============================================================================

class TestExclusiveSum:
    """Test cases for overround and underround findings."""

    def test_overround(self, scanner):
        findings = scanner.scan([exclusive("a", 0.5), exclusive("b", 0.4), exclusive("c", 0.3)])

        assert len(findings) == 1
        finding = findings[0]
        assert finding.severity == Severity.HIGH
        assert finding.title == "Overround high"
        assert finding.detail == "Exclusive sum 120.0%. Largest contributors: A, B."
        assert "C" not in finding.detail
        assert finding.market_ids == ("a", "b", "c")

    def test_underround(self, scanner):
        findings = scanner.scan([exclusive("a", 0.3), exclusive("b", 0.3), exclusive("c", 0.3)])

        assert [f.title for f in findings] == ["Underround suspicious"]
        assert findings[0].severity == Severity.MEDIUM
        assert findings[0].detail == "Exclusive sum 90.0%. Check stale quotes."

    def test_within_tolerance(self, scanner):
        assert scanner.scan([exclusive("a", 0.51), exclusive("b", 0.50)]) == []

    def test_non_exclusive_markets_are_not_summed(self, scanner):
        assert scanner.scan([market("a", 0.8), market("b", 0.8)]) == []

    def test_single_exclusive_market(self, scanner):
        assert scanner.scan([exclusive("a", 0.3)]) == []

    def test_groups_by_cluster_key(self, scanner):
        markets = [
            exclusive("a", 0.6),
            market("b", 0.6, relationship=RelationshipType.EXCLUSIVE, cluster_key="other"),
        ]
        assert scanner.scan(markets) == []

    def test_untitled_market_uses_id(self, scanner):
        findings = scanner.scan([exclusive("a", 0.7, title=""), exclusive("b", 0.5)])
        assert findings[0].detail.endswith("Largest contributors: a, B.")


# ============================================================================
# Parity and Term Structure Tests
# ============================================================================

class TestParityAndTerm:
    """Test cases for YES/NO parity and deadline ordering."""

    def test_parity_break(self, scanner):
        findings = scanner.scan([market("a", 0.6, no_mid=0.5, spread=0.01)])

        assert len(findings) == 1
        assert findings[0].title == "YES/NO parity break"
        assert findings[0].severity == Severity.HIGH
        assert findings[0].detail == "A: yes+no = 1.10."

    def test_parity_within_tolerance(self, scanner):
        assert scanner.scan([market("a", 0.6, no_mid=0.43)]) == []

    def test_term_structure_violation(self, scanner):
        markets = [
            market("mar", 0.50, term_key="rate-cut", resolution_horizon_days=90),
            market("dec", 0.60, term_key="rate-cut", resolution_horizon_days=30),
        ]

        findings = scanner.scan(markets)

        assert len(findings) == 1
        assert findings[0].title == "Term structure violation"
        assert findings[0].severity == Severity.MEDIUM
        assert findings[0].detail == "DEC (60.0%) > MAR (50.0%)."
        assert findings[0].market_ids == ("dec", "mar")

    def test_term_structure_tolerance(self, scanner):
        markets = [
            market("mar", 0.500, term_key="rate-cut", resolution_horizon_days=90),
            market("dec", 0.505, term_key="rate-cut", resolution_horizon_days=30),
        ]
        assert scanner.scan(markets) == []

    def test_term_structure_needs_horizon(self, scanner):
        markets = [
            market("mar", 0.50, term_key="rate-cut"),
            market("dec", 0.60, term_key="rate-cut", resolution_horizon_days=30),
        ]
        assert scanner.scan(markets) == []


# ============================================================================
# Liquidity Tests
# ============================================================================

class TestLiquidity:
    """Test cases for spread, liquidity and staleness."""

    def test_wide_quoted_spread(self, scanner):
        findings = scanner.scan([market("a", 0.5, spread=0.12)])

        assert [f.title for f in findings] == ["Wide spread"]
        assert findings[0].detail == "A spread 0.120."

    def test_wide_implied_spread(self, scanner):
        findings = scanner.scan([market("a", 0.5, no_mid=0.44)])

        assert [f.title for f in findings] == ["YES/NO parity break", "Wide spread"]
        assert findings[1].detail == "A spread 0.0600."

    def test_thin_liquidity(self, scanner):
        findings = scanner.scan([market("a", 0.5, liquidity=25000)])

        assert findings[0].title == "Thin liquidity"
        assert findings[0].severity == Severity.LOW
        assert findings[0].detail == "A liquidity $25.0K."

    def test_stale_book(self, scanner):
        findings = scanner.scan([market("a", 0.5, last_updated_mins=30)])

        assert findings[0].title == "Stale book"
        assert findings[0].detail == "A last update 30m."

    def test_unknown_update_time_is_not_stale(self, scanner):
        assert scanner.scan([market("a", 0.5)]) == []


# ============================================================================
# Ordering Tests
# ============================================================================

class TestOrdering:
    """Detection order and truncation."""

    def test_detection_order(self, scanner):
        markets = [
            exclusive("a", 0.6, liquidity=1000),
            exclusive("b", 0.6, no_mid=0.3, spread=0.01),
        ]

        titles = [f.title for f in scanner.scan(markets)]

        assert titles == ["Overround high", "YES/NO parity break", "Thin liquidity"]

    def test_truncated_to_max_findings(self, scanner):
        markets = [market(f"m{i}", 0.5, liquidity=100) for i in range(10)]

        findings = scanner.scan(markets)

        assert len(findings) == 6
        assert [f.market_ids[0] for f in findings] == [f"m{i}" for i in range(6)]

    def test_custom_cap(self):
        scanner = ConsistencyScanner(ConsistencyConfig(max_findings=2))
        markets = [market(f"m{i}", 0.5, liquidity=100) for i in range(5)]
        assert len(scanner.scan(markets)) == 2


# ============================================================================
# Formatting Tests
# ============================================================================

class TestFormatting:
    """Display helpers used in finding details."""

    def test_format_percent(self):
        assert format_percent(0.1234) == "12.3%"

    def test_format_price(self):
        assert format_price(0.05) == "0.0500"
        assert format_price(0.25) == "0.250"

    @pytest.mark.parametrize("value,expected", [
        (1.5e9, "$1.5B"),
        (2.5e6, "$2.5M"),
        (60000, "$60.0K"),
        (999, "$999"),
    ])
    def test_format_usd(self, value, expected):
        assert format_usd(value) == expected
