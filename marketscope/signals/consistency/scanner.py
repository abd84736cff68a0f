"""
Cross-market consistency scanning.

Pure checks over a cluster of market snapshots: exclusive outcomes should
sum to ~1, YES and NO should sum to ~1, an earlier deadline should not be
priced above a later one, and books should be tight, liquid and fresh.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from marketscope.config.settings import Config
from marketscope.models import ConsistencyFinding, MarketMetadata, RelationshipType, Severity

logger = logging.getLogger(__name__)


def format_percent(value: float) -> str:
    return f"{value * 100:.1f}%"


def format_price(value: float) -> str:
    return f"{value:.4f}" if value < 0.1 else f"{value:.3f}"


def format_usd(value: float) -> str:
    if value >= 1e9:
        return f"${value / 1e9:.1f}B"
    if value >= 1e6:
        return f"${value / 1e6:.1f}M"
    if value >= 1e3:
        return f"${value / 1e3:.1f}K"
    return f"${value:.0f}"


def _label(market: MarketMetadata) -> str:
    return market.title or market.id


@dataclass(frozen=True)
class ConsistencyConfig:
    """Tolerances for consistency findings."""
    overround_ceiling: float = 1.03
    underround_floor: float = 0.97
    parity_tolerance: float = 0.04
    term_structure_tolerance: float = 0.01
    wide_spread_threshold: float = 0.05
    thin_liquidity_floor: float = 60000.0
    stale_book_minutes: float = 15.0
    max_findings: int = 6

    @classmethod
    def from_settings(cls, settings: Config) -> "ConsistencyConfig":
        return cls(
            overround_ceiling=settings.overround_ceiling,
            underround_floor=settings.underround_floor,
            parity_tolerance=settings.parity_tolerance,
            term_structure_tolerance=settings.term_structure_tolerance,
            wide_spread_threshold=settings.wide_spread_threshold,
            thin_liquidity_floor=settings.thin_liquidity_floor,
            stale_book_minutes=settings.stale_book_minutes,
            max_findings=settings.max_findings,
        )


class ConsistencyScanner:
    """Runs every consistency check over a cluster, in a fixed order."""

    def __init__(self, config: Optional[ConsistencyConfig] = None):
        self.config = config or ConsistencyConfig()

    def scan(self, markets: Sequence[MarketMetadata]) -> List[ConsistencyFinding]:
        """
        Scan a cluster of markets.

        Findings come out in detection order (overround and parity, then term
        structure, then spread/liquidity/staleness) and are truncated to
        max_findings.
        """
        findings: List[ConsistencyFinding] = []
        findings.extend(self.check_overround(markets))
        findings.extend(self.check_parity(markets))
        findings.extend(self.check_term_structure(markets))
        findings.extend(self.check_liquidity(markets))

        if len(findings) > self.config.max_findings:
            logger.debug(
                f"Truncating {len(findings)} consistency findings to {self.config.max_findings}"
            )
        return findings[:self.config.max_findings]

    def check_overround(self, markets: Sequence[MarketMetadata]) -> List[ConsistencyFinding]:
        cfg = self.config
        groups: Dict[Optional[str], List[MarketMetadata]] = defaultdict(list)
        for market in markets:
            if market.relationship == RelationshipType.EXCLUSIVE:
                groups[market.cluster_key].append(market)

        findings = []
        for group in groups.values():
            if len(group) < 2:
                continue
            total = sum(m.yes_mid for m in group)
            ids = tuple(m.id for m in group)
            if total > cfg.overround_ceiling:
                top = sorted(group, key=lambda m: m.yes_mid, reverse=True)[:2]
                findings.append(ConsistencyFinding(
                    severity=Severity.HIGH,
                    title="Overround high",
                    detail=(
                        f"Exclusive sum {format_percent(total)}. "
                        f"Largest contributors: {', '.join(_label(m) for m in top)}."
                    ),
                    market_ids=ids,
                ))
            elif total < cfg.underround_floor:
                findings.append(ConsistencyFinding(
                    severity=Severity.MEDIUM,
                    title="Underround suspicious",
                    detail=f"Exclusive sum {format_percent(total)}. Check stale quotes.",
                    market_ids=ids,
                ))
        return findings

    def check_parity(self, markets: Sequence[MarketMetadata]) -> List[ConsistencyFinding]:
        findings = []
        for market in markets:
            parity = market.yes_mid + market.no_mid
            if abs(parity - 1) > self.config.parity_tolerance:
                findings.append(ConsistencyFinding(
                    severity=Severity.HIGH,
                    title="YES/NO parity break",
                    detail=f"{_label(market)}: yes+no = {parity:.2f}.",
                    market_ids=(market.id,),
                ))
        return findings

    def check_term_structure(self, markets: Sequence[MarketMetadata]) -> List[ConsistencyFinding]:
        """Within a term key, a shorter deadline must not be priced above a longer one."""
        groups: Dict[str, List[MarketMetadata]] = defaultdict(list)
        for market in markets:
            if market.term_key is not None and market.resolution_horizon_days is not None:
                groups[market.term_key].append(market)

        findings = []
        for group in groups.values():
            if len(group) < 2:
                continue
            ordered = sorted(group, key=lambda m: m.resolution_horizon_days)
            for prev, nxt in zip(ordered, ordered[1:]):
                if prev.yes_mid > nxt.yes_mid + self.config.term_structure_tolerance:
                    findings.append(ConsistencyFinding(
                        severity=Severity.MEDIUM,
                        title="Term structure violation",
                        detail=(
                            f"{_label(prev)} ({format_percent(prev.yes_mid)}) > "
                            f"{_label(nxt)} ({format_percent(nxt.yes_mid)})."
                        ),
                        market_ids=(prev.id, nxt.id),
                    ))
        return findings

    def check_liquidity(self, markets: Sequence[MarketMetadata]) -> List[ConsistencyFinding]:
        cfg = self.config
        findings = []
        for market in markets:
            spread = market.effective_spread
            if spread > cfg.wide_spread_threshold:
                findings.append(ConsistencyFinding(
                    severity=Severity.MEDIUM,
                    title="Wide spread",
                    detail=f"{_label(market)} spread {format_price(spread)}.",
                    market_ids=(market.id,),
                ))
            if market.liquidity < cfg.thin_liquidity_floor:
                findings.append(ConsistencyFinding(
                    severity=Severity.LOW,
                    title="Thin liquidity",
                    detail=f"{_label(market)} liquidity {format_usd(market.liquidity)}.",
                    market_ids=(market.id,),
                ))
            if market.last_updated_mins is not None and market.last_updated_mins > cfg.stale_book_minutes:
                findings.append(ConsistencyFinding(
                    severity=Severity.LOW,
                    title="Stale book",
                    detail=f"{_label(market)} last update {market.last_updated_mins:g}m.",
                    market_ids=(market.id,),
                ))
        return findings
