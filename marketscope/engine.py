"""
Analytics engine.

Wires the components into one pipeline:

    order books, price histories, market metadata
        -> orderbook features, market metrics, correlation matrix
        -> inefficiency signals, consistency findings
        -> hedge structure with payoff / time-decay projections
        -> execution estimates per leg

Independent per-item work runs on a thread pool; results keep the input
order. Nothing here performs I/O: callers fetch inputs beforehand.
"""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, TypeVar

from marketscope.analysis.metrics import MarketMetrics, MarketMetricsCalculator, MetricsConfig
from marketscope.config.settings import Config, config as default_config
from marketscope.correlation.statistical.detector import CorrelationAnalyzer, CorrelationConfig
from marketscope.execution import ExecutionConfig, ExecutionEstimate, ExecutionSimulator
from marketscope.logging import log_timing, logger
from marketscope.models import (
    ConsistencyFinding,
    CorrelationEdge,
    HedgeRequest,
    MarketMetadata,
    OrderbookFeatures,
    PricePoint,
    Strategy,
    TradeSide,
)
from marketscope.orderbook import OrderbookConfig, OrderbookFeatureExtractor
from marketscope.result import AnalysisResult
from marketscope.signals.consistency import ConsistencyConfig, ConsistencyScanner
from marketscope.signals.inefficiency import InefficiencyConfig, InefficiencyDetector, InefficiencyReport
from marketscope.strategy import HedgeStrategyBuilder, HedgeSuggestion, PayoffProjector, StrategyConfig

T = TypeVar("T")
R = TypeVar("R")

History = Sequence[PricePoint]


@dataclass
class AnalysisReport:
    """Everything the pipeline produced for one primary market."""
    primary_market: str
    features: Dict[str, AnalysisResult[OrderbookFeatures]] = field(default_factory=dict)
    metrics: Dict[str, AnalysisResult[MarketMetrics]] = field(default_factory=dict)
    correlations: List[AnalysisResult[CorrelationEdge]] = field(default_factory=list)
    inefficiencies: Optional[AnalysisResult[InefficiencyReport]] = None
    findings: List[ConsistencyFinding] = field(default_factory=list)
    strategy: Optional[Strategy] = None
    hedges: List[HedgeSuggestion] = field(default_factory=list)
    executions: List[ExecutionEstimate] = field(default_factory=list)

    @property
    def edges(self) -> List[CorrelationEdge]:
        return CorrelationAnalyzer.edges(self.correlations)

    @property
    def signals(self):
        if self.inefficiencies is None or not self.inefficiencies.ok:
            return []
        return self.inefficiencies.value.signals

    @property
    def execution_cost(self) -> float:
        """Cash paid (or received, for sells) filling every leg."""
        return sum(e.cost if e.side == TradeSide.BUY else -e.cost for e in self.executions)


class MarketAnalyticsEngine:
    """
    Library facade over the analytics components.

    Each component is configured from the same Config, so one YAML file or
    set of environment variables tunes the whole pipeline.
    """

    def __init__(self, settings: Optional[Config] = None):
        self.settings = settings or default_config
        s = self.settings

        self.max_workers = s.max_workers
        self.default_half_life_days = s.default_half_life_days

        self.orderbook = OrderbookFeatureExtractor(OrderbookConfig.from_settings(s))
        self.correlation = CorrelationAnalyzer(CorrelationConfig.from_settings(s))
        self.inefficiency = InefficiencyDetector(
            InefficiencyConfig.from_settings(s),
            aligner=self.correlation.aligner,
        )
        self.consistency = ConsistencyScanner(ConsistencyConfig.from_settings(s))
        strategy_config = StrategyConfig.from_settings(s)
        self.builder = HedgeStrategyBuilder(strategy_config)
        self.projector = PayoffProjector(strategy_config)
        self.execution = ExecutionSimulator(ExecutionConfig.from_settings(s))
        self.metrics = MarketMetricsCalculator(MetricsConfig.from_settings(s))

    # --- Worker Pool ---

    def _map(self, fn: Callable[[T], R], items: Sequence[T]) -> List[R]:
        """Apply fn to every item, in parallel when configured, preserving order."""
        if self.max_workers > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                return list(pool.map(fn, items))
        return [fn(item) for item in items]

    # --- Stages ---

    def orderbook_features(self, books: Mapping[str, Any]) -> Dict[str, AnalysisResult[OrderbookFeatures]]:
        """Features for every book, keyed like the input."""
        items: List[Tuple[str, Any]] = list(books.items())
        results = self._map(lambda item: self.orderbook.try_extract(item[1], key=item[0]), items)
        return {key: result for (key, _), result in zip(items, results)}

    def market_metrics(
        self,
        histories: Mapping[str, History],
        features: Optional[Mapping[str, AnalysisResult[OrderbookFeatures]]] = None
    ) -> Dict[str, AnalysisResult[MarketMetrics]]:
        """Metrics for every history; a market's book features are used when present."""
        features = features or {}

        def _compute(key: str) -> AnalysisResult[MarketMetrics]:
            book = features.get(key)
            return self.metrics.compute(
                histories[key],
                features=book.value if book is not None and book.ok else None,
                key=key,
            )

        keys = list(histories)
        return dict(zip(keys, self._map(_compute, keys)))

    def correlation_matrix(self, histories: Mapping[str, History]) -> List[AnalysisResult[CorrelationEdge]]:
        return self.correlation.correlation_matrix(histories, max_workers=self.max_workers)

    def detect_inefficiencies(
        self,
        primary: str,
        histories: Mapping[str, History],
        edges: Sequence[CorrelationEdge] = ()
    ) -> AnalysisResult[InefficiencyReport]:
        return self.inefficiency.try_detect(primary, histories, edges)

    def scan_consistency(self, markets: Sequence[MarketMetadata]) -> List[ConsistencyFinding]:
        return self.consistency.scan(markets)

    def build_strategy(
        self,
        primary: MarketMetadata,
        candidates: Sequence[MarketMetadata],
        request: Optional[HedgeRequest] = None,
        belief: Optional[float] = None,
        half_life_days: Optional[float] = None
    ) -> Strategy:
        """
        Build a structure and attach its projections.

        Args:
            primary: Market the view is about
            candidates: Other markets in the cluster
            request: View, sizing and correlation weight
            belief: Target probability for time decay, defaults to the primary's YES mid
            half_life_days: Convergence half-life, defaults to the configured value
        """
        strategy = self.builder.build(primary, candidates, request)
        return self.projector.project(
            strategy,
            belief=primary.yes_mid if belief is None else belief,
            half_life_days=self.default_half_life_days if half_life_days is None else half_life_days,
        )

    def simulate_execution(
        self,
        strategy: Strategy,
        books: Optional[Mapping[str, Any]] = None,
        markets: Sequence[MarketMetadata] = ()
    ) -> List[ExecutionEstimate]:
        liquidity = {m.id: m.liquidity for m in markets}
        return self.execution.simulate(strategy, books=books, liquidity=liquidity)

    # --- Pipeline ---

    @staticmethod
    def _cluster(primary: MarketMetadata, markets: Sequence[MarketMetadata]) -> List[MarketMetadata]:
        if any(m.id == primary.id for m in markets):
            return list(markets)
        return [primary, *markets]

    @staticmethod
    def _usable_books(
        books: Mapping[str, Any],
        features: Mapping[str, AnalysisResult[OrderbookFeatures]]
    ) -> Dict[str, Any]:
        return {key: book for key, book in books.items() if features[key].ok}

    def _finish(
        self,
        report: AnalysisReport,
        primary: MarketMetadata,
        cluster: Sequence[MarketMetadata],
        histories: Mapping[str, History],
        books: Mapping[str, Any],
        request: Optional[HedgeRequest],
        belief: Optional[float],
        half_life_days: Optional[float]
    ) -> AnalysisReport:
        """Stages that depend on the correlation edges."""
        edges = report.edges
        report.inefficiencies = self.detect_inefficiencies(primary.history_key, histories, edges)
        for s in report.signals:
            logger.signal(
                s.signal_type.value,
                market=s.primary_market,
                related=s.related_market,
                score=round(s.score, 4),
            )
        report.strategy = self.build_strategy(primary, cluster, request, belief, half_life_days)
        report.hedges = self.builder.suggest_hedges(primary, cluster, edges, report.signals)
        report.executions = self.simulate_execution(
            report.strategy,
            books=self._usable_books(books, report.features),
            markets=cluster,
        )
        return report

    @log_timing(slow_ms=5000)
    def analyze(
        self,
        primary: MarketMetadata,
        markets: Sequence[MarketMetadata],
        histories: Mapping[str, History],
        books: Optional[Mapping[str, Any]] = None,
        request: Optional[HedgeRequest] = None,
        belief: Optional[float] = None,
        half_life_days: Optional[float] = None
    ) -> AnalysisReport:
        """
        Run the full pipeline for one primary market.

        Args:
            primary: Market the analysis centres on
            markets: Its cluster (the primary is added if missing)
            histories: YES price histories keyed by token id (or market id)
            books: Order books keyed by token id, in any supported encoding
            request: Hedge request for the strategy stage
            belief: Target probability for the time-decay projection
            half_life_days: Convergence half-life for the time-decay projection

        Returns:
            AnalysisReport with per-item results; failing items carry their error
        """
        books = books or {}
        cluster = self._cluster(primary, markets)
        log = logger.with_context(primary=primary.id, markets=len(cluster))
        log.info("Running analytics pipeline")

        report = AnalysisReport(primary_market=primary.id)
        report.features = self.orderbook_features(books)
        report.metrics = self.market_metrics(histories, report.features)
        report.correlations = self.correlation_matrix(histories)
        report.findings = self.scan_consistency(cluster)
        self._finish(report, primary, cluster, histories, books, request, belief, half_life_days)

        log.info(
            "Analytics pipeline complete",
            signals=len(report.signals),
            findings=len(report.findings),
            legs=len(report.strategy.legs) if report.strategy else 0,
        )
        return report

    @log_timing(slow_ms=5000)
    async def analyze_async(
        self,
        primary: MarketMetadata,
        markets: Sequence[MarketMetadata],
        histories: Mapping[str, History],
        books: Optional[Mapping[str, Any]] = None,
        request: Optional[HedgeRequest] = None,
        belief: Optional[float] = None,
        half_life_days: Optional[float] = None
    ) -> AnalysisReport:
        """
        Same pipeline as analyze(), with the independent stages run concurrently
        in worker threads so an event loop is never blocked.
        """
        books = books or {}
        cluster = self._cluster(primary, markets)
        log = logger.with_context(primary=primary.id, markets=len(cluster))
        log.info("Running analytics pipeline (async)")

        features, correlations, findings = await asyncio.gather(
            asyncio.to_thread(self.orderbook_features, books),
            asyncio.to_thread(self.correlation_matrix, histories),
            asyncio.to_thread(self.scan_consistency, cluster),
        )
        report = AnalysisReport(
            primary_market=primary.id,
            features=features,
            correlations=correlations,
            findings=findings,
        )
        report.metrics, _ = await asyncio.gather(
            asyncio.to_thread(self.market_metrics, histories, features),
            asyncio.to_thread(
                self._finish, report, primary, cluster, histories, books, request, belief, half_life_days
            ),
        )

        log.info(
            "Analytics pipeline complete",
            signals=len(report.signals),
            findings=len(report.findings),
            legs=len(report.strategy.legs) if report.strategy else 0,
        )
        return report
