"""
Data Models Package.
"""

from marketscope.models.price import PricePoint, prices_of
from marketscope.models.orderbook import (
    BookSide,
    OrderBookLevel,
    OrderBook,
    FilledSlippage,
    Unfillable,
    SlippageResult,
    SlippageProfile,
    DepthSummary,
    TopLevels,
    OrderbookFeatures,
)
from marketscope.models.correlation import (
    CorrelationEdge,
    CorrelationConfidence,
    LeadLag,
    LeadLagDirection
)
from marketscope.models.signal import (
    InefficiencySignal,
    SignalType,
    ConsistencyFinding,
    Severity
)
from marketscope.models.market import MarketMetadata, RelationshipType
from marketscope.models.strategy import (
    TradeSide,
    Outcome,
    ViewMode,
    SizeMode,
    HedgeRequest,
    StrategyLeg,
    PayoffPoint,
    LegProjection,
    TimeDecayRow,
    ScenarioCell,
    ScenarioGrid,
    Strategy,
)

__all__ = [
    # Price
    "PricePoint",
    "prices_of",

    # Orderbook
    "BookSide",
    "OrderBookLevel",
    "OrderBook",
    "FilledSlippage",
    "Unfillable",
    "SlippageResult",
    "SlippageProfile",
    "DepthSummary",
    "TopLevels",
    "OrderbookFeatures",

    # Correlation
    "CorrelationEdge",
    "CorrelationConfidence",
    "LeadLag",
    "LeadLagDirection",

    # Signal
    "InefficiencySignal",
    "SignalType",
    "ConsistencyFinding",
    "Severity",

    # Market
    "MarketMetadata",
    "RelationshipType",

    # Strategy
    "TradeSide",
    "Outcome",
    "ViewMode",
    "SizeMode",
    "HedgeRequest",
    "StrategyLeg",
    "PayoffPoint",
    "LegProjection",
    "TimeDecayRow",
    "ScenarioCell",
    "ScenarioGrid",
    "Strategy",
]
