from enum import Enum
from typing import Optional, Tuple
from pydantic import BaseModel, Field, ConfigDict

class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"

class Outcome(str, Enum):
    YES = "yes"
    NO = "no"

class ViewMode(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    RELATIVE = "relative"

class SizeMode(str, Enum):
    SHARES = "shares"
    NOTIONAL = "notional"

class HedgeRequest(BaseModel):
    """How the caller wants the structure built"""
    model_config = ConfigDict(frozen=True)

    mode: ViewMode = ViewMode.BULLISH
    size_mode: SizeMode = SizeMode.SHARES
    size: float = Field(100.0, ge=0)
    risk_cap: float = Field(1000.0, ge=0)
    correlation_weight: float = Field(0.5, gt=0, lt=1)

class StrategyLeg(BaseModel):
    """One position in a structure"""
    model_config = ConfigDict(frozen=True)

    market: str
    market_title: str = ""
    side: TradeSide = TradeSide.BUY
    outcome: Outcome
    price: float = Field(ge=0, le=1)
    size: float = Field(ge=0)
    rationale: str = ""
    market_yes_mid: float = Field(ge=0, le=1)
    token_id: Optional[str] = None

    @property
    def sign(self) -> int:
        return 1 if self.side == TradeSide.BUY else -1

class PayoffPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    p_true: float
    ev: float

class LegProjection(BaseModel):
    model_config = ConfigDict(frozen=True)

    market: str
    outcome: Outcome
    expected_price: float
    mark_to_market: float

class TimeDecayRow(BaseModel):
    """Projected convergence toward a belief at one horizon"""
    model_config = ConfigDict(frozen=True)

    days: int
    multiplier: float
    legs: Tuple[LegProjection, ...] = ()

    @property
    def total_mark_to_market(self) -> float:
        return sum(leg.mark_to_market for leg in self.legs)

class ScenarioCell(BaseModel):
    """Settlement P&L when the primary (and hedge) markets resolve a given way"""
    model_config = ConfigDict(frozen=True)

    primary_outcome: Outcome
    hedge_outcome: Optional[Outcome] = None
    probability: float = Field(ge=0, le=1)
    pnl: float

class ScenarioGrid(BaseModel):
    """Resolution scenarios of the primary market crossed with the first hedge market"""
    model_config = ConfigDict(frozen=True)

    hedge_market: Optional[str] = None
    cells: Tuple[ScenarioCell, ...] = ()
    max_risk: float
    expected_return: float

class Strategy(BaseModel):
    """Multi-leg structure with its projections"""
    model_config = ConfigDict(frozen=True)

    primary_market: str
    primary_yes_mid: float = Field(ge=0, le=1)
    correlation_weight: float = Field(gt=0, lt=1)
    legs: Tuple[StrategyLeg, ...] = ()
    payoff_curve: Tuple[PayoffPoint, ...] = ()
    time_decay: Tuple[TimeDecayRow, ...] = ()
    scenario_grid: Optional[ScenarioGrid] = None
    rationale: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.legs
