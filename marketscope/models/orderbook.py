from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Tuple, Union
from pydantic import BaseModel, Field, computed_field, ConfigDict

class BookSide(str, Enum):
    BID = "bid"
    ASK = "ask"

class OrderBookLevel(BaseModel):
    """Single price level"""
    model_config = ConfigDict(frozen=True)

    price: float = Field(ge=0)
    size: float = Field(ge=0)
    side: BookSide

class OrderBook(BaseModel):
    """Normalized orderbook snapshot: bids descending, asks ascending, one level per price"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    market_id: str = ""
    token_id: str = ""
    timestamp: Optional[datetime] = None
    bids: Tuple[OrderBookLevel, ...] = ()
    asks: Tuple[OrderBookLevel, ...] = ()

    @computed_field
    @property
    def best_bid(self) -> Optional[float]:
        return self.bids[0].price if self.bids else None

    @computed_field
    @property
    def best_ask(self) -> Optional[float]:
        return self.asks[0].price if self.asks else None

    @computed_field
    @property
    def spread(self) -> Optional[float]:
        if self.best_bid is not None and self.best_ask is not None:
            return self.best_ask - self.best_bid
        return None

    @computed_field
    @property
    def mid_price(self) -> Optional[float]:
        if self.best_bid is not None and self.best_ask is not None:
            return (self.best_bid + self.best_ask) / 2
        return None

    def levels(self, side: BookSide) -> Tuple[OrderBookLevel, ...]:
        return self.bids if side == BookSide.BID else self.asks

# Slippage for one reference size. A tagged union so an unfillable size can
# never be read as a slippage number.

class FilledSlippage(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["filled"] = "filled"
    size: float
    avg_fill_price: float
    slippage: float

class Unfillable(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["unfillable"] = "unfillable"
    size: float
    available: float

SlippageResult = Annotated[Union[FilledSlippage, Unfillable], Field(discriminator="kind")]

class SlippageProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    small: SlippageResult
    medium: SlippageResult
    large: SlippageResult

class DepthSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    bid: float = 0.0
    ask: float = 0.0
    total: float = 0.0

class TopLevels(BaseModel):
    model_config = ConfigDict(frozen=True)

    bids: Tuple[OrderBookLevel, ...] = ()
    asks: Tuple[OrderBookLevel, ...] = ()

class OrderbookFeatures(BaseModel):
    """Liquidity metrics derived from one orderbook snapshot"""
    model_config = ConfigDict(frozen=True)

    best_bid: float
    best_ask: float
    mid_price: float
    spread: float
    spread_percent: float
    depth: DepthSummary
    imbalance: float = Field(ge=-1, le=1)
    slippage: SlippageProfile
    top_levels: TopLevels
    is_crossed: bool = False
    interpretation: str = ""
