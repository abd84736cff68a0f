from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

class LeadLagDirection(str, Enum):
    LEADS = "leads"   # token_a moves first
    LAGS = "lags"     # token_b moves first
    NONE = "none"

class CorrelationConfidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

class LeadLag(BaseModel):
    model_config = ConfigDict(frozen=True)

    direction: LeadLagDirection = LeadLagDirection.NONE
    lag_periods: int = Field(0, ge=0)

class CorrelationEdge(BaseModel):
    """Statistical relationship between two token histories"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token_a: str
    token_b: str
    correlation: float = Field(ge=-1, le=1)
    lead_lag: LeadLag = Field(default_factory=LeadLag)
    data_points: int = 0
    pvalue: Optional[float] = Field(default=None, ge=0, le=1)
    confidence: CorrelationConfidence = CorrelationConfidence.LOW
    cointegrated: Optional[bool] = None
    cointegration_pvalue: Optional[float] = None

    def touches(self, token: str) -> bool:
        return token in (self.token_a, self.token_b)

    def other(self, token: str) -> str:
        """The token on the opposite end of the edge."""
        return self.token_b if token == self.token_a else self.token_a
