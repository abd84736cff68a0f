from enum import Enum
from typing import Dict, Any, Optional, Tuple
from pydantic import BaseModel, Field, ConfigDict

class SignalType(str, Enum):
    MOMENTUM = "momentum"
    MEAN_REVERSION = "mean_reversion"
    ARBITRAGE = "arbitrage"
    MISPRICING = "mispricing"
    DIVERGENCE = "divergence"
    SPREAD = "spread"

class InefficiencySignal(BaseModel):
    """Anomaly detected on a market or a correlated pair"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    signal_type: SignalType
    primary_market: str
    related_market: Optional[str] = None
    score: float = Field(ge=0)
    confidence: float = Field(ge=0, le=1)
    description: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

class Severity(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

class ConsistencyFinding(BaseModel):
    """Cross-market logical consistency issue"""
    model_config = ConfigDict(frozen=True)

    severity: Severity
    title: str
    detail: str
    market_ids: Tuple[str, ...] = ()
