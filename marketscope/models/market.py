from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

class RelationshipType(str, Enum):
    EXCLUSIVE = "exclusive"    # Outcomes of one event, YES mids should sum to ~1
    TERM = "term"              # Same event at different deadlines
    CORRELATED = "correlated"
    INDEPENDENT = "independent"

class MarketMetadata(BaseModel):
    """Market snapshot as supplied by the caller"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str = ""
    yes_mid: float = Field(alias="yesMid", ge=0, le=1)
    no_mid: float = Field(alias="noMid", ge=0, le=1)
    liquidity: float = Field(0.0, ge=0)
    volume: float = Field(0.0, ge=0)
    resolution_horizon_days: Optional[float] = Field(None, alias="resolutionHorizonDays")
    cluster_key: Optional[str] = Field(None, alias="clusterKey")
    term_key: Optional[str] = Field(None, alias="termKey")
    relationship: RelationshipType = RelationshipType.INDEPENDENT
    spread: Optional[float] = None
    last_updated_mins: Optional[float] = Field(None, alias="lastUpdatedMins")
    yes_token_id: Optional[str] = Field(None, alias="yesTokenId")
    no_token_id: Optional[str] = Field(None, alias="noTokenId")

    @property
    def history_key(self) -> str:
        """Key under which this market's YES price history is supplied."""
        return self.yes_token_id or self.id

    @property
    def effective_spread(self) -> float:
        """Quoted spread, or the YES/NO parity gap (at least one tick) when none is quoted."""
        if self.spread is not None:
            return self.spread
        return max(0.01, abs(1 - (self.yes_mid + self.no_mid)))
