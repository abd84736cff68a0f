from datetime import datetime
from typing import List, Optional, Sequence
from pydantic import BaseModel, ConfigDict, Field

class PricePoint(BaseModel):
    """Point-in-time implied probability"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: datetime
    price: float = Field(ge=0, le=1)
    volume: Optional[float] = Field(default=None, ge=0)

    @classmethod
    def from_api_response(cls, data: dict) -> "PricePoint":
        """Create from a history row ({"t": unix_seconds, "p": price} or long keys)"""
        ts_val = data.get("t", data.get("timestamp"))
        if isinstance(ts_val, (int, float)):
            # Assume ms if large
            ts_val = datetime.fromtimestamp(ts_val / 1000.0 if ts_val > 2e10 else ts_val)
        return cls(
            timestamp=ts_val,
            price=float(data.get("p", data.get("price"))),
            volume=data.get("v", data.get("volume")),
        )

def prices_of(history: Sequence[PricePoint]) -> List[float]:
    """Plain price values of a history, in order."""
    return [p.price for p in history]
