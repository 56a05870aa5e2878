"""Trade data model."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class TradeSide(str, Enum):
    """Trade direction."""

    BUY = "BUY"
    SELL = "SELL"


class Trade(BaseModel):
    """An executed (simulated) trade. Append-only history."""

    id: Optional[int] = Field(default=None, description="Database ID")
    user_id: str = Field(..., min_length=1, description="Acting user")
    symbol: str = Field(..., min_length=1, description="Trading symbol")
    side: TradeSide = Field(..., description="Trade side (BUY/SELL)")
    quantity: int = Field(..., gt=0, description="Trade quantity")
    price: float = Field(..., gt=0, description="Execution price")
    total: float = Field(..., ge=0, description="quantity * price")
    timestamp: datetime = Field(..., description="Trade execution timestamp")

    model_config = {"frozen": True}
