"""Stock data models."""

from datetime import datetime
from pydantic import BaseModel, Field


class Stock(BaseModel):
    """Latest market snapshot for a listed stock."""

    symbol: str = Field(..., min_length=1, description="Trading symbol")
    name: str = Field(..., min_length=1, description="Company name")
    current_price: float = Field(..., ge=0, description="Last traded price")
    previous_close: float = Field(..., ge=0, description="Previous close")
    change: float = Field(..., description="Price change from previous close")
    change_percent: float = Field(..., description="Percentage change")
    volume: int = Field(..., ge=0, description="Trading volume")
    market_cap: float = Field(..., ge=0, description="Market capitalisation (Cr)")
    sector: str = Field(..., description="Industry sector")
    last_updated: datetime = Field(
        default_factory=datetime.now, description="Snapshot timestamp"
    )

    model_config = {"frozen": True}

    def facts(self) -> "StockFacts":
        """Project the fields the prediction oracle needs."""
        return StockFacts(
            name=self.name,
            symbol=self.symbol,
            current_price=self.current_price,
            previous_close=self.previous_close,
            change=self.change,
            change_percent=self.change_percent,
            sector=self.sector,
            market_cap=self.market_cap,
        )


class StockFacts(BaseModel):
    """Stock facts handed to the prediction oracle."""

    name: str
    symbol: str
    current_price: float
    previous_close: float
    change: float
    change_percent: float
    sector: str
    market_cap: float

    model_config = {"frozen": True}
