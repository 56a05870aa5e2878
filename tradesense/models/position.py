"""Position and portfolio view models."""

from pydantic import BaseModel, Field

from tradesense.models.stock import Stock


class Position(BaseModel):
    """A user's current holding in one symbol.

    ``total_invested`` is a running sum maintained by the ledger, not
    ``quantity * avg_cost`` recomputed on every change.
    """

    user_id: str = Field(..., min_length=1, description="Owning user")
    symbol: str = Field(..., min_length=1, description="Trading symbol")
    quantity: int = Field(..., gt=0, description="Held units")
    avg_cost: float = Field(..., ge=0, description="Weighted average unit cost")
    total_invested: float = Field(..., ge=0, description="Running invested amount")

    model_config = {"frozen": True}


class PortfolioEntry(BaseModel):
    """A position valued against the latest market price."""

    position: Position = Field(..., description="Stored position")
    stock: Stock = Field(..., description="Price snapshot used for valuation")
    current_value: float = Field(..., description="quantity * current price")
    pnl: float = Field(..., description="Profit/Loss amount")
    pnl_percent: float = Field(..., description="Profit/Loss percentage")

    model_config = {"frozen": True}

    @property
    def symbol(self) -> str:
        return self.position.symbol


class PortfolioSummary(BaseModel):
    """Totals across all valued positions."""

    total_invested: float = Field(default=0.0, description="Sum of invested amounts")
    current_value: float = Field(default=0.0, description="Sum of current values")
    pnl: float = Field(default=0.0, description="Total Profit/Loss")
    pnl_percent: float = Field(default=0.0, description="Total Profit/Loss percentage")
    positions: int = Field(default=0, ge=0, description="Number of valued positions")

    model_config = {"frozen": True}
