"""Watchlist data model."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class WatchlistItem(BaseModel):
    """A symbol on a user's watchlist."""

    id: Optional[int] = Field(default=None, description="Database ID")
    user_id: str = Field(..., min_length=1, description="Owning user")
    symbol: str = Field(..., min_length=1, description="Trading symbol")
    added_at: datetime = Field(
        default_factory=datetime.now, description="When the symbol was added"
    )

    model_config = {"frozen": True}
