"""Prediction data models."""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

Timeframe = Literal["1d", "1w", "1m"]


class PredictionResult(BaseModel):
    """Structured answer returned by the prediction oracle."""

    predicted_price: float = Field(
        ..., alias="predictedPrice", gt=0, allow_inf_nan=False, description="Predicted price"
    )
    confidence: float = Field(..., ge=0, le=100, description="Confidence (0-100)")
    reasoning: str = Field(..., description="Brief reasoning")

    model_config = {"frozen": True, "populate_by_name": True}


class Prediction(BaseModel):
    """A stored prediction for a symbol and timeframe."""

    id: Optional[int] = Field(default=None, description="Database ID")
    symbol: str = Field(..., min_length=1, description="Trading symbol")
    current_price: float = Field(..., ge=0, description="Price when predicted")
    predicted_price: float = Field(..., gt=0, allow_inf_nan=False, description="Predicted price")
    timeframe: Timeframe = Field(..., description="Prediction horizon")
    confidence: float = Field(..., ge=0, le=100, description="Confidence (0-100)")
    reasoning: str = Field(..., description="Model reasoning")
    created_at: datetime = Field(
        default_factory=datetime.now, description="Prediction timestamp"
    )

    model_config = {"frozen": True}
