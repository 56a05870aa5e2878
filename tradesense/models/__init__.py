"""Data models for TradeSense."""

from tradesense.models.stock import Stock, StockFacts
from tradesense.models.position import PortfolioEntry, PortfolioSummary, Position
from tradesense.models.trade import Trade, TradeSide
from tradesense.models.prediction import Prediction, PredictionResult, Timeframe
from tradesense.models.watchlist import WatchlistItem

__all__ = [
    "PortfolioEntry",
    "PortfolioSummary",
    "Position",
    "Prediction",
    "PredictionResult",
    "Stock",
    "StockFacts",
    "Timeframe",
    "Trade",
    "TradeSide",
    "WatchlistItem",
]
