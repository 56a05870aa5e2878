"""Exception hierarchy for TradeSense."""


class TradeSenseError(Exception):
    """Base class for all TradeSense errors."""


class ValidationError(TradeSenseError, ValueError):
    """Raised when a request carries invalid values (quantity, price, side...)."""


class NotAuthenticated(TradeSenseError):
    """Raised when a mutation is attempted without an acting user."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class StockNotFound(TradeSenseError, LookupError):
    """Raised when a symbol has no stock record."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Stock not found: {symbol}")


class PredictionUnavailable(TradeSenseError):
    """Raised when the prediction oracle returns nothing usable."""
