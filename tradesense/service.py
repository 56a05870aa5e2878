"""Request handlers for TradeSense.

``TradingService`` exposes one method per application request: market
queries, the trade simulation, portfolio and trade history reads, the
watchlist, and prediction generation. Mutations take the acting user
explicitly and refuse anonymous callers; reads return empty results
for them.
"""

import logging
from typing import Optional, Union

from tradesense.db.store import DataStore
from tradesense.errors import StockNotFound, ValidationError
from tradesense.identity import require_user, resolve_user
from tradesense.ledger import LedgerUpdate, apply_trade, parse_side
from tradesense.market import initialize_stocks
from tradesense.models import (
    PortfolioEntry,
    PortfolioSummary,
    Prediction,
    PredictionResult,
    Stock,
    Trade,
    TradeSide,
    WatchlistItem,
)
from tradesense.valuation import summarize, value_portfolio

logger = logging.getLogger(__name__)

TIMEFRAMES = ("1d", "1w", "1m")

# Default number of rows returned by history queries
TRADE_HISTORY_LIMIT = 50
PREDICTION_HISTORY_LIMIT = 10


def _normalize_symbol(symbol: str) -> str:
    symbol = (symbol or "").strip().upper()
    if not symbol:
        raise ValidationError("Symbol is required")
    return symbol


class TradingService:
    """Application request handlers over a DataStore."""

    def __init__(self, store: DataStore, oracle=None):
        """Initialize the service.

        Args:
            store: Persistence store.
            oracle: Optional PredictionOracle. Created on first use if omitted.
        """
        self.store = store
        self._oracle = oracle

    @property
    def oracle(self):
        """The prediction oracle, created lazily."""
        if self._oracle is None:
            from tradesense.agents.predictor import AgentPredictionOracle

            self._oracle = AgentPredictionOracle()
        return self._oracle

    # ==================== Market ====================

    def initialize_stocks(self) -> int:
        """Seed the sample market once. Returns the number of stocks added."""
        return initialize_stocks(self.store)

    def get_stocks(self) -> list[Stock]:
        return self.store.get_stocks()

    def get_stock(self, symbol: str) -> Optional[Stock]:
        return self.store.get_stock(_normalize_symbol(symbol))

    # ==================== Trading ====================

    def simulate_trade(
        self,
        user_id: Optional[str],
        symbol: str,
        side: Union[str, TradeSide],
        quantity: int,
        price: float,
    ) -> LedgerUpdate:
        """Record a simulated trade and update the user's position.

        The position read, the ledger update and both writes happen in a
        single store transaction; a failure leaves the position and trade
        history untouched.

        Args:
            user_id: Acting user.
            symbol: Trading symbol.
            side: BUY or SELL.
            quantity: Units traded.
            price: Unit price.

        Returns:
            The applied LedgerUpdate.

        Raises:
            NotAuthenticated: If there is no acting user.
            ValidationError: If side, quantity or price are invalid.
        """
        user = require_user(user_id)
        symbol = _normalize_symbol(symbol)
        trade_side = parse_side(side)

        with self.store.transaction() as tx:
            existing = tx.get_position(user, symbol)
            update = apply_trade(
                existing,
                trade_side,
                quantity,
                price,
                user_id=user,
                symbol=symbol,
            )
            trade_id = tx.insert_trade(update.trade)

            if update.action == "create":
                tx.insert_position(update.position)
            elif update.action == "update":
                tx.patch_position(
                    user,
                    symbol,
                    quantity=update.position.quantity,
                    avg_cost=update.position.avg_cost,
                    total_invested=update.position.total_invested,
                )
            elif update.action == "delete":
                tx.delete_position(user, symbol)

        logger.info(
            "%s %s %d %s @ %.2f (%s)",
            user, trade_side.value, quantity, symbol, price, update.action,
        )
        return update.model_copy(
            update={"trade": update.trade.model_copy(update={"id": trade_id})}
        )

    def get_trades(
        self, user_id: Optional[str], limit: int = TRADE_HISTORY_LIMIT
    ) -> list[Trade]:
        """Recent trades of a user, newest first."""
        user = resolve_user(user_id)
        if user is None:
            return []
        return self.store.get_trades(user, limit=limit)

    # ==================== Portfolio ====================

    def get_portfolio(self, user_id: Optional[str]) -> list[PortfolioEntry]:
        """A user's positions valued at current prices.

        Positions without a stock record are left out.
        """
        user = resolve_user(user_id)
        if user is None:
            return []
        return value_portfolio(self.store.get_positions(user), self.store)

    def get_portfolio_summary(self, user_id: Optional[str]) -> PortfolioSummary:
        return summarize(self.get_portfolio(user_id))

    # ==================== Watchlist ====================

    def add_to_watchlist(self, user_id: Optional[str], symbol: str) -> WatchlistItem:
        """Add a symbol to the user's watchlist. Adding twice is a no-op.

        Returns:
            The (possibly pre-existing) watchlist item.
        """
        user = require_user(user_id)
        symbol = _normalize_symbol(symbol)

        existing = self.store.get_watchlist_item(user, symbol)
        if existing:
            return existing

        self.store.add_to_watchlist(user, symbol)
        return self.store.get_watchlist_item(user, symbol)

    def remove_from_watchlist(self, user_id: Optional[str], symbol: str) -> bool:
        """Remove a symbol from the user's watchlist.

        Returns:
            True if the symbol was on the watchlist.
        """
        user = require_user(user_id)
        symbol = _normalize_symbol(symbol)

        if self.store.get_watchlist_item(user, symbol) is None:
            return False
        self.store.remove_from_watchlist(user, symbol)
        return True

    def get_watchlist(self, user_id: Optional[str]) -> list[Stock]:
        """Stocks on the user's watchlist. Unknown symbols are skipped."""
        user = resolve_user(user_id)
        if user is None:
            return []

        stocks = []
        for symbol in self.store.get_watchlist(user):
            stock = self.store.get_stock(symbol)
            if stock:
                stocks.append(stock)
        return stocks

    # ==================== Predictions ====================

    def generate_prediction(self, symbol: str, timeframe: str) -> PredictionResult:
        """Ask the oracle for a prediction and store it.

        Nothing is stored if the oracle fails.

        Raises:
            StockNotFound: If the symbol is not in the market.
            ValidationError: If the timeframe is not 1d, 1w or 1m.
            PredictionUnavailable: If the oracle returns no usable answer.
        """
        symbol = _normalize_symbol(symbol)
        if timeframe not in TIMEFRAMES:
            raise ValidationError(
                f"Timeframe must be one of {', '.join(TIMEFRAMES)}, got {timeframe!r}"
            )

        stock = self.store.get_stock(symbol)
        if stock is None:
            raise StockNotFound(symbol)

        result = self.oracle.predict(stock.facts(), timeframe)
        self.save_prediction(
            symbol=symbol,
            current_price=stock.current_price,
            predicted_price=result.predicted_price,
            timeframe=timeframe,
            confidence=result.confidence,
            reasoning=result.reasoning,
        )
        return result

    def save_prediction(
        self,
        symbol: str,
        current_price: float,
        predicted_price: float,
        timeframe: str,
        confidence: float,
        reasoning: str,
    ) -> int:
        """Store a prediction. Returns its ID."""
        prediction = Prediction(
            symbol=_normalize_symbol(symbol),
            current_price=current_price,
            predicted_price=predicted_price,
            timeframe=timeframe,
            confidence=confidence,
            reasoning=reasoning,
        )
        prediction_id = self.store.save_prediction(prediction)
        logger.info("Saved %s prediction for %s", timeframe, prediction.symbol)
        return prediction_id

    def get_predictions(
        self, symbol: str, limit: int = PREDICTION_HISTORY_LIMIT
    ) -> list[Prediction]:
        """Latest predictions for a symbol, newest first."""
        return self.store.get_predictions(_normalize_symbol(symbol), limit=limit)
