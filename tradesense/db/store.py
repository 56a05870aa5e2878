"""SQLite data store for TradeSense."""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Optional

from tradesense.models import (
    Position,
    Prediction,
    Stock,
    Trade,
    TradeSide,
    WatchlistItem,
)

logger = logging.getLogger(__name__)

# Columns a position patch may touch
POSITION_FIELDS = ("quantity", "avg_cost", "total_invested")


def _row_to_position(row: sqlite3.Row) -> Position:
    return Position(
        user_id=row["user_id"],
        symbol=row["symbol"],
        quantity=row["quantity"],
        avg_cost=row["avg_cost"],
        total_invested=row["total_invested"],
    )


def _row_to_trade(row: sqlite3.Row) -> Trade:
    return Trade(
        id=row["id"],
        user_id=row["user_id"],
        symbol=row["symbol"],
        side=TradeSide(row["side"]),
        quantity=row["quantity"],
        price=row["price"],
        total=row["total"],
        timestamp=datetime.fromisoformat(row["timestamp"]),
    )


def _row_to_stock(row: sqlite3.Row) -> Stock:
    return Stock(
        symbol=row["symbol"],
        name=row["name"],
        current_price=row["current_price"],
        previous_close=row["previous_close"],
        change=row["change"],
        change_percent=row["change_percent"],
        volume=row["volume"],
        market_cap=row["market_cap"],
        sector=row["sector"],
        last_updated=datetime.fromisoformat(row["last_updated"]),
    )


class StoreTransaction:
    """Position and trade operations bound to one open transaction.

    Obtained from ``DataStore.transaction()``. Everything done through
    one instance commits or rolls back together.
    """

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def get_position(self, user_id: str, symbol: str) -> Optional[Position]:
        """Get the position for (user_id, symbol), if any."""
        row = self._conn.execute(
            """
            SELECT user_id, symbol, quantity, avg_cost, total_invested
            FROM positions
            WHERE user_id = ? AND symbol = ?
            """,
            (user_id, symbol),
        ).fetchone()
        return _row_to_position(row) if row else None

    def insert_position(self, position: Position) -> None:
        """Insert a new position.

        Raises:
            sqlite3.IntegrityError: If (user_id, symbol) already exists.
        """
        self._conn.execute(
            """
            INSERT INTO positions (user_id, symbol, quantity, avg_cost, total_invested)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                position.user_id,
                position.symbol,
                position.quantity,
                position.avg_cost,
                position.total_invested,
            ),
        )

    def patch_position(self, user_id: str, symbol: str, /, **fields: Any) -> None:
        """Update selected fields of an existing position.

        Args:
            user_id: Owning user.
            symbol: Trading symbol.
            **fields: Any of quantity, avg_cost, total_invested.
        """
        unknown = set(fields) - set(POSITION_FIELDS)
        if unknown:
            raise ValueError(f"Unknown position fields: {sorted(unknown)}")
        if not fields:
            return
        columns = list(fields)
        assignments = ", ".join(f"{column} = ?" for column in columns)
        self._conn.execute(
            f"UPDATE positions SET {assignments} WHERE user_id = ? AND symbol = ?",
            (*(fields[c] for c in columns), user_id, symbol),
        )

    def delete_position(self, user_id: str, symbol: str) -> None:
        """Delete a position."""
        self._conn.execute(
            "DELETE FROM positions WHERE user_id = ? AND symbol = ?",
            (user_id, symbol),
        )

    def insert_trade(self, trade: Trade) -> int:
        """Append a trade record.

        Returns:
            The ID of the stored trade.
        """
        cursor = self._conn.execute(
            """
            INSERT INTO trades (user_id, symbol, side, quantity, price, total, timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                trade.user_id,
                trade.symbol,
                trade.side.value,
                trade.quantity,
                trade.price,
                trade.total,
                trade.timestamp.isoformat(),
            ),
        )
        return cursor.lastrowid or 0


class DataStore:
    """SQLite-based data store for TradeSense."""

    REQUIRED_TABLES = [
        "stocks",
        "predictions",
        "positions",
        "watchlist",
        "trades",
    ]

    def __init__(self, db_path: Path, timeout: float = 30.0):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
            timeout: Seconds to wait for the write lock.
        """
        self.db_path = Path(db_path)
        self.timeout = timeout
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            # Stocks table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS stocks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    symbol TEXT NOT NULL UNIQUE,
                    name TEXT NOT NULL,
                    current_price REAL NOT NULL,
                    previous_close REAL NOT NULL,
                    change REAL NOT NULL,
                    change_percent REAL NOT NULL,
                    volume INTEGER NOT NULL,
                    market_cap REAL NOT NULL,
                    sector TEXT NOT NULL,
                    last_updated TEXT NOT NULL
                )
            """)

            # Predictions table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS predictions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    symbol TEXT NOT NULL,
                    current_price REAL NOT NULL,
                    predicted_price REAL NOT NULL,
                    timeframe TEXT NOT NULL,
                    confidence REAL NOT NULL,
                    reasoning TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_predictions_symbol_timeframe
                ON predictions (symbol, timeframe)
            """)

            # Positions table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS positions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    symbol TEXT NOT NULL,
                    quantity INTEGER NOT NULL CHECK (quantity > 0),
                    avg_cost REAL NOT NULL,
                    total_invested REAL NOT NULL,
                    UNIQUE(user_id, symbol)
                )
            """)

            # Watchlist table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS watchlist (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    symbol TEXT NOT NULL,
                    added_at TEXT NOT NULL,
                    UNIQUE(user_id, symbol)
                )
            """)

            # Trades table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trades (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    symbol TEXT NOT NULL,
                    side TEXT NOT NULL,
                    quantity INTEGER NOT NULL,
                    price REAL NOT NULL,
                    total REAL NOT NULL,
                    timestamp TEXT NOT NULL
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_trades_user ON trades (user_id)
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """Open a serialized read-modify-write transaction.

        ``BEGIN IMMEDIATE`` takes the write lock before the first read, so
        concurrent trades on the same database run one after another.
        The transaction commits when the block exits normally and rolls
        back if it raises.

        Yields:
            StoreTransaction bound to the open connection.
        """
        conn = self._get_connection()
        conn.isolation_level = None
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield StoreTransaction(conn)
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    # ==================== Stocks ====================

    def save_stock(self, stock: Stock) -> None:
        """Insert or replace a stock snapshot.

        Args:
            stock: Stock to save.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO stocks
                (symbol, name, current_price, previous_close, change, change_percent,
                 volume, market_cap, sector, last_updated)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(symbol) DO UPDATE SET
                    name = excluded.name,
                    current_price = excluded.current_price,
                    previous_close = excluded.previous_close,
                    change = excluded.change,
                    change_percent = excluded.change_percent,
                    volume = excluded.volume,
                    market_cap = excluded.market_cap,
                    sector = excluded.sector,
                    last_updated = excluded.last_updated
                """,
                (
                    stock.symbol,
                    stock.name,
                    stock.current_price,
                    stock.previous_close,
                    stock.change,
                    stock.change_percent,
                    stock.volume,
                    stock.market_cap,
                    stock.sector,
                    stock.last_updated.isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def get_stocks(self) -> list[Stock]:
        """Get all stocks.

        Returns:
            List of stocks in insertion order.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM stocks ORDER BY id")
            return [_row_to_stock(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_stock(self, symbol: str) -> Optional[Stock]:
        """Get a stock by symbol.

        Args:
            symbol: Trading symbol.

        Returns:
            Stock if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM stocks WHERE symbol = ?", (symbol,))
            row = cursor.fetchone()
            return _row_to_stock(row) if row else None
        finally:
            conn.close()

    def count_stocks(self) -> int:
        """Number of stocks in the market."""
        conn = self._get_connection()
        try:
            return conn.execute("SELECT COUNT(*) AS count FROM stocks").fetchone()["count"]
        finally:
            conn.close()

    # ==================== Predictions ====================

    def save_prediction(self, prediction: Prediction) -> int:
        """Save a prediction.

        Args:
            prediction: Prediction to save.

        Returns:
            The ID of the saved prediction.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO predictions
                (symbol, current_price, predicted_price, timeframe, confidence, reasoning, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    prediction.symbol,
                    prediction.current_price,
                    prediction.predicted_price,
                    prediction.timeframe,
                    prediction.confidence,
                    prediction.reasoning,
                    prediction.created_at.isoformat(),
                ),
            )
            conn.commit()
            return cursor.lastrowid or 0
        finally:
            conn.close()

    def get_predictions(self, symbol: str, limit: int = 10) -> list[Prediction]:
        """Get the latest predictions for a symbol, newest first.

        Args:
            symbol: Trading symbol.
            limit: Maximum number of predictions.

        Returns:
            List of predictions.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, symbol, current_price, predicted_price, timeframe,
                       confidence, reasoning, created_at
                FROM predictions
                WHERE symbol = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                (symbol, limit),
            )
            return [
                Prediction(
                    id=row["id"],
                    symbol=row["symbol"],
                    current_price=row["current_price"],
                    predicted_price=row["predicted_price"],
                    timeframe=row["timeframe"],
                    confidence=row["confidence"],
                    reasoning=row["reasoning"],
                    created_at=datetime.fromisoformat(row["created_at"]),
                )
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    # ==================== Positions ====================

    def get_position(self, user_id: str, symbol: str) -> Optional[Position]:
        """Get a single position outside of a transaction."""
        conn = self._get_connection()
        try:
            return StoreTransaction(conn).get_position(user_id, symbol)
        finally:
            conn.close()

    def get_positions(self, user_id: str) -> list[Position]:
        """Get all positions of a user.

        Args:
            user_id: Owning user.

        Returns:
            List of positions.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT user_id, symbol, quantity, avg_cost, total_invested
                FROM positions
                WHERE user_id = ?
                ORDER BY id
                """,
                (user_id,),
            )
            return [_row_to_position(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Trades ====================

    def get_trades(self, user_id: str, limit: Optional[int] = None) -> list[Trade]:
        """Get a user's trades, newest first.

        Args:
            user_id: Acting user.
            limit: Optional maximum number of trades.

        Returns:
            List of trades.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            query = """
                SELECT id, user_id, symbol, side, quantity, price, total, timestamp
                FROM trades
                WHERE user_id = ?
                ORDER BY timestamp DESC, id DESC
            """
            params: tuple = (user_id,)
            if limit is not None:
                query += " LIMIT ?"
                params = (user_id, limit)
            cursor.execute(query, params)
            return [_row_to_trade(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Watchlist ====================

    def get_watchlist_item(self, user_id: str, symbol: str) -> Optional[WatchlistItem]:
        """Get a watchlist entry, if present."""
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT id, user_id, symbol, added_at FROM watchlist WHERE user_id = ? AND symbol = ?",
                (user_id, symbol),
            ).fetchone()
            if row:
                return WatchlistItem(
                    id=row["id"],
                    user_id=row["user_id"],
                    symbol=row["symbol"],
                    added_at=datetime.fromisoformat(row["added_at"]),
                )
            return None
        finally:
            conn.close()

    def add_to_watchlist(self, user_id: str, symbol: str) -> None:
        """Add a symbol to a user's watchlist. Existing entries are kept.

        Args:
            user_id: Owning user.
            symbol: Symbol to add.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR IGNORE INTO watchlist (user_id, symbol, added_at)
                VALUES (?, ?, ?)
                """,
                (user_id, symbol, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    def remove_from_watchlist(self, user_id: str, symbol: str) -> None:
        """Remove a symbol from a user's watchlist.

        Args:
            user_id: Owning user.
            symbol: Symbol to remove.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM watchlist WHERE user_id = ? AND symbol = ?",
                (user_id, symbol),
            )
            conn.commit()
        finally:
            conn.close()

    def get_watchlist(self, user_id: str) -> list[str]:
        """Get all symbols on a user's watchlist, in the order added.

        Args:
            user_id: Owning user.

        Returns:
            List of symbols.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT symbol FROM watchlist WHERE user_id = ? ORDER BY id",
                (user_id,),
            )
            return [row["symbol"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()
