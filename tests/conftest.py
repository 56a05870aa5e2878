"""Shared fixtures for TradeSense tests."""

import tempfile
from datetime import datetime
from pathlib import Path

import pytest

from tradesense.db.store import DataStore
from tradesense.models import Stock
from tradesense.service import TradingService


def make_stock(symbol: str = "TCS", price: float = 100.0, **overrides) -> Stock:
    """Build a Stock with sensible defaults."""
    fields = dict(
        symbol=symbol,
        name=f"{symbol} Ltd",
        current_price=price,
        previous_close=price,
        change=0.0,
        change_percent=0.0,
        volume=100000,
        market_cap=1000.0,
        sector="IT",
        last_updated=datetime(2025, 1, 1, 9, 15),
    )
    fields.update(overrides)
    return Stock(**fields)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_db(temp_dir: Path) -> DataStore:
    """Create a temporary database for testing."""
    return DataStore(temp_dir / "test.db")


@pytest.fixture
def service(temp_db: DataStore) -> TradingService:
    """TradingService over a temporary database with two stocks."""
    temp_db.save_stock(make_stock("TCS", 150.0))
    temp_db.save_stock(make_stock("INFY", 1500.0))
    return TradingService(temp_db)
