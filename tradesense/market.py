"""Sample market for TradeSense.

The market is synthetic: a fixed set of NSE large caps whose prices are
drawn at random when the database is first seeded.
"""

import logging
import random
from datetime import datetime
from typing import Optional

from tradesense.db.store import DataStore
from tradesense.models import Stock

logger = logging.getLogger(__name__)


SAMPLE_STOCKS = [
    {"symbol": "RELIANCE", "name": "Reliance Industries Ltd", "sector": "Energy", "market_cap": 1500000},
    {"symbol": "TCS", "name": "Tata Consultancy Services", "sector": "IT", "market_cap": 1200000},
    {"symbol": "HDFCBANK", "name": "HDFC Bank Ltd", "sector": "Banking", "market_cap": 800000},
    {"symbol": "INFY", "name": "Infosys Ltd", "sector": "IT", "market_cap": 700000},
    {"symbol": "HINDUNILVR", "name": "Hindustan Unilever Ltd", "sector": "FMCG", "market_cap": 600000},
    {"symbol": "ICICIBANK", "name": "ICICI Bank Ltd", "sector": "Banking", "market_cap": 550000},
    {"symbol": "BHARTIARTL", "name": "Bharti Airtel Ltd", "sector": "Telecom", "market_cap": 400000},
    {"symbol": "ITC", "name": "ITC Ltd", "sector": "FMCG", "market_cap": 350000},
]


def generate_stock(
    symbol: str,
    name: str,
    sector: str,
    market_cap: float,
    rng: Optional[random.Random] = None,
) -> Stock:
    """Generate a random price snapshot for a stock.

    The previous close is drawn from 100..2100 and the day's change from
    -50..+50. Prices, change and change percent are rounded to 2 places.

    Args:
        symbol: Trading symbol.
        name: Company name.
        sector: Industry sector.
        market_cap: Market capitalisation in crores.
        rng: Optional random generator (for reproducible fixtures).

    Returns:
        Generated Stock.
    """
    rng = rng or random.Random()
    base_price = rng.random() * 2000 + 100
    change = (rng.random() - 0.5) * 100
    change_percent = change / base_price * 100

    return Stock(
        symbol=symbol,
        name=name,
        current_price=round(base_price + change, 2),
        previous_close=round(base_price, 2),
        change=round(change, 2),
        change_percent=round(change_percent, 2),
        volume=rng.randint(100000, 1099999),
        market_cap=market_cap,
        sector=sector,
        last_updated=datetime.now(),
    )


def initialize_stocks(store: DataStore, rng: Optional[random.Random] = None) -> int:
    """Seed the sample market if the store has no stocks yet.

    Args:
        store: DataStore to seed.
        rng: Optional random generator.

    Returns:
        Number of stocks inserted (0 if the market already existed).
    """
    if store.count_stocks() > 0:
        return 0

    for spec in SAMPLE_STOCKS:
        store.save_stock(generate_stock(rng=rng, **spec))

    logger.info("Seeded %d sample stocks", len(SAMPLE_STOCKS))
    return len(SAMPLE_STOCKS)
