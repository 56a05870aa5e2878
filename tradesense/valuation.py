"""Portfolio valuation read path.

Joins stored positions with the latest known prices. Nothing here writes
to the store; values are recomputed on every read.
"""

import logging
from typing import Iterable, Optional, Protocol

from tradesense.models import PortfolioEntry, PortfolioSummary, Position, Stock

logger = logging.getLogger(__name__)


class PriceSource(Protocol):
    """Anything that can return the latest stock snapshot for a symbol."""

    def get_stock(self, symbol: str) -> Optional[Stock]:
        ...


def pnl_percent(pnl: float, invested: float) -> float:
    """P&L as a percentage of the invested amount, 0 when nothing is invested."""
    if invested == 0:
        return 0.0
    return pnl / invested * 100


def value_position(position: Position, stock: Stock) -> PortfolioEntry:
    """Value a single position at the stock's current price.

    Args:
        position: Stored position.
        stock: Latest price snapshot for the position's symbol.

    Returns:
        PortfolioEntry with current value and P&L.
    """
    current_value = position.quantity * stock.current_price
    pnl = current_value - position.total_invested
    return PortfolioEntry(
        position=position,
        stock=stock,
        current_value=current_value,
        pnl=pnl,
        pnl_percent=pnl_percent(pnl, position.total_invested),
    )


def value_portfolio(
    positions: Iterable[Position], price_source: PriceSource
) -> list[PortfolioEntry]:
    """Value every position that has a known price.

    Positions whose symbol the price source cannot find are left out of
    the result rather than valued at zero.

    Args:
        positions: Stored positions.
        price_source: Provider of the latest stock snapshots.

    Returns:
        Valued entries in input order.
    """
    entries = []
    for position in positions:
        stock = price_source.get_stock(position.symbol)
        if stock is None:
            logger.warning("No price for %s, skipping position", position.symbol)
            continue
        entries.append(value_position(position, stock))
    return entries


def summarize(entries: Iterable[PortfolioEntry]) -> PortfolioSummary:
    """Aggregate valued entries into portfolio totals."""
    entries = list(entries)
    invested = sum(e.position.total_invested for e in entries)
    current = sum(e.current_value for e in entries)
    pnl = current - invested
    return PortfolioSummary(
        total_invested=invested,
        current_value=current,
        pnl=pnl,
        pnl_percent=pnl_percent(pnl, invested),
        positions=len(entries),
    )
