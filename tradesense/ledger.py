"""Portfolio ledger.

Applies a single trade to a user's position in one symbol and returns
the new position state together with the trade record to persist. The
functions here are pure: persisting the result atomically is the job of
the caller's transaction (see ``DataStore.transaction``).
"""

import math
from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from tradesense.errors import ValidationError
from tradesense.models import Position, Trade, TradeSide

LedgerAction = Literal["create", "update", "delete", "none"]

# Largest quantity a SQLite INTEGER column holds
MAX_QUANTITY = 2**63 - 1


class LedgerUpdate(BaseModel):
    """Outcome of applying a trade.

    ``position`` is the state to store, or None when the position is
    deleted (``action == "delete"``) or never existed (``action == "none"``).
    """

    position: Optional[Position] = Field(default=None, description="New position state")
    trade: Trade = Field(..., description="Audit record, always written")
    action: LedgerAction = Field(..., description="What to do with the stored position")

    model_config = {"frozen": True}


def parse_side(side: Union[str, TradeSide]) -> TradeSide:
    """Normalise a trade side, rejecting anything but BUY/SELL.

    Args:
        side: Side as string or enum.

    Returns:
        TradeSide value.

    Raises:
        ValidationError: If the side is not recognized.
    """
    if isinstance(side, TradeSide):
        return side
    try:
        return TradeSide(str(side).upper())
    except ValueError:
        raise ValidationError(f"Unrecognized trade side: {side!r}") from None


def _validate(quantity: int, price: float) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(f"Quantity must be a whole number, got {quantity!r}")
    if quantity <= 0:
        raise ValidationError(f"Quantity must be positive, got {quantity}")
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"Quantity must not exceed {MAX_QUANTITY}, got {quantity}")
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise ValidationError(f"Price must be a number, got {price!r}")
    if not price > 0 or price == float("inf"):
        raise ValidationError(f"Price must be positive, got {price}")


def apply_trade(
    existing: Optional[Position],
    side: Union[str, TradeSide],
    quantity: int,
    price: float,
    *,
    user_id: str,
    symbol: str,
    timestamp: Optional[datetime] = None,
) -> LedgerUpdate:
    """Apply a trade to the current position.

    BUY adds to the position using a weighted-average cost basis. SELL
    reduces quantity, clamping at zero; a position that reaches zero is
    deleted. A partial SELL leaves ``avg_cost`` and ``total_invested``
    untouched, so ``total_invested`` no longer equals
    ``quantity * avg_cost`` after one. SELL without a position only
    records the trade.

    Args:
        existing: Current position for (user_id, symbol), or None.
        side: BUY or SELL.
        quantity: Units traded, must be > 0.
        price: Unit price, must be > 0.
        user_id: Acting user.
        symbol: Trading symbol.
        timestamp: Trade time. Defaults to now.

    Returns:
        LedgerUpdate with the new position state and trade record.

    Raises:
        ValidationError: On invalid side, quantity, price or a position
            that belongs to another user/symbol.
    """
    trade_side = parse_side(side)
    _validate(quantity, price)
    if not user_id:
        raise ValidationError("user_id is required")
    if not symbol:
        raise ValidationError("symbol is required")
    if existing is not None and (existing.user_id != user_id or existing.symbol != symbol):
        raise ValidationError(
            f"Position {existing.user_id}/{existing.symbol} does not match trade {user_id}/{symbol}"
        )

    total = quantity * price
    if not math.isfinite(total):
        raise ValidationError(f"Trade value {quantity} x {price} is out of range")
    trade = Trade(
        user_id=user_id,
        symbol=symbol,
        side=trade_side,
        quantity=quantity,
        price=price,
        total=total,
        timestamp=timestamp or datetime.now(),
    )

    if trade_side is TradeSide.BUY:
        if existing is None:
            position = Position(
                user_id=user_id,
                symbol=symbol,
                quantity=quantity,
                avg_cost=price,
                total_invested=total,
            )
            return LedgerUpdate(position=position, trade=trade, action="create")

        new_quantity = existing.quantity + quantity
        new_total_invested = existing.total_invested + total
        if new_quantity > MAX_QUANTITY or not math.isfinite(new_total_invested):
            raise ValidationError(
                f"Position in {symbol} would exceed the supported size ({new_quantity} units)"
            )
        position = existing.model_copy(
            update={
                "quantity": new_quantity,
                "avg_cost": new_total_invested / new_quantity,
                "total_invested": new_total_invested,
            }
        )
        return LedgerUpdate(position=position, trade=trade, action="update")

    # SELL
    if existing is None:
        return LedgerUpdate(position=None, trade=trade, action="none")

    new_quantity = max(0, existing.quantity - quantity)
    if new_quantity == 0:
        return LedgerUpdate(position=None, trade=trade, action="delete")

    position = existing.model_copy(update={"quantity": new_quantity})
    return LedgerUpdate(position=position, trade=trade, action="update")


def replay(trades: list[Trade]) -> dict[tuple[str, str], Position]:
    """Rebuild positions from trade history in order.

    Args:
        trades: Trades sorted oldest first.

    Returns:
        Mapping of (user_id, symbol) to the resulting position.
    """
    positions: dict[tuple[str, str], Position] = {}
    for trade in trades:
        key = (trade.user_id, trade.symbol)
        update = apply_trade(
            positions.get(key),
            trade.side,
            trade.quantity,
            trade.price,
            user_id=trade.user_id,
            symbol=trade.symbol,
            timestamp=trade.timestamp,
        )
        if update.position is None:
            positions.pop(key, None)
        else:
            positions[key] = update.position
    return positions
