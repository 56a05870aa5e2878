"""Property-based tests for the portfolio ledger.

**Feature: portfolio-ledger**
"""

import math
from datetime import datetime

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradesense.errors import ValidationError
from tradesense.ledger import MAX_QUANTITY, apply_trade, replay
from tradesense.models import Position, Trade, TradeSide


USER = "alice"
SYMBOL = "TCS"

quantities = st.integers(min_value=1, max_value=10000)
prices = st.floats(min_value=0.01, max_value=100000.0, allow_nan=False, allow_infinity=False)


def _apply(existing, side, quantity, price):
    return apply_trade(existing, side, quantity, price, user_id=USER, symbol=SYMBOL)


def _position(quantity: int, avg_cost: float, total_invested: float) -> Position:
    return Position(
        user_id=USER,
        symbol=SYMBOL,
        quantity=quantity,
        avg_cost=avg_cost,
        total_invested=total_invested,
    )


class TestWeightedAverageCost:
    """
    **Feature: portfolio-ledger, Property 1: Weighted Average Cost**

    *For any* sequence of BUYs on an empty position, avg_cost equals the
    quantity-weighted average of the buy prices.
    """

    @given(buys=st.lists(st.tuples(quantities, prices), min_size=1, max_size=30))
    @settings(max_examples=100)
    def test_avg_cost_is_weighted_average(self, buys: list[tuple[int, float]]):
        position = None
        for quantity, price in buys:
            position = _apply(position, "BUY", quantity, price).position

        total_qty = sum(q for q, _ in buys)
        total_cost = sum(q * p for q, p in buys)

        assert position.quantity == total_qty
        assert math.isclose(position.total_invested, total_cost, rel_tol=1e-9)
        assert math.isclose(position.avg_cost, total_cost / total_qty, rel_tol=1e-9)

    def test_first_buy_creates_position(self):
        update = _apply(None, "BUY", 10, 100.0)

        assert update.action == "create"
        assert update.position == _position(10, 100.0, 1000.0)

    def test_second_buy_updates_average(self):
        first = _apply(None, "BUY", 10, 100.0).position
        update = _apply(first, "BUY", 5, 200.0)

        assert update.action == "update"
        assert update.position.quantity == 15
        assert update.position.total_invested == pytest.approx(2000.0)
        assert update.position.avg_cost == pytest.approx(133.33, abs=0.01)


class TestSellClamp:
    """
    **Feature: portfolio-ledger, Property 2: Sell Never Goes Negative**

    *For any* SELL quantity, the resulting quantity is max(0, held - sold)
    and a zero position is deleted rather than kept.
    """

    @given(held=quantities, sold=quantities, price=prices)
    @settings(max_examples=100)
    def test_sell_clamps_at_zero(self, held: int, sold: int, price: float):
        existing = _position(held, 50.0, held * 50.0)
        update = _apply(existing, "SELL", sold, price)

        if sold >= held:
            assert update.action == "delete"
            assert update.position is None
        else:
            assert update.action == "update"
            assert update.position.quantity == held - sold

    def test_full_sell_deletes_position(self):
        position = _apply(None, "BUY", 10, 100.0).position
        position = _apply(position, "BUY", 5, 200.0).position

        update = _apply(position, "SELL", 15, 1.0)

        assert update.action == "delete"
        assert update.position is None

    def test_oversell_deletes_position(self):
        update = _apply(_position(10, 100.0, 1000.0), "SELL", 100, 120.0)

        assert update.action == "delete"
        assert update.position is None
        assert update.trade.quantity == 100

    def test_sell_without_position_only_records_trade(self):
        update = _apply(None, "SELL", 5, 100.0)

        assert update.action == "none"
        assert update.position is None
        assert update.trade.side is TradeSide.SELL
        assert update.trade.total == 500.0


class TestPartialSellCostBasis:
    """
    **Feature: portfolio-ledger, Property 3: Partial Sell Keeps Cost Basis**

    A partial SELL changes only quantity. avg_cost and total_invested are
    left as they were, so total_invested stays at the pre-sell amount even
    though fewer units are held.
    """

    def test_partial_sell_keeps_cost_basis(self):
        existing = _position(15, 133.33, 2000.0)
        update = _apply(existing, "SELL", 4, 150.0)

        assert update.position.quantity == 11
        assert update.position.avg_cost == 133.33
        assert update.position.total_invested == 2000.0

    def test_partial_sell_leaves_total_invested_stale(self):
        existing = _position(15, 2000.0 / 15, 2000.0)
        position = _apply(existing, "SELL", 5, 150.0).position

        assert position.quantity * position.avg_cost != pytest.approx(position.total_invested)

    @given(held=st.integers(min_value=2, max_value=10000), price=prices, data=st.data())
    @settings(max_examples=50)
    def test_partial_sell_only_changes_quantity(self, held: int, price: float, data):
        sold = data.draw(st.integers(min_value=1, max_value=held - 1))
        existing = _position(held, 42.0, held * 42.0)

        position = _apply(existing, "SELL", sold, price).position

        assert position.model_dump(exclude={"quantity"}) == existing.model_dump(exclude={"quantity"})


class TestTradeRecord:
    """
    **Feature: portfolio-ledger, Property 4: Unconditional Audit Record**

    *For any* valid trade, a trade record with total = quantity * price is
    produced regardless of side or existing position.
    """

    @given(
        side=st.sampled_from(["BUY", "SELL"]),
        quantity=quantities,
        price=prices,
        has_position=st.booleans(),
    )
    @settings(max_examples=100)
    def test_trade_always_recorded(self, side, quantity, price, has_position):
        existing = _position(10, 100.0, 1000.0) if has_position else None
        update = _apply(existing, side, quantity, price)

        assert update.trade.user_id == USER
        assert update.trade.symbol == SYMBOL
        assert update.trade.side.value == side
        assert update.trade.quantity == quantity
        assert update.trade.price == price
        assert update.trade.total == pytest.approx(quantity * price)

    def test_timestamp_is_used_when_given(self):
        when = datetime(2025, 1, 2, 9, 15)
        update = apply_trade(None, "BUY", 1, 10.0, user_id=USER, symbol=SYMBOL, timestamp=when)

        assert update.trade.timestamp == when

    def test_side_is_case_insensitive(self):
        assert _apply(None, "buy", 1, 10.0).trade.side is TradeSide.BUY


class TestValidation:
    """Invalid inputs fail fast with ValidationError."""

    @pytest.mark.parametrize("quantity", [0, -1, -100])
    def test_non_positive_quantity(self, quantity):
        with pytest.raises(ValidationError):
            _apply(None, "BUY", quantity, 10.0)

    def test_fractional_quantity(self):
        with pytest.raises(ValidationError):
            _apply(None, "BUY", 1.5, 10.0)

    @pytest.mark.parametrize("price", [0, -0.01, float("nan"), float("inf")])
    def test_invalid_price(self, price):
        with pytest.raises(ValidationError):
            _apply(None, "BUY", 1, price)

    @pytest.mark.parametrize("side", ["HOLD", "", "SHORT"])
    def test_unknown_side(self, side):
        with pytest.raises(ValidationError):
            _apply(None, side, 1, 10.0)

    def test_mismatched_position(self):
        other = Position(user_id="bob", symbol=SYMBOL, quantity=1, avg_cost=1.0, total_invested=1.0)
        with pytest.raises(ValidationError):
            _apply(other, "BUY", 1, 10.0)

    @pytest.mark.parametrize("quantity", [MAX_QUANTITY + 1, 10**400])
    def test_quantity_beyond_integer_column(self, quantity):
        with pytest.raises(ValidationError):
            _apply(None, "BUY", quantity, 1.0)

    def test_largest_quantity_is_accepted(self):
        update = _apply(None, "BUY", MAX_QUANTITY, 1.0)
        assert update.position.quantity == MAX_QUANTITY

    def test_trade_value_overflow(self):
        with pytest.raises(ValidationError):
            _apply(None, "BUY", 10**10, 1e300)

    def test_buy_past_largest_position(self):
        held = Position(
            user_id=USER, symbol=SYMBOL, quantity=MAX_QUANTITY, avg_cost=1.0,
            total_invested=float(MAX_QUANTITY),
        )
        with pytest.raises(ValidationError):
            _apply(held, "BUY", 1, 1.0)

    def test_buy_past_largest_invested_amount(self):
        held = Position(user_id=USER, symbol=SYMBOL, quantity=1, avg_cost=1e308, total_invested=1e308)
        with pytest.raises(ValidationError):
            _apply(held, "BUY", 1, 1e308)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            _apply(None, "BUY", 0, 10.0)


class TestReplay:
    """Positions are the projection of the trade history."""

    def test_replay_matches_incremental_updates(self):
        trades = [
            Trade(user_id=USER, symbol=SYMBOL, side="BUY", quantity=10, price=100.0,
                  total=1000.0, timestamp=datetime(2025, 1, 1)),
            Trade(user_id=USER, symbol=SYMBOL, side="BUY", quantity=5, price=200.0,
                  total=1000.0, timestamp=datetime(2025, 1, 2)),
            Trade(user_id=USER, symbol="INFY", side="BUY", quantity=3, price=1500.0,
                  total=4500.0, timestamp=datetime(2025, 1, 3)),
            Trade(user_id=USER, symbol="INFY", side="SELL", quantity=3, price=1600.0,
                  total=4800.0, timestamp=datetime(2025, 1, 4)),
        ]

        positions = replay(trades)

        assert list(positions) == [(USER, SYMBOL)]
        assert positions[(USER, SYMBOL)].quantity == 15
        assert positions[(USER, SYMBOL)].total_invested == pytest.approx(2000.0)

    def test_replay_empty(self):
        assert replay([]) == {}
