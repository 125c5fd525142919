"""
Tests for the price-time priority matcher.

Covers full, partial and no-cross scenarios, invalid orders, priority ordering
and the per-counterparty notional recorded on each fill.
"""

import pytest
from datetime import datetime
from decimal import Decimal

from orderbook_matcher.core.order import Order, OrderSide, MatchState, Match
from orderbook_matcher.core.price_time_matcher import PriceTimeOrderMatcher


def _ts(minute: int, hour: int = 9) -> datetime:
    return datetime(2025, 6, 1, hour, minute, 0)


def _by_id(orders, order_id):
    return next(o for o in orders if o.order_id == order_id)


@pytest.fixture
def matcher():
    return PriceTimeOrderMatcher()


class TestBasicMatching:
    """Single buy against single sell."""

    def test_buy_and_sell_same_volume_full_match(self, matcher):
        """Equal volume at equal price fully fills both sides."""
        orders = [
            Order("A", "A1", OrderSide.BUY, 100, Decimal("5.00"), _ts(0)),
            Order("B", "B1", OrderSide.SELL, 100, Decimal("5.00"), _ts(1)),
        ]

        result = matcher.match_orders(orders)

        buy = _by_id(result, "A1")
        assert buy.match_state == MatchState.FULL_MATCH
        assert buy.remaining_volume == 0
        assert buy.matches == [Match("B1", Decimal("5.00"), 100)]

        sell = _by_id(result, "B1")
        assert sell.match_state == MatchState.FULL_MATCH
        assert sell.remaining_volume == 0
        assert sell.matches == [Match("A1", Decimal("5.00"), 100)]

    def test_buy_more_than_sell_partial_match(self, matcher):
        """Larger buy is left partially filled."""
        orders = [
            Order("A", "A1", OrderSide.BUY, 150, Decimal("5.00"), _ts(0)),
            Order("B", "B1", OrderSide.SELL, 100, Decimal("5.00"), _ts(1)),
        ]

        matcher.match_orders(orders)

        buy, sell = orders
        assert buy.match_state == MatchState.PARTIAL_MATCH
        assert buy.remaining_volume == 50
        assert len(buy.matches) == 1
        assert sell.match_state == MatchState.FULL_MATCH
        assert sell.remaining_volume == 0
        assert len(sell.matches) == 1

    def test_buy_less_than_sell_partial_match(self, matcher):
        """Larger sell is left partially filled."""
        orders = [
            Order("A", "A1", OrderSide.BUY, 100, Decimal("5.00"), _ts(0)),
            Order("B", "B1", OrderSide.SELL, 150, Decimal("5.00"), _ts(1)),
        ]

        matcher.match_orders(orders)

        buy, sell = orders
        assert buy.match_state == MatchState.FULL_MATCH
        assert buy.remaining_volume == 0
        assert sell.match_state == MatchState.PARTIAL_MATCH
        assert sell.remaining_volume == 50

    def test_no_crossing_price_no_match(self, matcher):
        """Buy below sell leaves both untouched."""
        orders = [
            Order("A", "A1", OrderSide.BUY, 100, Decimal("4.00"), _ts(0)),
            Order("B", "B1", OrderSide.SELL, 100, Decimal("5.00"), _ts(1)),
        ]

        matcher.match_orders(orders)

        for order in orders:
            assert order.match_state == MatchState.NO_MATCH
            assert order.remaining_volume == 100
            assert order.matches == []


class TestInvalidAndEmptyBatches:
    """Edge cases that must never raise."""

    def test_zero_and_negative_volume_invalid(self, matcher):
        """Non-positive volumes are classified invalid and never filled."""
        orders = [
            Order("A", "A1", OrderSide.BUY, 0, Decimal("5.00"), _ts(0)),
            Order("B", "B1", OrderSide.SELL, -10, Decimal("5.00"), _ts(1)),
        ]

        matcher.match_orders(orders)

        for order in orders:
            assert order.match_state == MatchState.INVALID_ORDER
            assert order.matches == []

    def test_invalid_order_does_not_block_valid_ones(self, matcher):
        """An invalid sell at a better price is skipped entirely."""
        orders = [
            Order("A", "A1", OrderSide.BUY, 100, Decimal("5.00"), _ts(0)),
            Order("B", "B0", OrderSide.SELL, 0, Decimal("4.00"), _ts(0)),
            Order("B", "B1", OrderSide.SELL, 100, Decimal("5.00"), _ts(1)),
        ]

        matcher.match_orders(orders)

        assert _by_id(orders, "B0").match_state == MatchState.INVALID_ORDER
        assert _by_id(orders, "A1").matches == [Match("B1", Decimal("5.00"), 100)]
        assert _by_id(orders, "B1").match_state == MatchState.FULL_MATCH

    def test_empty_batch(self, matcher):
        """Empty batch returns the same empty list."""
        orders = []

        result = matcher.match_orders(orders)

        assert result is orders
        assert result == []

    def test_buy_only_batch_no_match(self, matcher):
        """One-sided batch leaves every order unmatched."""
        orders = [
            Order("A", "A1", OrderSide.BUY, 100, Decimal("5.00"), _ts(0)),
            Order("A", "A2", OrderSide.BUY, 200, Decimal("5.00"), _ts(1)),
        ]

        matcher.match_orders(orders)

        assert all(o.match_state == MatchState.NO_MATCH for o in orders)

    def test_sell_only_batch_no_match(self, matcher):
        """One-sided batch leaves every order unmatched."""
        orders = [
            Order("B", "B1", OrderSide.SELL, 100, Decimal("5.00"), _ts(0)),
            Order("B", "B2", OrderSide.SELL, 200, Decimal("5.00"), _ts(1)),
        ]

        matcher.match_orders(orders)

        assert all(o.match_state == MatchState.NO_MATCH for o in orders)


class TestPriority:
    """Price then time priority across several orders."""

    def test_multiple_orders_price_time_priority(self, matcher):
        """Earlier buy at the best price is filled first, in sell priority order."""
        orders = [
            Order("A", "A1", OrderSide.BUY, 100, Decimal("4.99"), _ts(27)),
            Order("B", "B1", OrderSide.BUY, 200, Decimal("5.00"), _ts(21, hour=10)),
            Order("C", "C1", OrderSide.BUY, 150, Decimal("5.00"), _ts(26, hour=10)),
            Order("D", "D1", OrderSide.SELL, 150, Decimal("5.00"), _ts(32, hour=10)),
            Order("E", "E1", OrderSide.SELL, 100, Decimal("5.00"), _ts(33, hour=10)),
            Order("F", "F1", OrderSide.SELL, 100, Decimal("7.00"), _ts(33, hour=10)),
        ]

        result = matcher.match_orders(orders)

        assert result[0].match_state == MatchState.NO_MATCH
        assert result[0].matches == []

        assert result[1].match_state == MatchState.FULL_MATCH
        assert result[1].remaining_volume == 0
        assert result[1].matches == [
            Match("D1", Decimal("5.00"), 150),
            Match("E1", Decimal("5.00"), 50),
        ]

        assert result[2].match_state == MatchState.PARTIAL_MATCH
        assert result[2].remaining_volume == 100
        assert result[2].matches == [Match("E1", Decimal("5.00"), 50)]

        assert result[3].match_state == MatchState.FULL_MATCH
        assert result[3].matches == [Match("B1", Decimal("5.00"), 150)]

        assert result[4].match_state == MatchState.FULL_MATCH
        assert result[4].matches == [
            Match("B1", Decimal("5.00"), 50),
            Match("C1", Decimal("5.00"), 50),
        ]

        assert result[5].match_state == MatchState.NO_MATCH
        assert result[5].matches == []

    def test_higher_buy_price_beats_earlier_arrival(self, matcher):
        """Price outranks time on the buy side."""
        orders = [
            Order("A", "A1", OrderSide.BUY, 100, Decimal("5.00"), _ts(0)),
            Order("B", "B1", OrderSide.BUY, 100, Decimal("5.10"), _ts(5)),
            Order("C", "C1", OrderSide.SELL, 100, Decimal("5.00"), _ts(10)),
        ]

        matcher.match_orders(orders)

        assert _by_id(orders, "B1").match_state == MatchState.FULL_MATCH
        assert _by_id(orders, "A1").match_state == MatchState.NO_MATCH

    def test_cheapest_sell_filled_first(self, matcher):
        """Sells are consumed in ascending notional order regardless of batch order."""
        orders = [
            Order("S", "S2", OrderSide.SELL, 50, Decimal("5.05"), _ts(0)),
            Order("S", "S1", OrderSide.SELL, 50, Decimal("5.00"), _ts(1)),
            Order("A", "A1", OrderSide.BUY, 75, Decimal("5.10"), _ts(2)),
        ]

        matcher.match_orders(orders)

        assert [m.order_id for m in _by_id(orders, "A1").matches] == ["S1", "S2"]
        assert _by_id(orders, "S1").match_state == MatchState.FULL_MATCH
        assert _by_id(orders, "S2").remaining_volume == 25

    def test_same_price_sells_filled_by_arrival(self, matcher):
        """Earlier sell at the same price is filled first."""
        orders = [
            Order("S", "S_LATE", OrderSide.SELL, 100, Decimal("5.00"), _ts(30)),
            Order("S", "S_EARLY", OrderSide.SELL, 100, Decimal("5.00"), _ts(10)),
            Order("A", "A1", OrderSide.BUY, 100, Decimal("5.00"), _ts(40)),
        ]

        matcher.match_orders(orders)

        assert _by_id(orders, "S_EARLY").match_state == MatchState.FULL_MATCH
        assert _by_id(orders, "S_LATE").match_state == MatchState.NO_MATCH

    def test_lower_buy_stops_at_uncrossed_sell(self, matcher):
        """Once a sell is too dear for one buy, later buys cannot trade it either."""
        orders = [
            Order("A", "A1", OrderSide.BUY, 50, Decimal("5.20"), _ts(0)),
            Order("A", "A2", OrderSide.BUY, 50, Decimal("4.90"), _ts(1)),
            Order("S", "S1", OrderSide.SELL, 50, Decimal("5.00"), _ts(2)),
            Order("S", "S2", OrderSide.SELL, 50, Decimal("5.10"), _ts(3)),
        ]

        matcher.match_orders(orders)

        assert _by_id(orders, "A1").matches == [Match("S1", Decimal("5.00"), 50)]
        assert _by_id(orders, "A2").match_state == MatchState.NO_MATCH
        assert _by_id(orders, "S2").match_state == MatchState.NO_MATCH


class TestFillRecords:
    """Reciprocal fills and discriminatory pricing."""

    def test_each_side_records_counterparty_notional(self, matcher):
        """A crossing fill records the seller's price on the buy and vice versa."""
        orders = [
            Order("A", "A1", OrderSide.BUY, 100, Decimal("5.10"), _ts(0)),
            Order("B", "B1", OrderSide.SELL, 100, Decimal("5.00"), _ts(1)),
        ]

        matcher.match_orders(orders)

        buy, sell = orders
        assert buy.matches == [Match("B1", Decimal("5.00"), 100)]
        assert sell.matches == [Match("A1", Decimal("5.10"), 100)]

    def test_rematching_resets_previous_state(self, matcher):
        """A second call recomputes from scratch instead of accumulating fills."""
        orders = [
            Order("A", "A1", OrderSide.BUY, 100, Decimal("5.00"), _ts(0)),
            Order("B", "B1", OrderSide.SELL, 60, Decimal("5.00"), _ts(1)),
        ]

        matcher.match_orders(orders)
        first = [(o.match_state, o.remaining_volume, list(o.matches)) for o in orders]
        matcher.match_orders(orders)
        second = [(o.match_state, o.remaining_volume, list(o.matches)) for o in orders]

        assert first == second
        assert orders[0].remaining_volume == 40
