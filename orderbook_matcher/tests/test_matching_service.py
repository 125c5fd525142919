"""
Tests for the matching service layer.
"""

from datetime import datetime
from decimal import Decimal
from unittest.mock import patch

import pytest

from orderbook_matcher.config import Settings
from orderbook_matcher.core.matching_policy import MatchingPolicy
from orderbook_matcher.core.order import Match, MatchState, Order, OrderSide
from orderbook_matcher.services.matching_service import MatchingService
from orderbook_matcher.utils.exceptions import (
    BatchTooLargeException,
    DuplicateOrderException,
    InvalidOrderException,
    UnknownPolicyException,
    ValidationException,
)
from orderbook_matcher.utils.logger import MatchingEngineLogger

TS = datetime(2025, 6, 1, 9, 0, 0)


def _batch():
    return [
        Order("A", "A1", OrderSide.BUY, 150, Decimal("5.10"), TS),
        Order("B", "B1", OrderSide.SELL, 100, Decimal("5.00"), TS),
    ]


@pytest.fixture
def service():
    settings = Settings(default_policy=MatchingPolicy.PRICE_TIME, max_batch_size=10, log_fills=True)
    return MatchingService(settings, MatchingEngineLogger(name="test.matching_service"))


class TestMatchingService:
    """Test cases for MatchingService."""

    def test_run_uses_default_policy(self, service):
        orders = _batch()

        result = service.run(orders)

        assert result.policy == MatchingPolicy.PRICE_TIME
        assert result.orders is orders
        assert result.fill_count == 1
        assert result.matched_volume == 100
        assert result.states == {"PARTIAL_MATCH": 1, "FULL_MATCH": 1}
        # Discriminatory pricing: the buy records the sell's notional
        assert orders[0].matches == [Match("B1", Decimal("5.00"), 100)]

    def test_run_with_explicit_policy(self, service):
        orders = _batch()

        result = service.run(orders, "pro_rata")

        assert result.policy == MatchingPolicy.PRO_RATA
        # Different notionals never meet under pro-rata
        assert all(o.match_state == MatchState.NO_MATCH for o in orders)
        assert result.matched_volume == 0

    def test_unknown_policy(self, service):
        with pytest.raises(UnknownPolicyException):
            service.run(_batch(), "auction")

    def test_rejects_duplicate_ids_before_matching(self, service):
        orders = _batch() + [Order("C", "A1", OrderSide.SELL, 10, Decimal("5.00"), TS)]

        with pytest.raises(DuplicateOrderException):
            service.run(orders)

        assert all(o.match_state == MatchState.PENDING for o in orders)

    @pytest.mark.parametrize("notional", ["NaN", "Infinity", "-Infinity"])
    def test_rejects_non_finite_notional(self, service, notional):
        orders = [Order("A", "A1", OrderSide.BUY, 10, Decimal(notional), TS)]

        with pytest.raises(InvalidOrderException):
            service.run(orders)

        assert orders[0].match_state == MatchState.PENDING

    def test_rejects_oversize_batch(self, service):
        orders = [Order("A", f"A{i}", OrderSide.BUY, 1, Decimal("5.00"), TS) for i in range(11)]

        with pytest.raises(BatchTooLargeException):
            service.run(orders)

    def test_statistics_accumulate(self, service):
        service.run(_batch())
        service.run(_batch())

        stats = service.get_statistics()

        assert stats["batches_processed"] == 2
        assert stats["orders_processed"] == 4
        assert stats["fills_recorded"] == 2
        assert stats["volume_matched"] == 200

    def test_audit_failure_raises(self, service, caplog):
        with patch(
            "orderbook_matcher.services.matching_service.audit_matched_batch",
            return_value=["A1: broken"],
        ):
            with pytest.raises(ValidationException) as exc_info:
                service.run(_batch())

        assert exc_info.value.details["violations"] == ["A1: broken"]
        assert any(
            r.levelname == "ERROR" and "failed audit" in r.getMessage() for r in caplog.records
        )
        assert service.get_statistics()["batches_processed"] == 0

    def test_result_to_dict(self, service):
        result = service.run(_batch())

        data = result.to_dict()

        assert data["policy"] == "price_time"
        assert data["matched_volume"] == 100
        assert [o["order_id"] for o in data["orders"]] == ["A1", "B1"]
