"""
Pydantic models for API request/response validation.

This module defines all data models used by the REST API, ensuring type
safety and validation at the boundary before orders reach a matcher.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orderbook_matcher.core.order import Match, Order, OrderSide


# ============================================================================
# Request Models
# ============================================================================

class OrderRequest(BaseModel):
    """Request model for one order in a batch."""

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "party_id": "A",
            "order_id": "A1",
            "side": "buy",
            "volume": 100,
            "notional": "5.00",
            "timestamp": "2025-06-01T09:27:00"
        }
    })

    party_id: str = Field(..., description="Owning party identifier", min_length=1, max_length=64)
    order_id: str = Field(..., description="Unique order identifier", min_length=1, max_length=64)
    side: str = Field(
        ...,
        description="Order side: buy or sell",
        pattern=r'^(buy|sell)$'
    )
    volume: int = Field(
        ...,
        description="Order volume; zero or negative volumes are reported as invalid orders"
    )
    notional: str = Field(
        ...,
        description="Per-unit notional as decimal string",
        pattern=r'^\d+(\.\d+)?$'
    )
    timestamp: datetime = Field(..., description="Order arrival time")

    @field_validator('order_id', 'party_id')
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """Reject blank identifiers."""
        if not v.strip():
            raise ValueError("Identifier cannot be blank")
        return v

    @field_validator('notional')
    @classmethod
    def validate_notional(cls, v: str) -> str:
        """Validate notional is positive; configured bounds are checked by the service."""
        if Decimal(v) <= 0:
            raise ValueError("Notional must be positive")
        return v

    def to_order(self) -> Order:
        """Build a pending domain Order."""
        return Order(
            party_id=self.party_id,
            order_id=self.order_id,
            side=OrderSide[self.side.upper()],
            volume=self.volume,
            notional=Decimal(self.notional),
            timestamp=self.timestamp,
        )


class MatchRequest(BaseModel):
    """Request model for matching a batch."""

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "policy": "pro_rata",
            "orders": [
                {"party_id": "A", "order_id": "A1", "side": "buy", "volume": 100,
                 "notional": "5.00", "timestamp": "2025-06-01T09:27:00"},
                {"party_id": "B", "order_id": "B1", "side": "sell", "volume": 100,
                 "notional": "5.00", "timestamp": "2025-06-01T10:21:00"}
            ]
        }
    })

    policy: Optional[str] = Field(
        None,
        description="Matching policy: price_time or pro_rata (server default when omitted)",
        pattern=r'^(price_time|pro_rata)$'
    )
    orders: List[OrderRequest] = Field(default_factory=list, description="Orders to match")

    def to_orders(self) -> List[Order]:
        """Build domain Orders in request order."""
        return [o.to_order() for o in self.orders]


# ============================================================================
# Response Models
# ============================================================================

class MatchFillResponse(BaseModel):
    """Response model for a fill recorded on an order."""

    order_id: str = Field(..., description="Counterparty order ID")
    notional: str = Field(..., description="Notional recorded for the fill")
    volume: int = Field(..., description="Filled volume")

    @classmethod
    def from_match(cls, match: Match) -> 'MatchFillResponse':
        """Create from Match object."""
        return cls(order_id=match.order_id, notional=str(match.notional), volume=match.volume)


class OrderResultResponse(BaseModel):
    """Response model for an order after matching."""

    party_id: str
    order_id: str
    side: str
    volume: int
    notional: str
    timestamp: datetime
    match_state: str = Field(..., description="no_match/partial_match/full_match/invalid_order")
    remaining_volume: int
    matches: List[MatchFillResponse] = Field(default_factory=list)

    @classmethod
    def from_order(cls, order: Order) -> 'OrderResultResponse':
        """Create from Order object."""
        return cls(
            party_id=order.party_id,
            order_id=order.order_id,
            side=order.side.value.lower(),
            volume=order.volume,
            notional=str(order.notional),
            timestamp=order.timestamp,
            match_state=order.match_state.value.lower(),
            remaining_volume=order.remaining_volume,
            matches=[MatchFillResponse.from_match(m) for m in order.matches],
        )


class MatchResponse(BaseModel):
    """Response model for a matched batch."""

    batch_id: str = Field(..., description="Identifier assigned to the run")
    policy: str = Field(..., description="Policy used")
    fill_count: int = Field(..., description="Number of reciprocal fill pairs")
    matched_volume: int = Field(..., description="Total volume exchanged")
    states: Dict[str, int] = Field(default_factory=dict, description="Order count per match state")
    execution_time_ms: float = Field(..., description="Time spent matching")
    orders: List[OrderResultResponse] = Field(default_factory=list)

    @classmethod
    def from_match_result(cls, result: 'MatchResult') -> 'MatchResponse':
        """Create from MatchResult object."""
        return cls(
            batch_id=result.batch_id,
            policy=result.policy.value,
            fill_count=result.fill_count,
            matched_volume=result.matched_volume,
            states={k.lower(): v for k, v in result.states.items()},
            execution_time_ms=result.execution_time_ms,
            orders=[OrderResultResponse.from_order(o) for o in result.orders],
        )


class PoliciesResponse(BaseModel):
    """Response model for the policy listing."""

    policies: List[str] = Field(..., description="Available matching policies")
    default_policy: str = Field(..., description="Policy used when a request names none")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Check timestamp")
    version: str = Field(..., description="API version")
    matching_service: Dict[str, Any] = Field(..., description="Matching service statistics")


class ErrorResponse(BaseModel):
    """Response model for errors."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error timestamp")
