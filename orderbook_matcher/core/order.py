"""
Order domain model with enums and fill state

This module defines the Order and Match classes and the enums used by the
matchers. Orders carry mutable fill state (remaining volume, match list and
classification) which every matcher call recomputes from scratch.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List


class OrderSide(Enum):
    """Order side enumeration."""
    BUY = "BUY"
    SELL = "SELL"

    def __str__(self) -> str:
        return self.value


class MatchState(Enum):
    """Match classification of an order after a matcher run."""
    PENDING = "PENDING"              # Initial state
    NO_MATCH = "NO_MATCH"
    PARTIAL_MATCH = "PARTIAL_MATCH"
    FULL_MATCH = "FULL_MATCH"
    INVALID_ORDER = "INVALID_ORDER"  # Zero or negative volume

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Match:
    """
    A single fill recorded on an order.

    Immutable; the counterparty carries a reciprocal record with the same volume.

    Attributes:
        order_id: Counterparty order identifier
        notional: Execution notional recorded for this fill
        volume: Filled quantity
    """

    order_id: str
    notional: Decimal
    volume: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert match to dictionary for API serialization."""
        return {
            "order_id": self.order_id,
            "notional": str(self.notional),
            "volume": self.volume,
        }


@dataclass(slots=True)
class Order:
    """
    Represents one resting interest submitted to a matcher.

    The constructor never rejects a non-positive volume: such orders become
    INVALID_ORDER when a matcher resets them and take no part in matching.

    Attributes:
        party_id: Identifier of the owning party
        order_id: Unique order identifier
        side: Buy or sell
        volume: Original volume, fixed at creation
        notional: Per-unit price level
        timestamp: Arrival time, used for time priority
        match_state: Current match classification
        remaining_volume: Unfilled volume
        matches: Fills in the order they were made
    """

    party_id: str
    order_id: str
    side: OrderSide
    volume: int
    notional: Decimal
    timestamp: datetime
    match_state: MatchState = MatchState.PENDING
    remaining_volume: int = field(init=False)
    matches: List[Match] = field(default_factory=list)

    def __post_init__(self):
        self.remaining_volume = self.volume

    def reset_match_state(self) -> None:
        """Restore the order to its pre-matching state."""
        self.remaining_volume = self.volume
        self.matches.clear()
        self.match_state = MatchState.PENDING

        if self.volume <= 0:
            self.match_state = MatchState.INVALID_ORDER

    def record_fill(self, counterparty_id: str, notional: Decimal, volume: int) -> None:
        """
        Apply one fill against this order.

        Args:
            counterparty_id: Order ID on the other side of the fill
            notional: Notional recorded for the fill
            volume: Filled quantity
        """
        self.remaining_volume -= volume
        self.matches.append(Match(counterparty_id, notional, volume))

    def finalize_match_state(self) -> None:
        """
        Classify the order from its remaining volume and fill count.

        Orders matching none of the rules keep their current state, which is
        how INVALID_ORDER survives finalization.
        """
        if self.remaining_volume == 0 and self.matches:
            self.match_state = MatchState.FULL_MATCH
        elif self.remaining_volume > 0 and self.matches:
            self.match_state = MatchState.PARTIAL_MATCH
        elif self.remaining_volume > 0:
            self.match_state = MatchState.NO_MATCH

    @property
    def filled_volume(self) -> int:
        """Total volume filled so far."""
        return sum(m.volume for m in self.matches)

    @property
    def is_buy(self) -> bool:
        """Check if this is a buy order."""
        return self.side == OrderSide.BUY

    @property
    def is_sell(self) -> bool:
        """Check if this is a sell order."""
        return self.side == OrderSide.SELL

    @property
    def is_valid(self) -> bool:
        """Check if the order can take part in matching."""
        return self.match_state != MatchState.INVALID_ORDER

    def __repr__(self) -> str:
        return (
            f"Order(id={self.order_id}, party={self.party_id}, "
            f"{self.side.value} {self.volume} @ {self.notional}, "
            f"state={self.match_state.value}, remaining={self.remaining_volume})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert order to dictionary for API serialization."""
        return {
            "party_id": self.party_id,
            "order_id": self.order_id,
            "side": self.side.value,
            "volume": self.volume,
            "notional": str(self.notional),
            "timestamp": self.timestamp.isoformat(),
            "match_state": self.match_state.value,
            "remaining_volume": self.remaining_volume,
            "matches": [m.to_dict() for m in self.matches],
        }


def record_match(
    buy_order: Order,
    sell_order: Order,
    buy_notional: Decimal,
    sell_notional: Decimal,
    volume: int,
) -> None:
    """
    Write a reciprocal pair of fills.

    Each side records its counterparty's order ID. The buy order records
    ``sell_notional`` and the sell order records ``buy_notional``, so callers
    decide whether both sides share one notional.
    """
    buy_order.record_fill(sell_order.order_id, sell_notional, volume)
    sell_order.record_fill(buy_order.order_id, buy_notional, volume)
