"""
Input validation utilities

This module provides the checks a batch must pass before it reaches a matcher
(unique, non-empty order IDs, sane notionals, bounded batch size) and an audit
of the fill state a matcher leaves behind.
"""

from collections import Counter
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..core.order import Order, OrderSide
from .exceptions import (
    BatchTooLargeException,
    DuplicateOrderException,
    InvalidOrderException,
    InvalidQuantityException,
    PriceOutOfBoundsException,
)


def sanitize_decimal(value: Union[str, int, float, Decimal]) -> Decimal:
    """
    Convert a value to Decimal with proper error handling.

    Args:
        value: Value to convert to Decimal

    Returns:
        Decimal representation of the value

    Raises:
        InvalidOrderException: If value cannot be converted to Decimal
    """
    try:
        if isinstance(value, Decimal):
            result = value
        else:
            result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidOrderException(
            f"Invalid decimal value: {value}",
            details={"value": value, "error": str(e)}
        )

    if not result.is_finite():
        raise InvalidOrderException(
            f"Invalid decimal value: {value}",
            details={"value": value}
        )
    return result


def validate_notional(
    notional: Decimal,
    order_id: str,
    min_notional: Decimal = Decimal("0.00000001"),
    max_notional: Decimal = Decimal("10000000"),
) -> bool:
    """
    Validate an order notional.

    Args:
        notional: Notional to validate
        order_id: Order ID for context
        min_notional: Minimum acceptable notional
        max_notional: Maximum acceptable notional

    Returns:
        True if notional is valid

    Raises:
        InvalidOrderException: If notional is not a finite number
        PriceOutOfBoundsException: If notional is outside acceptable bounds
    """
    notional = sanitize_decimal(notional)

    if notional <= 0:
        raise PriceOutOfBoundsException(
            f"Notional must be positive, got {notional}",
            details={"order_id": order_id, "notional": str(notional)}
        )

    if notional < min_notional:
        raise PriceOutOfBoundsException(
            f"Notional {notional} is below minimum {min_notional}",
            details={"order_id": order_id, "notional": str(notional), "min": str(min_notional)}
        )

    if notional > max_notional:
        raise PriceOutOfBoundsException(
            f"Notional {notional} exceeds maximum {max_notional}",
            details={"order_id": order_id, "notional": str(notional), "max": str(max_notional)}
        )

    return True


def validate_volume(volume: int, order_id: str) -> bool:
    """
    Validate that a volume is a whole number.

    Zero and negative volumes pass: the matchers classify them as invalid
    orders rather than rejecting the batch.

    Raises:
        InvalidQuantityException: If volume is not an int
    """
    if isinstance(volume, bool) or not isinstance(volume, int):
        raise InvalidQuantityException(
            f"Volume must be a whole number, got {volume!r}",
            details={"order_id": order_id, "volume": repr(volume)}
        )
    return True


def validate_order_batch(
    orders: Sequence[Order],
    max_batch_size: Optional[int] = None,
    min_notional: Decimal = Decimal("0.00000001"),
    max_notional: Decimal = Decimal("10000000"),
) -> bool:
    """
    Validate a batch before matching.

    Args:
        orders: Orders to validate
        max_batch_size: Optional upper bound on batch length
        min_notional: Minimum acceptable notional
        max_notional: Maximum acceptable notional

    Returns:
        True if the batch can be matched

    Raises:
        BatchTooLargeException: If the batch is longer than max_batch_size
        InvalidOrderException: If an order is missing its ID, side or timestamp
        DuplicateOrderException: If two orders share an ID
        PriceOutOfBoundsException: If a notional is out of bounds
        InvalidQuantityException: If a volume is not a whole number
    """
    if max_batch_size is not None and len(orders) > max_batch_size:
        raise BatchTooLargeException(
            f"Batch of {len(orders)} orders exceeds maximum {max_batch_size}",
            details={"size": len(orders), "max": max_batch_size}
        )

    for order in orders:
        if not order.order_id or not str(order.order_id).strip():
            raise InvalidOrderException(
                "Order ID cannot be empty",
                details={"party_id": order.party_id}
            )
        if not isinstance(order.side, OrderSide):
            raise InvalidOrderException(
                f"Invalid side for order {order.order_id}: {order.side!r}",
                details={"order_id": order.order_id}
            )
        if not isinstance(order.timestamp, datetime):
            raise InvalidOrderException(
                f"Order {order.order_id} has no valid timestamp",
                details={"order_id": order.order_id}
            )
        validate_volume(order.volume, order.order_id)
        validate_notional(order.notional, order.order_id, min_notional, max_notional)

    # Naive and aware datetimes cannot be ordered against each other
    if len({o.timestamp.tzinfo is None for o in orders}) > 1:
        raise InvalidOrderException(
            "Batch mixes timezone-aware and naive timestamps",
            details={"order_ids": [o.order_id for o in orders]}
        )

    duplicates = sorted(oid for oid, count in Counter(o.order_id for o in orders).items() if count > 1)
    if duplicates:
        raise DuplicateOrderException(
            f"Duplicate order IDs in batch: {', '.join(duplicates)}",
            details={"order_ids": duplicates}
        )

    return True


def audit_matched_batch(orders: Sequence[Order]) -> List[str]:
    """
    Check the fill state a matcher left on a batch.

    Verifies volume conservation on every valid order and that each fill has a
    reciprocal record of the same volume on the counterparty.

    Returns:
        Human-readable violations, empty if the batch is consistent
    """
    violations: List[str] = []
    by_id: Dict[str, Order] = {o.order_id: o for o in orders}

    for order in orders:
        if not order.is_valid:
            if order.matches:
                violations.append(f"{order.order_id}: invalid order carries fills")
            continue

        if order.remaining_volume != order.volume - order.filled_volume:
            violations.append(
                f"{order.order_id}: remaining {order.remaining_volume} != "
                f"volume {order.volume} - filled {order.filled_volume}"
            )
        if not 0 <= order.remaining_volume <= order.volume:
            violations.append(
                f"{order.order_id}: remaining {order.remaining_volume} outside [0, {order.volume}]"
            )

    # Count fills per directed pair so repeated fills between the same orders balance out
    pair_volumes: Counter = Counter()
    for order in orders:
        for match in order.matches:
            pair_volumes[(order.order_id, match.order_id, match.volume)] += 1

    for (order_id, counterparty_id, volume), count in pair_volumes.items():
        if counterparty_id not in by_id:
            violations.append(f"{order_id}: fill references unknown order {counterparty_id}")
            continue
        reciprocal = pair_volumes.get((counterparty_id, order_id, volume), 0)
        if reciprocal != count:
            violations.append(
                f"{order_id}: {count} fill(s) of {volume} with {counterparty_id} "
                f"but {reciprocal} reciprocal"
            )

    return violations


def summarize_states(orders: Sequence[Order]) -> Dict[str, int]:
    """Count orders per match state."""
    return dict(Counter(o.match_state.value for o in orders))


def matched_totals(orders: Sequence[Order]) -> Tuple[int, int]:
    """Return (fill pair count, matched volume), counting each reciprocal pair once."""
    fills = sum(len(o.matches) for o in orders if o.is_buy)
    volume = sum(m.volume for o in orders if o.is_buy for m in o.matches)
    return fills, volume
