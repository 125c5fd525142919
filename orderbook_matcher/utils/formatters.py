"""Text rendering of matched batches for console output"""
from decimal import Decimal
from typing import Iterable, List

from orderbook_matcher.core.order import Match, Order


def format_notional(notional: Decimal, decimals: int = 2) -> str:
    quantized = Decimal(notional).quantize(Decimal(1).scaleb(-decimals))
    return f"{quantized:f}"


def format_match(match: Match) -> str:
    return (
        f"  - Matched with {match.order_id}, "
        f"Notional {format_notional(match.notional)}, Volume {match.volume}"
    )


def format_order(order: Order) -> str:
    side = "Buy" if order.is_buy else "Sell"
    return (
        f"OrderId {order.order_id} {side} - {order.match_state.value}, "
        f"Notional {format_notional(order.notional)}, "
        f"Original {order.volume}, Remaining {order.remaining_volume}"
    )


def format_batch(orders: Iterable[Order]) -> str:
    """Render orders sorted by order ID, each followed by its fills."""
    lines: List[str] = []
    for order in sorted(orders, key=lambda o: o.order_id):
        lines.append(format_order(order))
        lines.extend(format_match(m) for m in order.matches)
    return "\n".join(lines)
