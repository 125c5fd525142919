"""
Pro-rata matcher.

Orders are grouped by exact notional and every notional present on both sides
is cleared as an independent single-price auction, lowest notional first. The side with the larger
(or equal) aggregate volume is split proportionally over the matchable volume
with the largest-remainder method, and each member's allocation is drained
from the other side in the order those orders appear in the batch.

There is no price crossing between levels: a buy at 6.00 never meets a sell
at 5.00. Both fill records of a pair carry the level's notional.
"""

import logging
from collections import deque
from decimal import Decimal
from typing import Deque, List

from sortedcontainers import SortedDict

from .allocation import pro_rata_allocations
from .order import Order, record_match

logger = logging.getLogger(__name__)


def _group_by_notional(orders: List[Order]) -> SortedDict:
    """Group orders into price levels keyed by notional, lowest first."""
    groups = SortedDict()
    for order in orders:
        groups.setdefault(order.notional, []).append(order)
    return groups


class ProRataOrderMatcher:
    """Matches a batch of orders by proportional allocation per notional."""

    def match_orders(self, orders: List[Order]) -> List[Order]:
        """
        Match a batch of orders in place.

        Args:
            orders: Batch to match; every order is reset first

        Returns:
            The same list, with fill state and classification updated
        """
        for order in orders:
            order.reset_match_state()

        buy_groups = _group_by_notional([o for o in orders if o.is_buy and o.is_valid])
        sell_groups = _group_by_notional([o for o in orders if o.is_sell and o.is_valid])

        for notional, buys in buy_groups.items():
            sells = sell_groups.get(notional)
            if not sells:
                continue
            self._match_level(notional, buys, sells)

        for order in orders:
            order.finalize_match_state()

        return orders

    def _match_level(self, notional: Decimal, buys: List[Order], sells: List[Order]) -> None:
        """Clear one notional level."""
        total_buy_volume = sum(b.remaining_volume for b in buys)
        total_sell_volume = sum(s.remaining_volume for s in sells)
        match_volume = min(total_buy_volume, total_sell_volume)

        if match_volume <= 0:
            return

        logger.debug(
            f"Level {notional}: buy volume {total_buy_volume}, "
            f"sell volume {total_sell_volume}, matching {match_volume}"
        )

        if total_buy_volume >= total_sell_volume:
            allocating, allocated_to = buys, sells
        else:
            allocating, allocated_to = sells, buys

        allocations = pro_rata_allocations(allocating, match_volume)

        # Forward-only cursor: a counterparty is dropped only once drained
        queue: Deque[Order] = deque(o for o in allocated_to if o.remaining_volume > 0)

        for order, allocation in allocations:
            if order.remaining_volume == 0 or allocation == 0:
                continue

            remaining = allocation
            while remaining > 0 and queue:
                counterparty = queue[0]
                volume = min(counterparty.remaining_volume, remaining)
                if volume == 0:
                    queue.popleft()
                    continue

                if order.is_buy:
                    record_match(order, counterparty, notional, notional, volume)
                else:
                    record_match(counterparty, order, notional, notional, volume)
                logger.debug(
                    f"Allocated {volume} @ {notional}: {order.order_id} x {counterparty.order_id}"
                )

                remaining -= volume
                if counterparty.remaining_volume == 0:
                    queue.popleft()
