"""
Price-time priority matcher.

Buys are walked best price first (highest notional, then earliest arrival)
against sells sorted cheapest first (lowest notional, then earliest arrival).
Fills are sequential: each buy takes as much as it can from the sell at the
head of the queue before moving on.

Each side records its counterparty's own notional on the fill, so a crossing
buy at 5.10 against a sell at 5.00 records 5.00 on the buy and 5.10 on the
sell. There is no single clearing price.
"""

import logging
from collections import deque
from typing import Deque, List

from .order import Order, record_match

logger = logging.getLogger(__name__)


class PriceTimeOrderMatcher:
    """Matches a batch of orders by strict price, then time, priority."""

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

        buy_orders = sorted(
            (o for o in orders if o.is_buy and o.is_valid),
            key=lambda o: (-o.notional, o.timestamp),
        )
        sell_orders = sorted(
            (o for o in orders if o.is_sell and o.is_valid),
            key=lambda o: (o.notional, o.timestamp),
        )

        # Single forward-only pass over sells, shared by every buy
        sell_queue: Deque[Order] = deque(sell_orders)

        for buy_order in buy_orders:
            if buy_order.remaining_volume <= 0:
                continue

            while sell_queue:
                sell_order = sell_queue[0]
                if sell_order.remaining_volume <= 0:
                    sell_queue.popleft()
                    continue

                if buy_order.notional < sell_order.notional:
                    # Sells only get dearer and buys only get cheaper from here
                    break

                volume = min(buy_order.remaining_volume, sell_order.remaining_volume)
                record_match(
                    buy_order,
                    sell_order,
                    buy_notional=buy_order.notional,
                    sell_notional=sell_order.notional,
                    volume=volume,
                )
                logger.debug(
                    f"Filled {volume}: buy {buy_order.order_id} @ {buy_order.notional} "
                    f"x sell {sell_order.order_id} @ {sell_order.notional}"
                )

                if sell_order.remaining_volume == 0:
                    sell_queue.popleft()

                if buy_order.remaining_volume == 0:
                    break

        for order in orders:
            order.finalize_match_state()

        return orders
