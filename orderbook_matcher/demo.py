"""
Console demo - runs sample batches through each matching policy.

Usage:
    python -m orderbook_matcher.demo [--policy price_time|pro_rata|all]
"""

import argparse
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence

from orderbook_matcher.core.matching_policy import MatchingPolicy, get_matcher
from orderbook_matcher.core.order import Order, OrderSide
from orderbook_matcher.utils.formatters import format_batch

logger = logging.getLogger(__name__)


def price_time_sample() -> List[Order]:
    """Sample batch where time priority decides who trades at 5.00."""
    return [
        Order("A", "A1", OrderSide.BUY, 100, Decimal("4.99"), datetime(2025, 6, 1, 9, 27)),
        Order("B", "B1", OrderSide.BUY, 200, Decimal("5.00"), datetime(2025, 6, 1, 10, 21)),
        Order("C", "C1", OrderSide.BUY, 150, Decimal("5.00"), datetime(2025, 6, 1, 10, 26)),
        Order("D", "D1", OrderSide.SELL, 150, Decimal("5.00"), datetime(2025, 6, 1, 10, 32)),
        Order("E", "E1", OrderSide.SELL, 100, Decimal("5.00"), datetime(2025, 6, 1, 10, 33)),
    ]


def pro_rata_sample() -> List[Order]:
    """Sample batch with two independent notional levels."""
    return [
        Order("A", "A1", OrderSide.BUY, 50, Decimal("5.00"), datetime(2025, 6, 1, 9, 27)),
        Order("B", "B1", OrderSide.BUY, 200, Decimal("5.00"), datetime(2025, 6, 1, 10, 21)),
        Order("C", "C1", OrderSide.SELL, 200, Decimal("5.00"), datetime(2025, 6, 1, 10, 26)),
        Order("D", "D1", OrderSide.BUY, 300, Decimal("6.00"), datetime(2025, 6, 1, 9, 27)),
        Order("E", "E1", OrderSide.SELL, 50, Decimal("6.00"), datetime(2025, 6, 1, 10, 21)),
        Order("F", "F1", OrderSide.SELL, 150, Decimal("6.00"), datetime(2025, 6, 1, 10, 26)),
    ]


SAMPLES = {
    MatchingPolicy.PRICE_TIME: price_time_sample,
    MatchingPolicy.PRO_RATA: pro_rata_sample,
}


def run_policy(policy: MatchingPolicy) -> str:
    """Match the sample batch for ``policy`` and return the before/after report."""
    orders = SAMPLES[policy]()
    label = policy.value.replace("_", "-")

    lines = [f"--- Orders matched by {label} ---", "Before matching:", format_batch(orders)]
    get_matcher(policy).match_orders(orders)
    lines += ["", "After matching:", format_batch(orders)]
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run sample batches through the order matchers")
    parser.add_argument(
        "--policy",
        choices=[p.value for p in MatchingPolicy] + ["all"],
        default="all",
        help="Matching policy to demonstrate",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    policies = list(MatchingPolicy) if args.policy == "all" else [MatchingPolicy(args.policy)]
    for policy in policies:
        logger.info(f"Running {policy.value} sample")
        print(run_policy(policy))
        print()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
