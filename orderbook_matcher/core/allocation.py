"""
Pro-rata allocation math

Splits an integer volume across participants in proportion to their weights
using the largest-remainder method. Shares are computed with integer
divide-with-remainder, so results are exact and platform independent.
"""

from typing import List, Sequence, Tuple

from .order import Order


def _distribute(
    weights: Sequence[int],
    total: int,
    tie_keys: Sequence[str],
) -> Tuple[List[int], List[int]]:
    """Return (shares, ranking) where ranking orders indices by remainder priority."""
    weight_sum = sum(weights)

    shares: List[int] = []
    remainders: List[int] = []
    for weight in weights:
        share, remainder = divmod(weight * total, weight_sum)
        shares.append(share)
        remainders.append(remainder)

    # Remainders share the denominator weight_sum, so comparing numerators is exact
    ranking = sorted(
        range(len(weights)),
        key=lambda i: (-remainders[i], tie_keys[i]),
    )

    shortfall = total - sum(shares)
    for i in ranking[:shortfall]:
        shares[i] += 1

    return shares, ranking


def largest_remainder(
    weights: Sequence[int],
    total: int,
    tie_keys: Sequence[str],
) -> List[int]:
    """
    Distribute ``total`` units proportionally to ``weights``.

    Each entry first receives ``floor(weight * total / sum(weights))``. The
    units lost to flooring are handed out one each to the entries with the
    largest fractional remainder, ties going to the smaller tie key.

    Args:
        weights: Non-negative weight per entry
        total: Units to distribute
        tie_keys: Per-entry keys ordering equal remainders

    Returns:
        Integer shares in input order, summing to ``total`` whenever
        the weights sum to a positive value (all zeros otherwise)
    """
    if sum(weights) <= 0 or total <= 0:
        return [0] * len(weights)

    shares, _ = _distribute(weights, total, tie_keys)
    return shares


def pro_rata_allocations(orders: Sequence[Order], match_volume: int) -> List[Tuple[Order, int]]:
    """
    Allocate ``match_volume`` across ``orders`` by remaining volume.

    Returns (order, allocation) pairs ordered by descending fractional
    remainder, then ascending order ID. This is the order in which the
    pro-rata matcher drains allocations into the opposite side.
    """
    total_remaining = sum(o.remaining_volume for o in orders)
    if total_remaining <= 0 or match_volume <= 0:
        return [(o, 0) for o in orders]

    shares, ranking = _distribute(
        [o.remaining_volume for o in orders],
        match_volume,
        [o.order_id for o in orders],
    )
    return [(orders[i], shares[i]) for i in ranking]
