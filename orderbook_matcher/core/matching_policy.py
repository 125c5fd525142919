"""
Matching policy selection.

Both matchers expose the same single-method contract, so callers pick one by
policy value instead of depending on a concrete class.
"""

from enum import Enum
from typing import Dict, List, Protocol, Union

from .order import Order
from .price_time_matcher import PriceTimeOrderMatcher
from .pro_rata_matcher import ProRataOrderMatcher
from ..utils.exceptions import UnknownPolicyException


class MatchingPolicy(str, Enum):
    """Allocation policy enumeration."""
    PRICE_TIME = "price_time"
    PRO_RATA = "pro_rata"

    def __str__(self) -> str:
        return self.value


class OrderMatcher(Protocol):
    """Anything that can match a batch of orders in place."""

    def match_orders(self, orders: List[Order]) -> List[Order]:
        ...


# Matchers are stateless between calls, so one instance per policy is enough
_MATCHERS: Dict[MatchingPolicy, OrderMatcher] = {
    MatchingPolicy.PRICE_TIME: PriceTimeOrderMatcher(),
    MatchingPolicy.PRO_RATA: ProRataOrderMatcher(),
}


def resolve_policy(policy: Union[MatchingPolicy, str]) -> MatchingPolicy:
    """
    Normalize a policy value.

    Args:
        policy: MatchingPolicy member or its string value (case-insensitive)

    Returns:
        The matching MatchingPolicy member

    Raises:
        UnknownPolicyException: If the value names no policy
    """
    if isinstance(policy, MatchingPolicy):
        return policy
    try:
        return MatchingPolicy(str(policy).strip().lower())
    except ValueError:
        raise UnknownPolicyException(
            f"Unknown matching policy: {policy}",
            details={"policy": policy, "valid_policies": [p.value for p in MatchingPolicy]},
        )


def get_matcher(policy: Union[MatchingPolicy, str]) -> OrderMatcher:
    """Return the matcher implementing ``policy``."""
    return _MATCHERS[resolve_policy(policy)]


def match_orders(orders: List[Order], policy: Union[MatchingPolicy, str]) -> List[Order]:
    """Match ``orders`` in place under ``policy`` and return the same list."""
    return get_matcher(policy).match_orders(orders)
