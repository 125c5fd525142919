"""
Core domain models and matching logic
"""

from .order import Order, Match, OrderSide, MatchState, record_match
from .allocation import largest_remainder, pro_rata_allocations
from .price_time_matcher import PriceTimeOrderMatcher
from .pro_rata_matcher import ProRataOrderMatcher
from .matching_policy import MatchingPolicy, OrderMatcher, get_matcher, match_orders, resolve_policy

__all__ = [
    "Order",
    "Match",
    "OrderSide",
    "MatchState",
    "record_match",
    "largest_remainder",
    "pro_rata_allocations",
    "PriceTimeOrderMatcher",
    "ProRataOrderMatcher",
    "MatchingPolicy",
    "OrderMatcher",
    "get_matcher",
    "match_orders",
    "resolve_policy",
]
