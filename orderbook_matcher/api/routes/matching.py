"""
REST API endpoints for batch matching.

Provides the batch matching endpoint and the policy listing.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from orderbook_matcher.api.models import (
    ErrorResponse,
    MatchRequest,
    MatchResponse,
    PoliciesResponse,
)
from orderbook_matcher.core.matching_policy import MatchingPolicy
from orderbook_matcher.services.matching_service import MatchingService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api/v1", tags=["matching"])


# Dependency injection for MatchingService
# This will be overridden in main.py with actual instance
_matching_service: MatchingService = None


def get_matching_service() -> MatchingService:
    """Dependency to get MatchingService instance."""
    if _matching_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Matching service not initialized"
        )
    return _matching_service


def set_matching_service(service: MatchingService) -> None:
    """Set the global MatchingService instance."""
    global _matching_service
    _matching_service = service


@router.post(
    "/match",
    response_model=MatchResponse,
    summary="Match a batch of orders",
    description="Match a batch of orders under the price-time or pro-rata policy. "
                "Every call recomputes the whole batch from scratch.",
    responses={
        200: {
            "description": "Batch matched",
            "model": MatchResponse
        },
        400: {
            "description": "Batch rejected (duplicate IDs, out-of-bounds notional, oversize batch)",
            "model": ErrorResponse
        },
        422: {
            "description": "Validation error",
            "model": ErrorResponse
        },
        503: {
            "description": "Service unavailable"
        }
    }
)
async def match_batch(
    match_request: MatchRequest,
    matching_service: MatchingService = Depends(get_matching_service)
) -> MatchResponse:
    """
    Match a batch of orders.

    **Request Body:**
    - `policy`: price_time or pro_rata (optional)
    - `orders`: list of orders with `party_id`, `order_id`, `side`, `volume`,
      `notional` and `timestamp`

    **Response:**
    - Each order's match state, remaining volume and fills, plus run totals

    Admission errors raised by the service are turned into JSON error bodies
    by the application's exception handlers.
    """
    logger.info(
        f"Received match request: {len(match_request.orders)} orders, "
        f"policy={match_request.policy or 'default'}"
    )

    orders = match_request.to_orders()
    result = matching_service.run(orders, match_request.policy)

    return MatchResponse.from_match_result(result)


@router.get(
    "/policies",
    response_model=PoliciesResponse,
    summary="List matching policies"
)
async def list_policies(
    matching_service: MatchingService = Depends(get_matching_service)
) -> PoliciesResponse:
    """List available policies and the configured default."""
    return PoliciesResponse(
        policies=[p.value for p in MatchingPolicy],
        default_policy=matching_service.settings.default_policy.value,
    )
