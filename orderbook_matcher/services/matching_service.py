"""
Matching Service - Host-side layer around the matchers.

This service admits a batch, picks the matcher for the requested policy, runs
it and audits the outcome, acting as the intermediary between the API layer
and the core matchers.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from orderbook_matcher.config import Settings, get_settings
from orderbook_matcher.core.matching_policy import MatchingPolicy, get_matcher, resolve_policy
from orderbook_matcher.core.order import Order
from orderbook_matcher.utils.exceptions import ValidationException
from orderbook_matcher.utils.logger import MatchingEngineLogger, get_logger
from orderbook_matcher.utils.validators import (
    audit_matched_batch,
    matched_totals,
    summarize_states,
    validate_order_batch,
)


@dataclass
class MatchResult:
    """
    Outcome of one matcher run.

    Attributes:
        batch_id: Identifier assigned to the run
        policy: Policy the batch was matched under
        orders: The matched batch (same list that was submitted)
        fill_count: Number of reciprocal fill pairs
        matched_volume: Total volume exchanged
        states: Order count per match state
        execution_time_ms: Wall time spent matching
    """
    batch_id: str
    policy: MatchingPolicy
    orders: List[Order]
    fill_count: int
    matched_volume: int
    states: Dict[str, int] = field(default_factory=dict)
    execution_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for API serialization."""
        return {
            "batch_id": self.batch_id,
            "policy": self.policy.value,
            "fill_count": self.fill_count,
            "matched_volume": self.matched_volume,
            "states": dict(self.states),
            "execution_time_ms": self.execution_time_ms,
            "orders": [o.to_dict() for o in self.orders],
        }


class MatchingService:
    """
    Service class for running matchers over batches.

    Runs are serialised with a lock: a matcher mutates the orders it is given
    without synchronisation.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        engine_logger: Optional[MatchingEngineLogger] = None,
    ):
        """
        Initialize matching service.

        Args:
            settings: Configuration, defaults to the global settings
            engine_logger: Structured logger, defaults to the global one
        """
        self.settings = settings or get_settings()
        self.engine_logger = engine_logger or get_logger(
            log_level=self.settings.log_level,
            log_dir=self.settings.log_dir,
            use_json=self.settings.use_json_logs,
        )
        self.lock = threading.Lock()
        self.statistics: Dict[str, int] = {
            "batches_processed": 0,
            "orders_processed": 0,
            "fills_recorded": 0,
            "volume_matched": 0,
        }
        self.logger = logging.getLogger(f"{__name__}.MatchingService")
        self.logger.info(
            f"MatchingService initialized (default policy: {self.settings.default_policy.value})"
        )

    def run(
        self,
        orders: List[Order],
        policy: Optional[Union[MatchingPolicy, str]] = None,
    ) -> MatchResult:
        """
        Validate and match a batch.

        Args:
            orders: Batch to match in place
            policy: Policy to use, defaults to the configured policy

        Returns:
            MatchResult describing the run

        Raises:
            UnknownPolicyException: If the policy is not recognised
            BaseMatchingEngineException: If the batch fails admission checks
            ValidationException: If auditing is enabled and the result is inconsistent
        """
        resolved = resolve_policy(policy if policy is not None else self.settings.default_policy)

        validate_order_batch(
            orders,
            max_batch_size=self.settings.max_batch_size,
            min_notional=self.settings.min_notional,
            max_notional=self.settings.max_notional,
        )

        batch_id = str(uuid4())
        self.engine_logger.log_batch_submission(batch_id, resolved.value, len(orders))

        matcher = get_matcher(resolved)
        with self.lock:
            start_time = time.perf_counter()
            matcher.match_orders(orders)
            execution_time_ms = (time.perf_counter() - start_time) * 1000

            if self.settings.audit_results:
                violations = audit_matched_batch(orders)
                if violations:
                    self.engine_logger.log_error(
                        f"Batch {batch_id} failed audit: {violations}",
                        batch_id=batch_id,
                    )
                    raise ValidationException(
                        f"Matched batch failed audit with {len(violations)} violation(s)",
                        details={"batch_id": batch_id, "violations": violations},
                    )

            fill_count, matched_volume = matched_totals(orders)
            states = summarize_states(orders)

            self.statistics["batches_processed"] += 1
            self.statistics["orders_processed"] += len(orders)
            self.statistics["fills_recorded"] += fill_count
            self.statistics["volume_matched"] += matched_volume

        if self.settings.log_fills:
            for order in orders:
                for match in order.matches:
                    self.engine_logger.log_fill(
                        order.order_id, match.order_id, match.notional, match.volume, resolved.value
                    )

        self.engine_logger.log_match_summary(
            batch_id, resolved.value, fill_count, matched_volume, states, execution_time_ms
        )

        return MatchResult(
            batch_id=batch_id,
            policy=resolved,
            orders=orders,
            fill_count=fill_count,
            matched_volume=matched_volume,
            states=states,
            execution_time_ms=execution_time_ms,
        )

    def get_statistics(self) -> Dict[str, int]:
        """
        Get cumulative service statistics.

        Returns:
            Dictionary of statistics
        """
        with self.lock:
            return self.statistics.copy()
