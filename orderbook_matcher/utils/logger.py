"""
Logging configuration and utilities for the order matcher.

Provides structured logging with JSON format for production environments
and human-readable format for development.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Dict, Optional


class JSONFormatter(logging.Formatter):
    """
    Custom JSON formatter for structured logging.

    Converts log records to JSON format with additional context fields.
    """

    EXTRA_FIELDS = ("order_id", "counterparty_id", "policy", "batch_id", "execution_time_ms")

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for name in self.EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value if isinstance(value, (int, float)) else str(value)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class MatchingEngineLogger:
    """
    Centralized logger for the order matcher.

    Wraps a standard library logger with domain helpers for batch submissions,
    fills and run summaries. Supports both JSON (production) and console
    (development) formats.
    """

    def __init__(
        self,
        name: str = "OrderbookMatcher",
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
        use_json: bool = False,
    ):
        """
        Initialize the order matcher logger.

        Args:
            name: Logger name
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (None for console only)
            use_json: Use JSON formatting (for production)
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, log_level.upper()))
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(self._create_formatter(use_json))
        self.logger.addHandler(console_handler)

        if log_dir:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            self.logger.addHandler(
                self._create_file_handler(log_dir / "application.log", use_json)
            )

            # Fill log
            self.fill_logger = logging.getLogger(f"{name}.fills")
            self.fill_logger.setLevel(logging.INFO)
            self.fill_logger.handlers.clear()
            self.fill_logger.addHandler(
                self._create_file_handler(log_dir / "fills.log", use_json)
            )

            error_handler = self._create_file_handler(log_dir / "errors.log", use_json)
            error_handler.setLevel(logging.ERROR)
            self.logger.addHandler(error_handler)
        else:
            self.fill_logger = self.logger

    @staticmethod
    def _create_formatter(use_json: bool) -> logging.Formatter:
        if use_json:
            return JSONFormatter()
        return logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def _create_file_handler(self, filepath: Path, use_json: bool) -> logging.FileHandler:
        """Create a file handler with appropriate formatter."""
        handler = logging.FileHandler(filepath, encoding="utf-8")
        handler.setFormatter(self._create_formatter(use_json))
        return handler

    def log_batch_submission(
        self,
        batch_id: str,
        policy: str,
        order_count: int,
    ):
        """Log a batch handed to a matcher."""
        extra = {"batch_id": batch_id, "policy": policy}
        self.logger.info(
            f"Batch submitted: {order_count} orders, policy={policy}",
            extra=extra,
        )

    def log_fill(
        self,
        order_id: str,
        counterparty_id: str,
        notional: Decimal,
        volume: int,
        policy: Optional[str] = None,
    ):
        """Log one fill from the perspective of ``order_id``."""
        extra = {"order_id": order_id, "counterparty_id": counterparty_id, "policy": policy}
        self.fill_logger.info(
            f"Fill: {order_id} x {counterparty_id} {volume} @ {notional}",
            extra=extra,
        )

    def log_match_summary(
        self,
        batch_id: str,
        policy: str,
        fill_count: int,
        matched_volume: int,
        states: Dict[str, int],
        execution_time_ms: float,
    ):
        """Log the outcome of a matcher run."""
        extra = {
            "batch_id": batch_id,
            "policy": policy,
            "execution_time_ms": execution_time_ms,
        }
        state_str = ", ".join(f"{k}={v}" for k, v in sorted(states.items()))
        self.logger.info(
            f"Batch matched ({policy}): {fill_count} fills, volume {matched_volume}, "
            f"states [{state_str}] in {execution_time_ms:.3f}ms",
            extra=extra,
        )

    def log_error(
        self,
        message: str,
        exception: Optional[Exception] = None,
        **kwargs
    ):
        """Log error with optional exception."""
        if exception:
            self.logger.error(message, exc_info=exception, extra=kwargs)
        else:
            self.logger.error(message, extra=kwargs)


# Global logger instance
_logger: Optional[MatchingEngineLogger] = None


def get_logger(
    name: str = "OrderbookMatcher",
    log_level: str = "INFO",
    log_dir: Optional[Path] = None,
    use_json: bool = False,
) -> MatchingEngineLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        log_level: Logging level
        log_dir: Directory for log files
        use_json: Use JSON formatting

    Returns:
        MatchingEngineLogger instance
    """
    global _logger

    if _logger is None:
        _logger = MatchingEngineLogger(name, log_level, log_dir, use_json)

    return _logger
