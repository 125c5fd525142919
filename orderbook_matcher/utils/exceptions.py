"""
Custom exceptions for the order matcher

The matchers never raise: a non-positive volume is a data state, not an error.
These exceptions cover the caller-side checks that run before a batch reaches
a matcher, and policy lookup.
"""


class BaseMatchingEngineException(Exception):
    """Base exception class for all order matcher exceptions."""

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidOrderException(BaseMatchingEngineException):
    """Raised when an order is missing required fields or cannot be built."""
    pass


class ValidationException(BaseMatchingEngineException):
    """Raised when a matched batch fails its consistency audit."""
    pass


class DuplicateOrderException(BaseMatchingEngineException):
    """Raised when two orders in one batch share an order ID."""
    pass


class InvalidQuantityException(BaseMatchingEngineException):
    """Raised when a volume is not a whole number."""
    pass


class PriceOutOfBoundsException(BaseMatchingEngineException):
    """Raised when a notional is outside acceptable bounds."""
    pass


class BatchTooLargeException(BaseMatchingEngineException):
    """Raised when a batch exceeds the configured maximum size."""
    pass


class UnknownPolicyException(BaseMatchingEngineException):
    """Raised when a matching policy name is not recognised."""
    pass
