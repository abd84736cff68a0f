"""
Custom exceptions for the analytics engine.

Provides a hierarchy of exceptions for the calls that cannot be answered
at all. Expected "no data" conditions are not raised; they travel back to
the caller inside an AnalysisResult (see marketscope.result).
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Error taxonomy shared by exceptions and result values."""
    INSUFFICIENT_DATA = "insufficient_data"   # Too few points for the computation
    INVALID_INPUT = "invalid_input"           # Malformed or inconsistent input
    UNFILLABLE = "unfillable"                 # Depth exhausted before the size was filled
    UPSTREAM_DATA_GAP = "upstream_data_gap"   # Caller supplied empty/missing data


class MarketAnalyticsError(Exception):
    """
    Base exception for all analytics errors.

    All other exceptions inherit from this class, making it easy
    to catch any analytics-related error.
    """

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, key: Optional[str] = None):
        self.message = message
        self.key = key
        super().__init__(message if key is None else f"{key}: {message}")


class InvalidInputError(MarketAnalyticsError):
    """
    Raised when an input cannot be normalized.

    This includes order-book sides that are neither sequences nor mappings
    and configuration values outside their documented range.
    """
    kind = ErrorKind.INVALID_INPUT


class InsufficientDataError(MarketAnalyticsError):
    """Raised by unwrap() when a computation had fewer points than it needs."""
    kind = ErrorKind.INSUFFICIENT_DATA


class UpstreamDataGapError(MarketAnalyticsError):
    """Raised by unwrap() when a required input was empty or missing."""
    kind = ErrorKind.UPSTREAM_DATA_GAP


class UnfillableError(MarketAnalyticsError):
    """Raised by unwrap() when an order walk ran out of depth."""
    kind = ErrorKind.UNFILLABLE


EXCEPTIONS_BY_KIND = {
    ErrorKind.INSUFFICIENT_DATA: InsufficientDataError,
    ErrorKind.INVALID_INPUT: InvalidInputError,
    ErrorKind.UNFILLABLE: UnfillableError,
    ErrorKind.UPSTREAM_DATA_GAP: UpstreamDataGapError,
}
