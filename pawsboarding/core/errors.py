"""Error taxonomy for the booking intake.

Every error carries the HTTP status it maps to; ``pawsboarding.main``
renders them as ``{"error": message}``.
"""

from __future__ import annotations


class BookingError(RuntimeError):
    """Base class for errors surfaced to the caller as a rejected request."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidDateRange(BookingError):
    """End date not after start date, or a malformed date string."""


class PastDateRequested(BookingError):
    """Start date lies before today in the facility timezone."""


class RulePatternViolation(BookingError):
    """Range is neither a weeknight stay nor a weekend package."""


class UpstreamUnavailable(BookingError):
    """The external calendar failed or timed out."""

    status_code = 503


class NotificationFailure(BookingError):
    status_code = 502


class PersistenceFailure(BookingError):
    status_code = 500
