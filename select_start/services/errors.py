"""
Error types raised by the aggregation layer.

Endpoints translate these into HTTP responses; nothing in here knows about
FastAPI.
"""


class AggregationError(Exception):
    """Base class for report errors that carry an HTTP status."""
    status_code = 500


class ValidationError(AggregationError):
    """Malformed admin target or request parameters."""
    status_code = 400


class AuthError(AggregationError):
    """Missing or incorrect credential."""

    def __init__(self, message: str, forbidden: bool = False):
        super().__init__(message)
        self.forbidden = forbidden
        self.status_code = 403 if forbidden else 401


class NotFoundError(AggregationError):
    """No challenge exists for the requested window."""
    status_code = 404


class SourceUnavailableError(AggregationError):
    """The record store (or another required collaborator) is unreachable or timed out."""
    status_code = 503


class PersistenceWarning(Exception):
    """Durable snapshot read or write failed. Logged, never surfaced."""
