"""
Shared helpers for endpoint modules: credential checks, service lookup and
error translation.
"""
import logging
import secrets
from typing import NoReturn, Optional

from fastapi import Header, HTTPException, Request

from select_start import config
from select_start.services.aggregation import AggregationService
from select_start.services.errors import AggregationError, AuthError, SourceUnavailableError

# Set up logger for this module
logger = logging.getLogger(__name__)


def _matches(provided: Optional[str], expected: Optional[str]) -> bool:
    if not provided or not expected:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def require_api_key(provided: Optional[str]) -> None:
    """Reads need the API_KEY secret."""
    if not config.API_KEY:
        logger.error("API_KEY not configured")
    if not _matches(provided, config.API_KEY):
        raise AuthError("Unauthorized - Invalid API key")


def require_admin_key(provided: Optional[str]) -> None:
    """Cache control needs the separate ADMIN_API_KEY secret."""
    if not config.ADMIN_API_KEY:
        logger.error("ADMIN_API_KEY not configured")
    if not _matches(provided, config.ADMIN_API_KEY):
        raise AuthError("Forbidden - Admin API key required", forbidden=True)


def get_service(request: Request) -> AggregationService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise SourceUnavailableError("Report service is not initialized")
    return service


def raise_http(error: AggregationError) -> NoReturn:
    raise HTTPException(status_code=error.status_code, detail=str(error))


def api_key_auth(x_api_key: Optional[str] = Header(None, description="API key for authentication")) -> None:
    """
    Route dependency for report reads.

    Route-level dependencies run before query and body validation, so a
    caller without a key gets 401 even when its parameters are malformed.
    """
    try:
        require_api_key(x_api_key)
    except AuthError as e:
        raise_http(e)


def admin_api_key_auth(x_api_key: Optional[str] = Header(None, description="Admin API key")) -> None:
    """Route dependency for cache control; 403 without the admin key."""
    try:
        require_admin_key(x_api_key)
    except AuthError as e:
        raise_http(e)
