"""
Translation of domain exceptions to HTTP responses.

    CredentialError        upstream 401/403 -> 401, missing key -> 400
    BillingError           402
    RateLimitError         429
    other ProviderError    502
    ProjectNotFoundError   404
    SlideNotFoundError     404
    InvalidTransitionError 409
    ReviewIncompleteError  409
    EmptyScriptError       400
    ExportError            502
    ValueError             400
"""

from fastapi import HTTPException

from ..core.exceptions import (
    BillingError,
    CredentialError,
    EmptyScriptError,
    ExportError,
    InvalidTransitionError,
    ProjectNotFoundError,
    ProviderError,
    RateLimitError,
    ReviewIncompleteError,
    SlideNotFoundError,
    VslVibesError,
)
from ..core.logging import get_logger

logger = get_logger(__name__, component="routes")


def http_status_for(exc: Exception) -> int:
    if isinstance(exc, CredentialError):
        return 401 if exc.status_code in (401, 403) else 400
    if isinstance(exc, BillingError):
        return 402
    if isinstance(exc, RateLimitError):
        return 429
    if isinstance(exc, ProviderError):
        return 502
    if isinstance(exc, (ProjectNotFoundError, SlideNotFoundError)):
        return 404
    if isinstance(exc, (InvalidTransitionError, ReviewIncompleteError)):
        return 409
    if isinstance(exc, (EmptyScriptError, ValueError)):
        return 400
    if isinstance(exc, ExportError):
        return 502
    return 500


def http_error(exc: Exception) -> HTTPException:
    """Build the HTTPException for a domain error; the message is kept verbatim."""
    status_code = http_status_for(exc)
    if status_code >= 500:
        logger.error("Request failed", extra={"error": str(exc), "error_type": type(exc).__name__})
    return HTTPException(status_code=status_code, detail=str(exc))


HANDLED_ERRORS = (VslVibesError, ValueError)
