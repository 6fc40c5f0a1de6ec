"""
Core Exceptions
Standardized exception hierarchy for the application.

Upstream provider failures are classified into a small taxonomy so that
pipeline stages can choose a fallback and routes can pick a status code
without inspecting provider-specific payloads:

    CredentialError        missing or rejected API key (400/401/403)
    BillingError           account out of credit (402)
    RateLimitError         upstream throttling (429)
    UpstreamError          upstream server failure (5xx, other non-2xx)
    TransportError         network failure / timeout before a response
    MalformedResponseError LLM output that fails schema validation
"""

from typing import Optional


class VslVibesError(Exception):
    """Base exception for all application errors."""
    pass


class PipelineError(VslVibesError):
    """Base exception for generation pipeline errors."""
    pass


class InfrastructureError(VslVibesError):
    """Base exception for infrastructure errors (LLM, storage, HTTP)."""
    pass


class ProviderError(InfrastructureError):
    """A call to a third-party provider failed."""

    def __init__(self, message: str, *, provider: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return False


class CredentialError(ProviderError):
    """Missing or invalid credential."""
    pass


class BillingError(ProviderError):
    """Provider account has no remaining credit."""
    pass


class RateLimitError(ProviderError):
    """Provider throttled the request."""

    @property
    def retryable(self) -> bool:
        return True


class UpstreamError(ProviderError):
    """Provider returned a server error or unexpected status."""

    @property
    def retryable(self) -> bool:
        return self.status_code is None or self.status_code >= 500


class TransportError(ProviderError):
    """Network failure before a response was received."""

    @property
    def retryable(self) -> bool:
        return True


class MalformedResponseError(PipelineError):
    """LLM output could not be parsed into the expected schema."""

    def __init__(self, message: str, *, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class EmptyScriptError(PipelineError):
    """Script contains no non-empty lines."""
    pass


class InvalidTransitionError(PipelineError):
    """Generation state machine received an illegal transition."""
    pass


class GenerationCancelled(PipelineError):
    """Generation was cancelled by the user."""
    pass


class ProjectNotFoundError(VslVibesError):
    """Requested project does not exist."""
    pass


class SlideNotFoundError(VslVibesError):
    """Requested slide does not exist in the project."""
    pass


class ReviewIncompleteError(VslVibesError):
    """Narration or export attempted before every slide was reviewed."""
    pass


class ExportError(VslVibesError):
    """Export aborted; the message carries the raw failure reason."""
    pass


def error_for_status(status_code: int, message: str, *, provider: str = "") -> ProviderError:
    """Map an upstream HTTP status code to the error taxonomy."""
    if status_code in (400, 401, 403):
        return CredentialError(message, provider=provider, status_code=status_code)
    if status_code == 402:
        return BillingError(message, provider=provider, status_code=status_code)
    if status_code == 429:
        return RateLimitError(message, provider=provider, status_code=status_code)
    return UpstreamError(message, provider=provider, status_code=status_code)


def is_billing_error(exc: BaseException) -> bool:
    """Detect out-of-credit failures, including ones only visible in the message."""
    if isinstance(exc, BillingError):
        return True
    status = getattr(exc, "status_code", None)
    if status == 402:
        return True
    message = str(exc).lower()
    return "billing" in message or "credit" in message
