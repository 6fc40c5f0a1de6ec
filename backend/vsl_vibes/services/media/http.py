"""
HTTP helpers for third-party media APIs.

Every adapter goes through ``send`` so that upstream failures are mapped to
the shared error taxonomy in one place:

    non-2xx status   -> error_for_status(...)
    network failure  -> TransportError

``send_with_retry`` adds exponential backoff for retryable errors
(429, 5xx, transport) and is used by the exporter.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from ...config.pipeline import EXPORT_MAX_RETRIES, EXPORT_RETRY_BASE_DELAY, HTTP_TIMEOUT
from ...core.exceptions import CredentialError, ProviderError, TransportError, error_for_status
from ...core.logging import get_logger

logger = get_logger(__name__, component="http")

Sleep = Callable[[float], Awaitable[None]]


def require_key(value: Optional[str], message: str, provider: str) -> str:
    """Return the credential or raise a CredentialError carrying ``message`` verbatim."""
    if not value:
        raise CredentialError(message, provider=provider, status_code=400)
    return value


def error_message(response: httpx.Response, provider: str) -> str:
    """Best-effort extraction of an upstream error message."""
    try:
        body = response.json()
    except ValueError:
        body = None

    detail: Any = None
    if isinstance(body, dict):
        detail = body.get("error") or body.get("message") or body.get("detail")
        if isinstance(detail, dict):
            detail = detail.get("message") or detail.get("status")
    if not detail:
        detail = response.text[:300] if response.text else ""

    label = provider.capitalize() if provider else "Upstream"
    if detail:
        return f"{label} API error: {response.status_code} - {detail}"
    return f"{label} API error: {response.status_code}"


async def send(
    method: str,
    url: str,
    *,
    provider: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = HTTP_TIMEOUT,
    **kwargs: Any,
) -> httpx.Response:
    """
    Issue one request and return the 2xx response.

    Args:
        method: HTTP method
        url: Absolute URL
        provider: Provider name used in errors and logs
        client: Optional shared client (tests pass one backed by MockTransport)
        timeout: Timeout when a temporary client is created
        **kwargs: Forwarded to ``httpx.AsyncClient.request``

    Raises:
        ProviderError subclass for non-2xx responses
        TransportError for network failures
    """
    try:
        if client is not None:
            response = await client.request(method, url, **kwargs)
        else:
            async with httpx.AsyncClient(timeout=timeout) as temp_client:
                response = await temp_client.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        logger.warning(f"{provider} request failed before a response", extra={
            "provider": provider,
            "error": str(e),
        })
        raise TransportError(f"{provider} request failed: {e}", provider=provider) from e

    if response.is_success:
        return response

    message = error_message(response, provider)
    logger.warning(f"{provider} returned an error", extra={
        "provider": provider,
        "status_code": response.status_code,
    })
    raise error_for_status(response.status_code, message, provider=provider)


async def send_json(method: str, url: str, *, provider: str, **kwargs: Any) -> Dict[str, Any]:
    """``send`` and decode a JSON object body."""
    response = await send(method, url, provider=provider, **kwargs)
    try:
        data = response.json()
    except ValueError as e:
        raise ProviderError(f"{provider} returned invalid JSON", provider=provider,
                            status_code=response.status_code) from e
    return data if isinstance(data, dict) else {"data": data}


async def with_retry(
    operation: Callable[[], Awaitable[Any]],
    *,
    description: str,
    max_retries: int = EXPORT_MAX_RETRIES,
    base_delay: float = EXPORT_RETRY_BASE_DELAY,
    sleep: Sleep = asyncio.sleep,
) -> Any:
    """
    Run ``operation`` retrying retryable provider errors.

    Delays double from ``base_delay`` (1s, 2s, 4s by default). Non-retryable
    errors and the last retryable error propagate unchanged.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except ProviderError as e:
            if not e.retryable or attempt >= max_retries:
                raise
            delay = base_delay * (2 ** attempt)
            attempt += 1
            logger.info(f"Retrying {description}", extra={
                "attempt": attempt,
                "max_retries": max_retries,
                "delay_seconds": delay,
                "status_code": e.status_code,
            })
            await sleep(delay)


async def send_with_retry(
    method: str,
    url: str,
    *,
    provider: str,
    max_retries: int = EXPORT_MAX_RETRIES,
    base_delay: float = EXPORT_RETRY_BASE_DELAY,
    sleep: Sleep = asyncio.sleep,
    **kwargs: Any,
) -> httpx.Response:
    """``send`` with exponential backoff on 429, 5xx and transport errors."""
    return await with_retry(
        lambda: send(method, url, provider=provider, **kwargs),
        description=f"{provider} {method} request",
        max_retries=max_retries,
        base_delay=base_delay,
        sleep=sleep,
    )
