"""
Tests for vsl_vibes.services.media.http
"""

import httpx
import pytest

from vsl_vibes.core.exceptions import (
    BillingError,
    CredentialError,
    ProviderError,
    RateLimitError,
    TransportError,
    UpstreamError,
)
from vsl_vibes.services.media import require_key, send, send_json, send_with_retry, with_retry


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_require_key():
    assert require_key("abc", "missing", "pexels") == "abc"
    with pytest.raises(CredentialError, match="Pexels API key missing") as exc_info:
        require_key("", "Pexels API key missing", "pexels")
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("status,error", [
    (401, CredentialError),
    (402, BillingError),
    (429, RateLimitError),
    (500, UpstreamError),
])
async def test_send_maps_status(status, error):
    client = _client(lambda request: httpx.Response(status, json={"error": {"message": "nope"}}))
    with pytest.raises(error) as exc_info:
        await send("GET", "https://api.example/x", provider="pexels", client=client)
    assert exc_info.value.status_code == status
    assert "nope" in str(exc_info.value)


@pytest.mark.asyncio
async def test_send_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError):
        await send("GET", "https://api.example/x", provider="pexels", client=_client(handler))


@pytest.mark.asyncio
async def test_send_json_wraps_lists_and_rejects_garbage():
    client = _client(lambda request: httpx.Response(200, json=[1, 2]))
    assert await send_json("GET", "https://api.example/x", provider="p", client=client) == {"data": [1, 2]}

    client = _client(lambda request: httpx.Response(200, content=b"<html>"))
    with pytest.raises(ProviderError, match="invalid JSON"):
        await send_json("GET", "https://api.example/x", provider="p", client=client)


@pytest.mark.asyncio
async def test_with_retry_backs_off_exponentially():
    sleep = RecordingSleep()
    attempts = []

    async def flaky():
        attempts.append(1)
        raise RateLimitError("slow down", status_code=429)

    with pytest.raises(RateLimitError):
        await with_retry(flaky, description="test", max_retries=3, base_delay=1.0, sleep=sleep)

    assert len(attempts) == 4
    assert sleep.delays == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_with_retry_does_not_retry_client_errors():
    sleep = RecordingSleep()

    async def rejected():
        raise CredentialError("bad key", status_code=401)

    with pytest.raises(CredentialError):
        await with_retry(rejected, description="test", sleep=sleep)
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_send_with_retry_recovers():
    responses = iter([httpx.Response(502), httpx.Response(200, text="ok")])
    sleep = RecordingSleep()

    response = await send_with_retry("GET", "https://api.example/x", provider="p",
                                     client=_client(lambda request: next(responses)), sleep=sleep)

    assert response.text == "ok"
    assert sleep.delays == [1.0]
