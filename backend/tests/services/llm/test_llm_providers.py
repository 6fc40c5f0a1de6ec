"""
Tests for the LLM provider layer: SDK error classification, the Anthropic and
OpenAI adapters (with stub clients) and the Anthropic -> OpenAI fallback chain.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import openai
import pytest

from vsl_vibes.core.exceptions import (
    BillingError,
    CredentialError,
    RateLimitError,
    TransportError,
    UpstreamError,
)
from vsl_vibes.services.llm import (
    AnthropicProvider,
    FallbackProvider,
    LLMConfig,
    LLMResponse,
    OpenAIProvider,
    ProviderType,
    classify_sdk_error,
    get_llm_provider,
)

ANTHROPIC_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _anthropic_status_error(cls, status):
    return cls("upstream said no", response=httpx.Response(status, request=ANTHROPIC_REQUEST), body=None)


def _anthropic_client(text="  hello  "):
    response = SimpleNamespace(
        content=[SimpleNamespace(text=text)],
        usage=SimpleNamespace(input_tokens=12, output_tokens=3),
    )
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=response)
    return client


def _openai_client(text="hola"):
    response = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=SimpleNamespace(prompt_tokens=5, completion_tokens=2),
    )
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response)
    return client


class TestClassifySdkError:
    def test_status_errors(self):
        assert isinstance(classify_sdk_error(_anthropic_status_error(anthropic.RateLimitError, 429), "anthropic"),
                          RateLimitError)
        assert isinstance(classify_sdk_error(_anthropic_status_error(anthropic.AuthenticationError, 401),
                                             "anthropic"), CredentialError)
        assert isinstance(classify_sdk_error(_anthropic_status_error(anthropic.InternalServerError, 500),
                                             "anthropic"), UpstreamError)

    def test_connection_error_is_transport(self):
        error = classify_sdk_error(anthropic.APIConnectionError(request=ANTHROPIC_REQUEST), "anthropic")
        assert isinstance(error, TransportError)
        assert error.provider == "anthropic"

    def test_provider_error_passes_through(self):
        original = BillingError("no credit", status_code=402)
        assert classify_sdk_error(original, "anthropic") is original


class TestAnthropicProvider:
    @pytest.mark.asyncio
    async def test_generate(self):
        client = _anthropic_client()
        provider = AnthropicProvider(client=client)
        response = await provider.generate("prompt", LLMConfig(model="claude-sonnet-4-20250514",
                                                               system_instruction="be brief", temperature=0.2))
        assert response.text == "hello"
        assert response.provider is ProviderType.ANTHROPIC
        assert response.usage.total_tokens == 15
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["system"] == "be brief"
        assert kwargs["temperature"] == 0.2
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]

    @pytest.mark.asyncio
    async def test_missing_key(self):
        provider = AnthropicProvider()
        assert not provider.is_available()
        with pytest.raises(CredentialError, match="ANTHROPIC_API_KEY not configured"):
            await provider.generate("prompt", LLMConfig(model="m"))

    @pytest.mark.asyncio
    async def test_sdk_error_translated(self):
        client = MagicMock()
        client.messages.create = AsyncMock(side_effect=_anthropic_status_error(anthropic.RateLimitError, 429))
        with pytest.raises(RateLimitError):
            await AnthropicProvider(client=client).generate("prompt", LLMConfig(model="m"))


class TestOpenAIProvider:
    @pytest.mark.asyncio
    async def test_generate_with_system_message(self):
        client = _openai_client()
        response = await OpenAIProvider(client=client).generate(
            "prompt", LLMConfig(model="gpt-4o", system_instruction="sys"))
        assert response.text == "hola"
        assert response.usage.input_tokens == 5
        messages = client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "sys"}

    @pytest.mark.asyncio
    async def test_sdk_error_translated(self):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            side_effect=openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com"))
        )
        with pytest.raises(TransportError):
            await OpenAIProvider(client=client).generate("prompt", LLMConfig(model="gpt-4o"))


class TestFallbackProvider:
    def _provider(self, available=True):
        provider = MagicMock()
        provider.name = "stub"
        provider.is_available.return_value = available
        provider.generate = AsyncMock()
        return provider

    @pytest.mark.asyncio
    async def test_primary_success(self):
        primary, secondary = self._provider(), self._provider()
        primary.generate.return_value = LLMResponse(text="a", model="m", provider=ProviderType.ANTHROPIC)
        result = await FallbackProvider(primary, secondary).generate("p", LLMConfig(model="claude-sonnet-4-20250514"))
        assert result.text == "a"
        secondary.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_falls_back_with_mapped_model(self):
        primary, secondary = self._provider(), self._provider()
        primary.generate.side_effect = BillingError("credit balance too low", status_code=402)
        secondary.generate.return_value = LLMResponse(text="b", model="gpt-4o-mini", provider=ProviderType.OPENAI)

        result = await FallbackProvider(primary, secondary).generate(
            "p", LLMConfig(model="claude-3-5-haiku-20241022", max_tokens=100))

        assert result.text == "b"
        config = secondary.generate.call_args.args[1]
        assert config.model == "gpt-4o-mini"
        assert config.max_tokens == 100

    @pytest.mark.asyncio
    async def test_both_fail_raises_primary_error(self):
        primary, secondary = self._provider(), self._provider()
        primary_error = BillingError("out of credit", status_code=402)
        primary.generate.side_effect = primary_error
        secondary.generate.side_effect = RateLimitError("slow down", status_code=429)

        with pytest.raises(BillingError) as exc_info:
            await FallbackProvider(primary, secondary).generate("p", LLMConfig(model="m"))
        assert exc_info.value is primary_error

    @pytest.mark.asyncio
    async def test_unavailable_secondary_is_skipped(self):
        primary, secondary = self._provider(), self._provider(available=False)
        primary.generate.side_effect = UpstreamError("overloaded", status_code=529)
        with pytest.raises(UpstreamError):
            await FallbackProvider(primary, secondary).generate("p", LLMConfig(model="m"))
        secondary.generate.assert_not_called()


class TestFactory:
    def test_default_chain(self):
        provider = get_llm_provider()
        assert isinstance(provider, FallbackProvider)
        assert get_llm_provider() is provider

    def test_forced_provider(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "openai")
        assert isinstance(get_llm_provider(use_cache=False), OpenAIProvider)
