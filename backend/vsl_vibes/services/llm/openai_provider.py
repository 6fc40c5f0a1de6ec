"""
OpenAI LLM Provider

Implementation of LLMProvider for OpenAI chat models. Used as the fallback
when Anthropic is unavailable or out of credit.
"""

import os
from typing import Any, List, Optional

import openai

from ...core.exceptions import CredentialError
from .base import (
    LLMProvider,
    LLMResponse,
    LLMConfig,
    ProviderType,
    UsageStats,
    classify_sdk_error,
)


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions provider"""

    provider_type = ProviderType.OPENAI

    AVAILABLE_MODELS = [
        "gpt-4o",
        "gpt-4o-mini",
    ]

    def __init__(self, api_key: Optional[str] = None, client: Any = None):
        """Initialize OpenAI provider

        Args:
            api_key: OpenAI API key. If not provided, uses OPENAI_API_KEY
                (or the legacy OPEN_AI_API_KEY) env var
            client: Pre-built AsyncOpenAI client
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY") or os.getenv("OPEN_AI_API_KEY")
        self.client = client
        if self.client is None and self.api_key:
            self.client = openai.AsyncOpenAI(api_key=self.api_key)

    def is_available(self) -> bool:
        return self.client is not None

    def list_models(self) -> List[str]:
        return self.AVAILABLE_MODELS.copy()

    def _extract_usage(self, response: Any) -> Optional[UsageStats]:
        usage = getattr(response, "usage", None)
        if usage is None:
            return None
        return UsageStats(
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
        )

    async def generate(self, prompt: str, config: LLMConfig) -> LLMResponse:
        if not self.is_available():
            raise CredentialError("OPENAI_API_KEY not configured", provider=self.name)

        messages = []
        if config.system_instruction:
            messages.append({"role": "system", "content": config.system_instruction})
        messages.append({"role": "user", "content": prompt})

        request_kwargs = {
            "model": config.model,
            "max_tokens": config.max_tokens,
            "messages": messages,
            **config.extra_options,
        }
        if config.temperature is not None:
            request_kwargs["temperature"] = config.temperature

        try:
            response = await self.client.chat.completions.create(**request_kwargs)
        except openai.OpenAIError as exc:
            raise classify_sdk_error(exc, self.name) from exc

        content = response.choices[0].message.content if response.choices else ""
        return LLMResponse(
            text=(content or "").strip(),
            model=config.model,
            provider=self.provider_type,
            usage=self._extract_usage(response),
            raw_response=response,
        )
