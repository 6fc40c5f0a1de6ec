"""
Anthropic LLM Provider

Implementation of LLMProvider for Claude models via the anthropic SDK.
"""

import os
from typing import Any, List, Optional

import anthropic

from ...core.exceptions import CredentialError
from ...core.logging import get_logger
from .base import (
    LLMProvider,
    LLMResponse,
    LLMConfig,
    ProviderType,
    UsageStats,
    classify_sdk_error,
)

logger = get_logger(__name__, component="llm")


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider (primary)"""

    provider_type = ProviderType.ANTHROPIC

    AVAILABLE_MODELS = [
        "claude-sonnet-4-20250514",
        "claude-haiku-4-5-20251001",
        "claude-3-5-haiku-20241022",
    ]

    def __init__(self, api_key: Optional[str] = None, client: Any = None):
        """Initialize Anthropic provider

        Args:
            api_key: Anthropic API key. If not provided, uses ANTHROPIC_API_KEY env var
            client: Pre-built AsyncAnthropic client (tests inject a stub here)
        """
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        self.client = client
        if self.client is None and self.api_key:
            self.client = anthropic.AsyncAnthropic(api_key=self.api_key)

    def is_available(self) -> bool:
        return self.client is not None

    def list_models(self) -> List[str]:
        return self.AVAILABLE_MODELS.copy()

    def _extract_usage(self, response: Any) -> Optional[UsageStats]:
        usage = getattr(response, "usage", None)
        if usage is None:
            return None
        return UsageStats(
            input_tokens=getattr(usage, "input_tokens", 0) or 0,
            output_tokens=getattr(usage, "output_tokens", 0) or 0,
        )

    async def generate(self, prompt: str, config: LLMConfig) -> LLMResponse:
        if not self.is_available():
            raise CredentialError("ANTHROPIC_API_KEY not configured", provider=self.name)

        request_kwargs = {
            "model": config.model,
            "max_tokens": config.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            **config.extra_options,
        }
        if config.system_instruction:
            request_kwargs["system"] = config.system_instruction
        if config.temperature is not None:
            request_kwargs["temperature"] = config.temperature

        try:
            response = await self.client.messages.create(**request_kwargs)
        except anthropic.AnthropicError as exc:
            raise classify_sdk_error(exc, self.name) from exc

        text = "".join(
            getattr(block, "text", "") for block in (response.content or [])
        )
        return LLMResponse(
            text=text.strip(),
            model=config.model,
            provider=self.provider_type,
            usage=self._extract_usage(response),
            raw_response=response,
        )
