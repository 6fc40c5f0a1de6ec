"""
Fallback provider

Tries Anthropic first and, on any provider error, retries the same prompt
against OpenAI using the mapped model. When both fail the Anthropic error is
re-raised so the caller sees the primary failure (e.g. a billing error).
"""

from typing import List

from ...config.models import get_openai_equivalent
from ...core.exceptions import ProviderError, is_billing_error
from ...core.logging import get_logger
from .base import LLMConfig, LLMProvider, LLMResponse, ProviderType

logger = get_logger(__name__, component="llm")


class FallbackProvider(LLMProvider):
    """Primary/secondary provider chain"""

    def __init__(self, primary: LLMProvider, secondary: LLMProvider):
        self.primary = primary
        self.secondary = secondary

    @property
    def provider_type(self) -> ProviderType:  # type: ignore[override]
        return self.primary.provider_type

    def is_available(self) -> bool:
        return self.primary.is_available() or self.secondary.is_available()

    def list_models(self) -> List[str]:
        return self.primary.list_models() + self.secondary.list_models()

    async def generate(self, prompt: str, config: LLMConfig) -> LLMResponse:
        try:
            return await self.primary.generate(prompt, config)
        except ProviderError as primary_error:
            if is_billing_error(primary_error):
                logger.error("Primary LLM provider is out of credit", extra={
                    "provider": self.primary.name,
                    "status_code": primary_error.status_code,
                })
            else:
                logger.warning("Primary LLM provider failed, trying fallback", extra={
                    "provider": self.primary.name,
                    "error": str(primary_error),
                })

            if not self.secondary.is_available():
                raise

            fallback_config = config.with_model(get_openai_equivalent(config.model))
            try:
                return await self.secondary.generate(prompt, fallback_config)
            except ProviderError as secondary_error:
                logger.error("Fallback LLM provider failed", extra={
                    "provider": self.secondary.name,
                    "error": str(secondary_error),
                })
                raise primary_error from secondary_error
