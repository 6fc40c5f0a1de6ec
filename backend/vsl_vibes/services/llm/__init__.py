"""
LLM Service - Abstraction layer for Language Model providers

This module provides a unified interface for interacting with different LLM providers:
- Anthropic (Claude, primary)
- OpenAI (GPT-4o family, fallback)

Usage:
    from vsl_vibes.services.llm import get_llm_provider, LLMConfig

    llm = get_llm_provider()
    response = await llm.generate("Your prompt here", LLMConfig(model="claude-sonnet-4-20250514"))
    print(response.text)
"""

from .base import (
    LLMProvider,
    LLMResponse,
    LLMConfig,
    ProviderType,
    UsageStats,
    classify_sdk_error,
)
from .factory import get_llm_provider, get_default_provider_type, clear_provider_cache, get_all_providers
from .anthropic_provider import AnthropicProvider
from .openai_provider import OpenAIProvider
from .fallback import FallbackProvider

__all__ = [
    # Base classes
    "LLMProvider",
    "LLMResponse",
    "LLMConfig",
    "ProviderType",
    "UsageStats",
    "classify_sdk_error",
    # Providers
    "AnthropicProvider",
    "OpenAIProvider",
    "FallbackProvider",
    # Factory
    "get_llm_provider",
    "get_default_provider_type",
    "clear_provider_cache",
    "get_all_providers",
]
