"""
LLM Provider Factory

Creates and manages LLM provider instances based on configuration.
"""

from typing import Dict, Optional

from ...config.models import get_active_provider
from .anthropic_provider import AnthropicProvider
from .base import LLMProvider, ProviderType
from .fallback import FallbackProvider
from .openai_provider import OpenAIProvider


# Cache for provider instances; "chain" is the Anthropic -> OpenAI fallback
_provider_cache: Dict[str, LLMProvider] = {}


def get_default_provider_type() -> Optional[ProviderType]:
    """Get the forced provider type from LLM_PROVIDER

    Returns:
        ProviderType to use exclusively, or None for the fallback chain
    """
    forced = get_active_provider()
    if forced is None:
        return None
    return ProviderType(forced.value)


def get_llm_provider(
    provider_type: Optional[ProviderType] = None,
    use_cache: bool = True,
) -> LLMProvider:
    """Get an LLM provider instance

    Args:
        provider_type: Specific provider to use. If None, uses LLM_PROVIDER
            or the Anthropic -> OpenAI fallback chain.
        use_cache: Whether to cache and reuse provider instances

    Returns:
        LLMProvider instance. Missing credentials are reported when the
        provider is first used, as a CredentialError.
    """
    if provider_type is None:
        provider_type = get_default_provider_type()

    cache_key = provider_type.value if provider_type else "chain"
    if use_cache and cache_key in _provider_cache:
        return _provider_cache[cache_key]

    provider: LLMProvider
    if provider_type == ProviderType.ANTHROPIC:
        provider = AnthropicProvider()
    elif provider_type == ProviderType.OPENAI:
        provider = OpenAIProvider()
    else:
        provider = FallbackProvider(AnthropicProvider(), OpenAIProvider())

    if use_cache:
        _provider_cache[cache_key] = provider

    return provider


def clear_provider_cache():
    """Clear the provider cache"""
    _provider_cache.clear()


def get_all_providers() -> Dict[str, bool]:
    """Get configuration status of all providers"""
    return {
        ProviderType.ANTHROPIC.value: AnthropicProvider().is_available(),
        ProviderType.OPENAI.value: OpenAIProvider().is_available(),
    }
