"""
LLM provider interface shared by the Anthropic and OpenAI backends.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from ...core.exceptions import (
    ProviderError,
    TransportError,
    error_for_status,
)


class ProviderType(str, Enum):
    """Supported LLM providers"""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


@dataclass
class LLMConfig:
    """One text request: model, sampling and an optional system prompt"""
    model: str
    temperature: Optional[float] = None
    max_tokens: int = 4096
    system_instruction: Optional[str] = None

    # Passed straight to the SDK call; never carried across providers
    extra_options: Dict[str, Any] = field(default_factory=dict)

    def with_model(self, model: str) -> "LLMConfig":
        """Same request for another provider's model."""
        return replace(self, model=model, extra_options={})


@dataclass
class UsageStats:
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass
class LLMResponse:
    text: str
    model: str
    provider: ProviderType
    usage: Optional[UsageStats] = None
    raw_response: Any = None


class LLMProvider(ABC):
    """A text-completion backend.

    ``generate`` raises ``ProviderError`` subclasses only; SDK exceptions are
    translated with ``classify_sdk_error`` so the pipeline stages can apply
    their fallbacks without knowing which SDK is underneath.
    """

    provider_type: ProviderType

    @abstractmethod
    async def generate(self, prompt: str, config: LLMConfig) -> LLMResponse:
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """True when a credential is configured"""

    @abstractmethod
    def list_models(self) -> List[str]:
        ...

    @property
    def name(self) -> str:
        return self.provider_type.value


def classify_sdk_error(exc: Exception, provider: str) -> ProviderError:
    """Translate an SDK exception into the provider error taxonomy.

    Both the anthropic and openai SDKs expose ``status_code`` on status
    errors; anything without one is treated as a transport failure.
    """
    if isinstance(exc, ProviderError):
        return exc
    status = getattr(exc, "status_code", None)
    message = str(exc) or exc.__class__.__name__
    if isinstance(status, int):
        return error_for_status(status, message, provider=provider)
    return TransportError(message, provider=provider)
