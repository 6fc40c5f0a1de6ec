"""
Prompting Engine

Binds a pipeline step (see config/models.py) to an LLM provider and handles
prompt formatting, usage logging and JSON response parsing. Pipeline stages
only deal with prompts and validated payloads.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ....config.models import get_model_config
from ....core.logging import get_logger, LogTimer
from ...llm import LLMConfig, LLMProvider, get_llm_provider
from ..parsing.json_parser import JsonPayload, parse_llm_json

logger = get_logger(__name__, component="prompting_engine")


@dataclass
class PromptTemplate:
    """
    A prompt template with ``{name}`` placeholders.

    Prompts embed JSON examples, so placeholders are substituted by plain
    replacement instead of ``str.format``.

    Usage:
        template = PromptTemplate(template="Hello {name}!", description="A greeting")
        result = template.format(name="World")
    """
    template: str
    description: str = ""

    def format(self, **kwargs) -> str:
        result = self.template
        for key, value in kwargs.items():
            result = result.replace("{" + key + "}", str(value))
        return result

    def __str__(self) -> str:
        return f"PromptTemplate({self.description})"


class PromptingEngine:
    """
    Run prompts for one pipeline step.

    Errors from the provider propagate as ProviderError subclasses and parse
    failures as MalformedResponseError; callers decide on the fallback.
    """

    def __init__(self, config_key: str, provider: Optional[LLMProvider] = None):
        self.config_key = config_key
        self.model_config = get_model_config(config_key)
        self._provider = provider

    @property
    def provider(self) -> LLMProvider:
        if self._provider is None:
            self._provider = get_llm_provider()
        return self._provider

    async def generate(self, prompt: str, system_instruction: Optional[str] = None) -> str:
        config = LLMConfig(
            model=self.model_config.model_name,
            max_tokens=self.model_config.max_tokens,
            temperature=self.model_config.temperature,
            system_instruction=system_instruction,
        )
        with LogTimer(logger, f"LLM call ({self.config_key})", level=logging.DEBUG):
            response = await self.provider.generate(prompt, config)

        usage = response.usage
        logger.debug("LLM response received", extra={
            "step": self.config_key,
            "model": response.model,
            "provider": response.provider.value,
            "input_tokens": usage.input_tokens if usage else None,
            "output_tokens": usage.output_tokens if usage else None,
        })
        return response.text

    async def generate_json(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        expect_array: bool = False,
    ) -> JsonPayload:
        text = await self.generate(prompt, system_instruction)
        return parse_llm_json(text, expect_array=expect_array)
