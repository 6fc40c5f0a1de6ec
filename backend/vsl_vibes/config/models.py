"""
Model Configuration for Pipeline Steps

This module defines the LLM used at each step of the slide generation
pipeline. Each step has its own model configuration so prompts can be tuned
independently (fast models for keyword/visual inference, a stronger model
for the Style Director).

=== PROVIDER CONFIGURATION ===

Anthropic (Claude) is the primary provider. When a request to Anthropic
fails, the same prompt is retried against OpenAI using the mapped model:
    - haiku models  -> gpt-4o-mini
    - sonnet / opus -> gpt-4o

Set LLM_PROVIDER to force a single provider:
    - "anthropic" : Claude only (requires ANTHROPIC_API_KEY)
    - "openai"    : OpenAI only (requires OPENAI_API_KEY)
    - unset       : Anthropic with OpenAI fallback
"""

import os
from enum import Enum
from typing import Dict, Optional
from dataclasses import dataclass, field, fields


class LLMProviderType(str, Enum):
    """Supported LLM providers"""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


def get_active_provider() -> Optional[LLMProviderType]:
    """Get the forced LLM provider from environment

    Returns:
        The forced provider, or None when the default
        Anthropic -> OpenAI fallback chain should be used.
    """
    provider_env = os.getenv("LLM_PROVIDER", "").lower()

    if provider_env == "anthropic":
        return LLMProviderType.ANTHROPIC
    elif provider_env == "openai":
        return LLMProviderType.OPENAI
    return None


# Mapping from Claude models to OpenAI equivalents
CLAUDE_TO_OPENAI_MAP = {
    "claude-3-5-haiku-20241022": "gpt-4o-mini",
    "claude-haiku-4-5-20251001": "gpt-4o-mini",
    "claude-sonnet-4-20250514": "gpt-4o",
    "claude-3-5-sonnet-20241022": "gpt-4o",
}

DEFAULT_OPENAI_MODEL = "gpt-4o"


def get_openai_equivalent(model: str) -> str:
    """Map a Claude model name to the OpenAI model used as fallback"""
    if model in CLAUDE_TO_OPENAI_MAP:
        return CLAUDE_TO_OPENAI_MAP[model]
    if "haiku" in model:
        return "gpt-4o-mini"
    return DEFAULT_OPENAI_MODEL


@dataclass
class ModelConfig:
    """Configuration for a single pipeline step model"""
    model_name: str
    max_tokens: int = 4096
    temperature: Optional[float] = None
    openai_model: Optional[str] = None
    description: str = ""

    def get_model_for_provider(self, provider: LLMProviderType) -> str:
        """Get the appropriate model name for the given provider"""
        if provider == LLMProviderType.OPENAI:
            return self.openai_model or get_openai_equivalent(self.model_name)
        return self.model_name


@dataclass
class PipelineModels:
    """
    Model configuration for each step of the slide generation pipeline.

    Pipeline Steps:
    1. Script Splitting - group script lines into scenes and slides
    2. Style Direction - pick presets, emphasis and layout per slide
    3. Image Keyword - infer a stock photo search term for a slide
    4. Infographic Visual - choose emoji / icon / SVG for a slide
    5. Infographic Lines - bundle adjacent lines into cycling captions
    """

    script_splitting: ModelConfig = field(default_factory=lambda: ModelConfig(
        model_name="claude-3-5-haiku-20241022",
        max_tokens=4096,
        description="Split script lines into scenes"
    ))

    style_direction: ModelConfig = field(default_factory=lambda: ModelConfig(
        model_name="claude-sonnet-4-20250514",
        max_tokens=8192,
        description="Design decisions for every slide"
    ))

    image_keyword: ModelConfig = field(default_factory=lambda: ModelConfig(
        model_name="claude-haiku-4-5-20251001",
        max_tokens=100,
        description="Short stock photo search term"
    ))

    infographic_visual: ModelConfig = field(default_factory=lambda: ModelConfig(
        model_name="claude-haiku-4-5-20251001",
        max_tokens=2048,
        description="Emoji, icon or SVG for infographic slides"
    ))

    infographic_lines: ModelConfig = field(default_factory=lambda: ModelConfig(
        model_name="claude-haiku-4-5-20251001",
        max_tokens=1024,
        description="Bundle script lines into infographic captions"
    ))


DEFAULT_PIPELINE_MODELS = PipelineModels()

ACTIVE_PIPELINE = DEFAULT_PIPELINE_MODELS
ACTIVE_PROVIDER = get_active_provider()


def list_pipeline_steps() -> Dict[str, str]:
    """List pipeline steps with their configured model names"""
    return {
        f.name: getattr(ACTIVE_PIPELINE, f.name).model_name
        for f in fields(PipelineModels)
    }


def get_model_config(step: str) -> ModelConfig:
    """Get the model configuration for a pipeline step

    Raises:
        ValueError: If the step is unknown
    """
    if not hasattr(ACTIVE_PIPELINE, step):
        available = ", ".join(list_pipeline_steps())
        raise ValueError(f"Unknown pipeline step: {step}. Available: {available}")
    return getattr(ACTIVE_PIPELINE, step)


def get_model_name(step: str, provider: LLMProviderType = LLMProviderType.ANTHROPIC) -> str:
    """Get the model name for a pipeline step and provider"""
    return get_model_config(step).get_model_for_provider(provider)
