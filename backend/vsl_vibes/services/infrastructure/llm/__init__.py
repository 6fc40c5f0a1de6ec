"""LLM infrastructure - prompt templates and the per-step prompting engine."""

from .engine import PromptingEngine, PromptTemplate

__all__ = ["PromptingEngine", "PromptTemplate"]
