"""
Style Director Stage

LLM design decisions per slide and their deterministic mapping to slide
styles.
"""

from .director import StyleDirector, normalize_chunk_size
from .presets import apply_decision, apply_decisions
from .prompts import build_style_prompt

__all__ = [
    "StyleDirector",
    "normalize_chunk_size",
    "apply_decision",
    "apply_decisions",
    "build_style_prompt",
]
