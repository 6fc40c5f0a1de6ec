"""
Script Splitter Stage

Groups raw script lines into scenes of short slides via the LLM, falling
back to one slide per line for any batch the model cannot handle.
"""

from .splitter import (
    ScriptSplitter,
    SplitResult,
    split_into_lines,
    flatten_scenes,
    fallback_scene,
)
from .prompts import build_split_prompt

__all__ = [
    "ScriptSplitter",
    "SplitResult",
    "split_into_lines",
    "flatten_scenes",
    "fallback_scene",
    "build_split_prompt",
]
