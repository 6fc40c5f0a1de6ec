"""
Pipeline services - script to styled slide deck.

Pipeline Stages:
1. Script Splitter - Group script lines into scenes and slides
2. Style Director - Pick preset, emphasis and layout per slide
3. Image Resolver - Fill background images from stock photo providers
4. Infographic Enricher - Visuals and caption bundles for infographic slides

The orchestrator runs all four for a project and checkpoints after each.
"""

from .concurrency import CancellationToken, chunk, gather_in_batches
from .images import CircuitBreaker, ImageKeywordGenerator, ImageResolver
from .infographic import ContextSlide, InfographicEnricher
from .orchestrator import GenerationOrchestrator, get_orchestrator, set_orchestrator
from .splitter import ScriptSplitter, flatten_scenes
from .styling import StyleDirector, apply_decisions

__all__ = [
    "CancellationToken",
    "chunk",
    "gather_in_batches",
    "CircuitBreaker",
    "ImageKeywordGenerator",
    "ImageResolver",
    "ContextSlide",
    "InfographicEnricher",
    "GenerationOrchestrator",
    "get_orchestrator",
    "set_orchestrator",
    "ScriptSplitter",
    "flatten_scenes",
    "StyleDirector",
    "apply_decisions",
]
