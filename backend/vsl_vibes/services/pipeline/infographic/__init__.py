"""
Infographic Enricher Stage
"""

from .enricher import (
    ContextSlide,
    EnrichResult,
    InfographicEnricher,
    fallback_lines,
    normalize_lines,
)
from .icons import FALLBACK_EMOJI, ICON_LIBRARY, fallback_visual, icon_to_emoji, is_svg_markup, normalize_visual

__all__ = [
    "ContextSlide",
    "EnrichResult",
    "InfographicEnricher",
    "fallback_lines",
    "normalize_lines",
    "FALLBACK_EMOJI",
    "ICON_LIBRARY",
    "fallback_visual",
    "icon_to_emoji",
    "is_svg_markup",
    "normalize_visual",
]
