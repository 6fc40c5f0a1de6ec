"""
Icon library and visual normalization for infographic slides.

Icons are rendered as emoji, so an ``icon`` answer is always converted
through ICON_LIBRARY; unknown icons become the fallback emoji.
"""

import re

from ..schemas import InfographicVisualPayload

FALLBACK_EMOJI = "💡"

ICON_LIBRARY = {
    # Science/Medical
    "brain": "🧠",
    "dna": "🧬",
    "microscope": "🔬",
    "pill": "💊",
    "heart": "❤️",
    "syringe": "💉",
    # Business/Money
    "money": "💰",
    "chart": "📈",
    "rocket": "🚀",
    "trophy": "🏆",
    "target": "🎯",
    "lightbulb": "💡",
    # Emotions
    "happy": "😊",
    "sad": "😢",
    "angry": "😠",
    "shocked": "😱",
    "love": "💕",
    "fire": "🔥",
    "star": "⭐",
    # People/Actions
    "person": "👤",
    "group": "👥",
    "handshake": "🤝",
    "thumbsup": "👍",
    "clap": "👏",
    "muscle": "💪",
    # Objects
    "book": "📖",
    "clock": "⏰",
    "key": "🔑",
    "lock": "🔒",
    "shield": "🛡️",
    "warning": "⚠️",
    "checkmark": "✅",
}

_SVG_MARKUP = re.compile(r"^\s*<svg[\s>][\s\S]*</svg>\s*$", re.IGNORECASE)


def icon_to_emoji(name: str) -> str:
    return ICON_LIBRARY.get(name.strip().lower(), FALLBACK_EMOJI)


def is_svg_markup(value: str) -> bool:
    return bool(_SVG_MARKUP.match(value or ""))


def fallback_visual(reasoning: str = "Fallback due to error") -> InfographicVisualPayload:
    return InfographicVisualPayload(type="emoji", value=FALLBACK_EMOJI, reasoning=reasoning)


def normalize_visual(visual: InfographicVisualPayload) -> InfographicVisualPayload:
    """Map icons to emoji and reject SVG values that are not SVG markup."""
    if visual.type == "icon":
        return InfographicVisualPayload(type="emoji", value=icon_to_emoji(visual.value),
                                        reasoning=visual.reasoning)
    if visual.type == "svg" and not is_svg_markup(visual.value):
        return fallback_visual("Fallback due to invalid SVG markup")
    return visual
