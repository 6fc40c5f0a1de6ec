"""
Preset application.

Maps a Style Director decision onto a slide. The mapping is deterministic
and pure: the input slide is never mutated.
"""

import copy
from typing import Dict, List

from ....models.deck import (
    BackgroundImage,
    GRADIENTS,
    HeadshotSettings,
    Slide,
)
from ..schemas import StyleDecision

DEFAULT_UNDERLINE_STYLE = "brush-red"
DEFAULT_CIRCLE_STYLE = "red-solid"
DEFAULT_GRADIENT = "purple"


def apply_decision(slide: Slide, decision: StyleDecision) -> Slide:
    """Return a copy of ``slide`` styled according to ``decision``."""
    styled = copy.deepcopy(slide)
    style = styled.style

    styled.bold_words = list(decision.bold_words)
    styled.underline_words = list(decision.underline_words)
    styled.circle_words = list(decision.circle_words)
    styled.red_words = list(decision.red_words)

    underline_style = decision.underline_style or DEFAULT_UNDERLINE_STYLE
    circle_style = decision.circle_style or DEFAULT_CIRCLE_STYLE
    styled.underline_styles = {word: underline_style for word in styled.underline_words}
    styled.circle_styles = {word: circle_style for word in styled.circle_words}

    if decision.text_size is not None:
        style.text_size = decision.text_size
    if decision.image_keyword and slide.image_keyword:
        styled.image_keyword = decision.image_keyword

    preset = decision.preset
    if preset == "black-background":
        style.background = "dark"
        style.text_color = "white"

    elif preset == "white-background":
        style.background = "white"
        style.text_color = "black"

    elif preset == "headshot-bio":
        style.background = "white"
        style.text_color = "black"
        styled.headshot = HeadshotSettings()

    elif preset == "image-backdrop":
        style.background = "image"
        style.text_color = "black" if decision.text_color == "black" else "white"
        styled.has_background_image = True
        display_mode = decision.display_mode if decision.display_mode in ("blurred", "crisp") else "blurred"
        styled.background_image = BackgroundImage(
            url="",
            opacity=decision.crispness or 40,
            blur=8 if decision.blur is None else decision.blur,
            display_mode=display_mode,
        )

    elif preset == "image-text":
        style.background = "split"
        style.text_color = "black"
        style.split_ratio = decision.split_ratio or 50
        styled.has_background_image = True
        styled.background_image = BackgroundImage(
            url="",
            opacity=100,
            blur=0,
            display_mode="split",
            image_position_y=35,
        )

    elif preset == "infographic":
        gradient_name = decision.gradient_name or DEFAULT_GRADIENT
        style.background = "gradient"
        style.text_color = "white"
        style.gradient = GRADIENTS[gradient_name]
        style.gradient_name = gradient_name
        styled.is_infographic = True

    if decision.is_headshot and preset != "headshot-bio":
        styled.headshot = HeadshotSettings()

    styled.rebuild_segments()
    return styled


def apply_decisions(slides: List[Slide], decisions: List[StyleDecision]) -> List[Slide]:
    """Apply decisions by slide id; slides without a decision are returned unchanged."""
    by_id: Dict[str, StyleDecision] = {decision.slide_id: decision for decision in decisions}
    return [
        apply_decision(slide, by_id[slide.id]) if slide.id in by_id else copy.deepcopy(slide)
        for slide in slides
    ]
