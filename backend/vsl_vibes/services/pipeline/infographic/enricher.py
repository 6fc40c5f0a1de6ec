"""
Infographic Enricher

For each infographic slide, two independent LLM requests:

1. Visual: emoji, icon (mapped to emoji) or inline SVG
2. Lines: which of the following slides to bundle as cycling captions

Each request has its own fallback, so one failing never blocks the other.
Applied to a deck, the bundle becomes ``infographic_captions`` and the
other bundled ids become ``absorbed_slide_ids``. A slide is never absorbed
by itself, nor by two infographic slides.
"""

import asyncio
import copy
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from ....config.pipeline import INFOGRAPHIC_CONTEXT_SLIDES, INFOGRAPHIC_MAX_LINES
from ....core.exceptions import MalformedResponseError, ProviderError
from ....core.logging import get_logger
from ....models.deck import InfographicVisual, Slide
from ...infrastructure.llm import PromptingEngine
from ..concurrency import CancellationToken
from ..schemas import InfographicLinesPayload, InfographicVisualPayload, validate_payload
from .icons import fallback_visual, normalize_visual
from .prompts import build_lines_prompt, build_visual_prompt

logger = get_logger(__name__, component="infographic_enricher")

MIN_LINES = 2


@dataclass
class ContextSlide:
    """The slide fields the lines request needs."""
    id: str
    full_script_text: str
    emotion: Optional[str] = None
    scene_title: Optional[str] = None

    @classmethod
    def from_slide(cls, slide: Slide) -> "ContextSlide":
        return cls(
            id=slide.id,
            full_script_text=slide.full_script_text,
            emotion=slide.emotion,
            scene_title=slide.scene_title,
        )


def fallback_lines(current: ContextSlide, reasoning: str = "Fallback due to error") -> InfographicLinesPayload:
    return InfographicLinesPayload(
        bundled_slide_ids=[current.id],
        captions=[current.full_script_text],
        reasoning=reasoning,
    )


def normalize_lines(
    payload: InfographicLinesPayload,
    current: ContextSlide,
    context: List[ContextSlide],
    max_lines: int,
) -> InfographicLinesPayload:
    """
    Clean a lines answer against the context it was asked about.

    - ids outside the context are dropped together with their captions
    - duplicate ids keep their first occurrence
    - the current slide is moved (or inserted) to the front
    - missing or blank captions fall back to the slide text
    - the bundle is capped at ``max_lines``
    """
    texts = {slide.id: slide.full_script_text for slide in context}
    pairs = []
    seen: Set[str] = set()
    for index, slide_id in enumerate(payload.bundled_slide_ids):
        if slide_id not in texts or slide_id in seen:
            continue
        seen.add(slide_id)
        caption = payload.captions[index] if index < len(payload.captions) else ""
        pairs.append((slide_id, caption or texts[slide_id]))

    current_pair = next((pair for pair in pairs if pair[0] == current.id), None)
    if current_pair is None:
        current_pair = (current.id, current.full_script_text)
    else:
        pairs.remove(current_pair)
    pairs.insert(0, current_pair)
    pairs = pairs[:max(max_lines, 1)]

    return InfographicLinesPayload(
        bundled_slide_ids=[slide_id for slide_id, _ in pairs],
        captions=[caption for _, caption in pairs],
        reasoning=payload.reasoning,
    )


@dataclass
class EnrichResult:
    slides: List[Slide]
    enriched: int = 0
    visual_fallbacks: List[str] = field(default_factory=list)
    lines_fallbacks: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, int]:
        return {
            "enriched": self.enriched,
            "visual_fallbacks": len(self.visual_fallbacks),
            "lines_fallbacks": len(self.lines_fallbacks),
        }


class InfographicEnricher:
    """
    Visual and caption bundling for infographic slides.

    Usage:
        enricher = InfographicEnricher()
        visual = await enricher.visual("Your brain burns 20% of your energy")
        result = await enricher.enrich(slides)
    """

    def __init__(
        self,
        visual_engine: Optional[PromptingEngine] = None,
        lines_engine: Optional[PromptingEngine] = None,
        max_lines: int = INFOGRAPHIC_MAX_LINES,
        context_size: int = INFOGRAPHIC_CONTEXT_SLIDES,
    ):
        self.visual_engine = visual_engine or PromptingEngine("infographic_visual")
        self.lines_engine = lines_engine or PromptingEngine("infographic_lines")
        self.max_lines = max(max_lines, MIN_LINES)
        self.context_size = context_size

    async def visual(
        self,
        text: str,
        emotion: Optional[str] = None,
        context: Optional[str] = None,
    ) -> InfographicVisualPayload:
        """Pick a visual; any failure yields the fallback emoji."""
        visual, _ = await self._visual(text, emotion, context)
        return visual

    async def _visual(
        self, text: str, emotion: Optional[str], context: Optional[str]
    ) -> Tuple[InfographicVisualPayload, bool]:
        try:
            payload = await self.visual_engine.generate_json(build_visual_prompt(text, emotion, context))
            return normalize_visual(validate_payload(InfographicVisualPayload, payload)), False
        except (ProviderError, MalformedResponseError) as e:
            logger.warning("Infographic visual failed, using fallback emoji", extra={"error": str(e)})
            return fallback_visual(), True

    async def lines(
        self,
        current: ContextSlide,
        next_slides: List[ContextSlide],
        max_lines: Optional[int] = None,
    ) -> InfographicLinesPayload:
        """Pick the caption bundle; any failure yields the current slide alone."""
        lines, _ = await self._lines(current, next_slides, max_lines)
        return lines

    async def _lines(
        self,
        current: ContextSlide,
        next_slides: List[ContextSlide],
        max_lines: Optional[int],
    ) -> Tuple[InfographicLinesPayload, bool]:
        max_lines = max(max_lines or self.max_lines, MIN_LINES)
        context = [current] + list(next_slides[:self.context_size])
        try:
            payload = await self.lines_engine.generate_json(build_lines_prompt(context, max_lines))
            lines = validate_payload(InfographicLinesPayload, payload)
        except (ProviderError, MalformedResponseError) as e:
            logger.warning("Infographic lines failed, using current slide only", extra={
                "slide_id": current.id,
                "error": str(e),
            })
            return fallback_lines(current), True
        return normalize_lines(lines, current, context, max_lines), False

    async def enrich(
        self,
        slides: List[Slide],
        cancel_token: Optional[CancellationToken] = None,
    ) -> EnrichResult:
        """Return a copy of ``slides`` with every infographic slide enriched."""
        slides = copy.deepcopy(slides)
        result = EnrichResult(slides=slides)
        absorbed: Set[str] = set()

        targets = [index for index, slide in enumerate(slides) if slide.is_infographic]
        logger.info("Enriching infographic slides", extra={"targets": len(targets)})

        for index in targets:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            slide = slides[index]
            current = ContextSlide.from_slide(slide)
            following = [
                ContextSlide.from_slide(other)
                for other in slides[index + 1:]
                if other.id not in absorbed
            ]

            (visual, visual_fallback), (lines, lines_fallback) = await asyncio.gather(
                self._visual(slide.full_script_text, slide.emotion, slide.scene_title),
                self._lines(current, following, None),
            )
            if visual_fallback:
                result.visual_fallbacks.append(slide.id)
            if lines_fallback:
                result.lines_fallbacks.append(slide.id)

            captions = []
            absorbed_ids = []
            for slide_id, caption in zip(lines.bundled_slide_ids, lines.captions):
                if slide_id == slide.id:
                    captions.append(caption)
                elif slide_id not in absorbed:
                    captions.append(caption)
                    absorbed_ids.append(slide_id)

            slide.infographic_visual = InfographicVisual(type=visual.type, value=visual.value)
            slide.infographic_captions = captions or [slide.full_script_text]
            slide.absorbed_slide_ids = absorbed_ids
            absorbed.update(absorbed_ids)
            absorbed.add(slide.id)
            result.enriched += 1

        logger.info("Infographic enrichment complete", extra=result.to_dict())
        return result
