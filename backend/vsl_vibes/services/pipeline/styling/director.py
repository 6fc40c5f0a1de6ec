"""
Style Director

Sends chunks of slides to the LLM and collects one validated style decision
per slide. A failed chunk, or a slide the model skipped, gets the default
white-background decision so the deck is always fully styled.
"""

from typing import List, Optional

from ....config.pipeline import ALLOWED_STYLE_CHUNK_SIZES, STYLE_CHUNK_SIZE, STYLE_CONCURRENCY
from ....core.exceptions import MalformedResponseError, ProviderError, is_billing_error
from ....core.logging import get_logger
from ....models.deck import Slide
from ...infrastructure.llm import PromptingEngine
from ..concurrency import CancellationToken, chunk, gather_in_batches
from ..schemas import StyleDecision, default_decision, validate_list
from .presets import apply_decisions
from .prompts import build_style_prompt

logger = get_logger(__name__, component="style_director")


def normalize_chunk_size(chunk_size: Optional[int]) -> int:
    """Only the supported chunk sizes are honoured; anything else uses the default."""
    if chunk_size in ALLOWED_STYLE_CHUNK_SIZES:
        return chunk_size
    return STYLE_CHUNK_SIZE


class StyleDirector:
    """
    Decides preset, emphasis and layout for every slide.

    Usage:
        director = StyleDirector()
        decisions = await director.decide(slides, style_directive="moody, cinematic")
        styled = apply_decisions(slides, decisions)
    """

    def __init__(
        self,
        engine: Optional[PromptingEngine] = None,
        chunk_size: Optional[int] = None,
        concurrency: int = STYLE_CONCURRENCY,
    ):
        self.engine = engine or PromptingEngine("style_direction")
        self.chunk_size = normalize_chunk_size(chunk_size)
        self.concurrency = concurrency

    async def decide(
        self,
        slides: List[Slide],
        style_directive: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[StyleDecision]:
        """Return one decision per input slide, in input order."""
        if not slides:
            return []

        chunks = chunk(slides, self.chunk_size)
        logger.info("Styling slides", extra={"slides": len(slides), "chunks": len(chunks)})

        async def run_chunk(index: int, chunk_slides: List[Slide]) -> List[StyleDecision]:
            return await self._decide_chunk(chunk_slides, index, len(slides), style_directive)

        per_chunk = await gather_in_batches(chunks, run_chunk, self.concurrency, cancel_token)
        return [decision for decisions in per_chunk for decision in decisions]

    async def style(
        self,
        slides: List[Slide],
        style_directive: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[Slide]:
        """Decide and apply styles in one step."""
        decisions = await self.decide(slides, style_directive, cancel_token)
        return apply_decisions(slides, decisions)

    async def _decide_chunk(
        self,
        slides: List[Slide],
        chunk_index: int,
        total_slides: int,
        style_directive: Optional[str],
    ) -> List[StyleDecision]:
        prompt = build_style_prompt(slides, chunk_index, self.chunk_size, total_slides, style_directive)
        try:
            payload = await self.engine.generate_json(prompt, expect_array=True)
            decisions = validate_list(StyleDecision, payload, skip_invalid=True)
        except (ProviderError, MalformedResponseError) as e:
            if is_billing_error(e):
                logger.error("Style direction failed: LLM provider out of credit or billing issue", extra={
                    "chunk": chunk_index + 1,
                })
            else:
                logger.warning("Style chunk failed, using default styles", extra={
                    "chunk": chunk_index + 1,
                    "error": str(e),
                })
            return [default_decision(slide.id) for slide in slides]

        by_id = {decision.slide_id: decision for decision in decisions}
        missing = [slide.id for slide in slides if slide.id not in by_id]
        if missing:
            logger.debug("Model skipped slides, applying defaults", extra={
                "chunk": chunk_index + 1,
                "missing": len(missing),
            })
        return [by_id.get(slide.id) or default_decision(slide.id) for slide in slides]
