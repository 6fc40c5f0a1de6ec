"""
Script Splitter

Turns a pasted script into scenes of short slides.

Flow:
1. Split the script on newline runs into trimmed, non-empty lines
2. Group lines into batches (40 by default)
3. Ask the LLM to split each batch into scenes, a few batches at a time
4. Replace any failed batch with one synthetic scene of the raw lines
5. Renumber scenes 1..K in batch order
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ....config.pipeline import SPLIT_BATCH_SIZE, SPLIT_CONCURRENCY
from ....core.exceptions import (
    EmptyScriptError,
    MalformedResponseError,
    ProviderError,
    is_billing_error,
)
from ....core.logging import get_logger
from ....models.deck import Scene, SceneSlide, Slide, new_slide_from_text
from ...infrastructure.llm import PromptingEngine
from ..concurrency import CancellationToken, chunk, gather_in_batches
from ..schemas import ScenePayload, validate_list
from .prompts import build_split_prompt

logger = get_logger(__name__, component="script_splitter")

_LINE_BREAKS = re.compile(r"\n+")


def split_into_lines(script: str) -> List[str]:
    """Split on newline runs, trim, and drop empty lines."""
    return [line.strip() for line in _LINE_BREAKS.split(script or "") if line.strip()]


def fallback_scene(lines: List[str], batch_index: int) -> Scene:
    """One scene holding the raw lines of a batch, without images."""
    return Scene(
        scene_number=batch_index + 1,
        title=f"Section {batch_index + 1}",
        emotion="neutral",
        slides=[SceneSlide(full_script_text=line, has_image=False) for line in lines],
    )


@dataclass
class SplitResult:
    scenes: List[Scene]
    fallback_batches: List[int] = field(default_factory=list)

    @property
    def stats(self) -> Dict[str, int]:
        total = sum(len(scene.slides) for scene in self.scenes)
        with_image = sum(1 for scene in self.scenes for slide in scene.slides if slide.has_image)
        return {"total_slides": total, "image_slides": with_image}

    def to_dict(self) -> Dict[str, Any]:
        return {"scenes": [scene.to_dict() for scene in self.scenes], "stats": self.stats}


def flatten_scenes(scenes: List[Scene]) -> List[Slide]:
    """
    Create unstyled slides from scenes, skipping repeated text.

    Text is compared trimmed and lowercased; the first occurrence wins.
    """
    seen = set()
    slides: List[Slide] = []
    for scene in scenes:
        for scene_slide in scene.slides:
            key = scene_slide.full_script_text.strip().lower()
            if not key or key in seen:
                continue
            seen.add(key)
            slides.append(new_slide_from_text(
                scene_slide.full_script_text.strip(),
                image_keyword=scene_slide.image_keyword if scene_slide.has_image else None,
                scene_number=scene.scene_number,
                scene_title=scene.title,
                emotion=scene.emotion,
            ))
    return slides


class ScriptSplitter:
    """
    Splits scripts into scenes with bounded LLM parallelism.

    Usage:
        splitter = ScriptSplitter()
        result = await splitter.split(script)
        slides = flatten_scenes(result.scenes)
    """

    def __init__(
        self,
        engine: Optional[PromptingEngine] = None,
        batch_size: int = SPLIT_BATCH_SIZE,
        concurrency: int = SPLIT_CONCURRENCY,
    ):
        self.engine = engine or PromptingEngine("script_splitting")
        self.batch_size = batch_size
        self.concurrency = concurrency

    async def split(self, script: str, cancel_token: Optional[CancellationToken] = None) -> SplitResult:
        """
        Split a script into scenes.

        Raises:
            EmptyScriptError: if the script has no non-empty lines
            GenerationCancelled: if cancelled between batch groups
        """
        lines = split_into_lines(script)
        if not lines:
            raise EmptyScriptError("No content found in script")

        batches = chunk(lines, self.batch_size)
        logger.info("Splitting script", extra={"lines": len(lines), "batches": len(batches)})

        async def run_batch(index: int, batch: List[str]) -> Tuple[List[Scene], bool]:
            return await self._split_batch(batch, index, len(batches))

        per_batch = await gather_in_batches(batches, run_batch, self.concurrency, cancel_token)

        result = SplitResult(scenes=[])
        for index, (scenes, used_fallback) in enumerate(per_batch):
            if used_fallback:
                result.fallback_batches.append(index)
            result.scenes.extend(scenes)

        for number, scene in enumerate(result.scenes, start=1):
            scene.scene_number = number

        logger.info("Script split complete", extra={**result.stats, "scenes": len(result.scenes)})
        return result

    async def _split_batch(
        self, lines: List[str], batch_index: int, total_batches: int
    ) -> Tuple[List[Scene], bool]:
        """Split one batch; the flag is True when the raw-line fallback was used."""
        prompt = build_split_prompt(lines, batch_index, total_batches)
        try:
            payload = await self.engine.generate_json(prompt, expect_array=True)
            scenes = validate_list(ScenePayload, payload)
            scenes = [scene for scene in scenes if scene.slides]
            if not scenes:
                raise MalformedResponseError("Model returned no scenes")
        except (ProviderError, MalformedResponseError) as e:
            if is_billing_error(e):
                logger.error("Script split failed: LLM provider out of credit or billing issue", extra={
                    "batch": batch_index + 1,
                })
            else:
                logger.warning("Script split batch failed, using raw lines", extra={
                    "batch": batch_index + 1,
                    "error": str(e),
                })
            return [fallback_scene(lines, batch_index)], True

        scenes = [
            Scene(
                scene_number=scene.scene_number,
                title=scene.title,
                emotion=scene.emotion,
                slides=[
                    SceneSlide(
                        full_script_text=slide.full_script_text,
                        has_image=slide.has_image,
                        image_keyword=slide.image_keyword,
                    )
                    for slide in scene.slides
                ],
            )
            for scene in scenes
        ]
        return scenes, False
