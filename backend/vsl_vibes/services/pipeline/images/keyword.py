"""
Image keyword inference for a single slide.
"""

from typing import Optional

from ....core.exceptions import ProviderError
from ....core.logging import get_logger
from ...infrastructure.llm import PromptingEngine, PromptTemplate

logger = get_logger(__name__, component="image_keyword")

FALLBACK_KEYWORD = "abstract background"

IMAGE_KEYWORD_PROMPT = PromptTemplate(
    template="""Generate a 2-4 word stock photo search term that visually represents this text. The term should describe a scene, person, or concept that a stock photo site like Pexels would have.

Text: "{slide_text}"
{emotion}{scene}
Reply with ONLY the search term, nothing else. Examples:
- "You watched your mom struggle to read" → "mother reading difficulty"
- "We made $2 million" → "business success celebration"
- "I was broke and desperate" → "stressed person finances\"""",
    description="Short stock photo search term for one slide"
)


def fallback_keyword(slide_text: str) -> str:
    """First three words of the slide, or a generic backdrop term."""
    words = (slide_text or "").split()[:3]
    return " ".join(words) or FALLBACK_KEYWORD


def clean_keyword(raw: str) -> str:
    keyword = raw.strip().splitlines()[0] if raw.strip() else ""
    return keyword.replace('"', "").replace("'", "").strip()


class ImageKeywordGenerator:
    def __init__(self, engine: Optional[PromptingEngine] = None):
        self.engine = engine or PromptingEngine("image_keyword")

    async def generate(
        self,
        slide_text: str,
        emotion: Optional[str] = None,
        scene_title: Optional[str] = None,
    ) -> str:
        prompt = IMAGE_KEYWORD_PROMPT.format(
            slide_text=slide_text,
            emotion=f"Emotion: {emotion}\n" if emotion else "",
            scene=f"Scene: {scene_title}\n" if scene_title else "",
        )
        try:
            keyword = clean_keyword(await self.engine.generate(prompt))
        except ProviderError as e:
            logger.warning("Image keyword inference failed", extra={"error": str(e)})
            return fallback_keyword(slide_text)
        return keyword or fallback_keyword(slide_text)
