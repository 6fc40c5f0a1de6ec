"""
Infographic Enricher Prompts
"""

from typing import List, Optional

from ...infrastructure.llm import PromptTemplate
from .icons import ICON_LIBRARY


INFOGRAPHIC_VISUAL_PROMPT = PromptTemplate(
    template="""You're creating a visual element for an infographic slide in a video sales letter.

TEXT: "{text}"
EMOTION/CONTEXT: {context}

Decide the BEST visual approach for this content:

1. "emoji" - Use when a single emoji perfectly captures the concept (simple, universal ideas)
2. "icon" - Use when content maps to common visual concepts (money, health, success, etc.)
3. "svg" - Use when content is abstract, unique, or deserves a custom illustration

RULES:
- Prefer simplicity: emoji/icon when they work well
- Use SVG for complex concepts, metaphors, or when a custom visual would be more impactful
- SVGs should be clean, minimal line art style
- SVGs must be valid, self-contained, viewBox="0 0 100 100", stroke-based, no external dependencies

Return ONLY valid JSON (no markdown):
{
  "type": "emoji" | "icon" | "svg",
  "value": "the emoji character" | "icon name from library" | "complete SVG code",
  "reasoning": "brief explanation of choice"
}

ICON LIBRARY: {icons}

If type is "svg", the value should be complete SVG markup like:
<svg viewBox="0 0 100 100" xmlns="http://www.w3.org/2000/svg">...</svg>""",
    description="Choose emoji, icon or SVG for an infographic slide"
)


INFOGRAPHIC_LINES_PROMPT = PromptTemplate(
    template="""You're creating an infographic slide for a Video Sales Letter. The first slide will become an infographic that "holds" while multiple lines of script play as cycling captions.

Analyze these slides and decide which ones should be BUNDLED together into the infographic:

{slides}

LOOK FOR "EXPLAIN" OR "TEACH" MOMENTS:
- A doctor/expert explaining something
- Science or technical explanations
- Lists of benefits or features
- Emotional build-up moments
- Story beats that flow together

RULES:
- Always include slide 1 (the trigger slide)
- Bundle 2-{max_lines} total lines that form a coherent "moment"
- Stop bundling when the topic/emotion clearly shifts
- Don't bundle unrelated content just to fill quota
- Return the slide IDs to absorb and the caption text for each

Return ONLY valid JSON (no markdown):
{
  "bundledSlideIds": ["id1", "id2"],
  "captions": ["First caption text", "Second caption text"],
  "reasoning": "Brief explanation of why these lines belong together"
}""",
    description="Bundle following slides into cycling infographic captions"
)


def build_visual_prompt(text: str, emotion: Optional[str] = None, context: Optional[str] = None) -> str:
    return INFOGRAPHIC_VISUAL_PROMPT.format(
        context=emotion or context or "general",
        icons=", ".join(ICON_LIBRARY),
        text=text,
    )


def build_lines_prompt(context_slides: List, max_lines: int) -> str:
    """``context_slides`` are ContextSlide items, trigger slide first."""
    lines = "\n".join(
        f'{i + 1}. [{slide.id}] "{slide.full_script_text}"' + (f" ({slide.emotion})" if slide.emotion else "")
        for i, slide in enumerate(context_slides)
    )
    return INFOGRAPHIC_LINES_PROMPT.format(max_lines=max_lines, slides=lines)
