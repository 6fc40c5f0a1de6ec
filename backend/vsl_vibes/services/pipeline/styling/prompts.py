"""
Style Director Prompts

Centralizes the design policy sent to the Style Director:
- Preset descriptions and when to use them
- Emphasis and layout parameters with their allowed ranges
- Variety rules (chunks run in parallel, so variety is enforced per chunk)
"""

from typing import List, Optional

from ....models.deck import Slide, TEXT_SIZES
from ...infrastructure.llm import PromptTemplate


STYLE_SLIDES_PROMPT = PromptTemplate(
    template="""You are an expert VSL (Video Sales Letter) slide designer. Analyze these slides and decide the PERFECT styling for each one.

TOTAL SLIDES IN PROJECT: {total_slides}
{style_directive}
SLIDES TO STYLE:
{slides}

FOR EACH SLIDE, DECIDE:

1. **PRESET** - Pick the best visual style:
   - "black-background": Clean, dramatic, for punchy statements, CTAs
   - "white-background": Clean, professional, for simple facts
   - "headshot-bio": When speaker introduces themselves ("I'm Dr. X", "My name is", etc.)
   - "image-backdrop": Emotional moments, visual scenes, stories (needs image behind text)
   - "image-text": Split layout, image on top, text below (good for showing + telling)
   - "infographic": Teaching moments, explaining science/stats, lists of benefits

2. **DISPLAY MODE** (for image presets only):
   - "blurred": Soft background, text readable (most common)
   - "crisp": Clear image visible, text overlay
   - "split": Image top half, text bottom half

3. **CRISPNESS** (0-100, for blurred mode): 20-40 is usually good

4. **TEXT COLOR**: "white" for dark/image backgrounds, "black" for light backgrounds

5. **WORD EMPHASIS** (pick 0-3 key words per slide):
   - boldWords: Power words, benefits, key phrases
   - underlineWords: Important terms that need highlighting
   - circleWords: Critical numbers, warnings, key takeaways (use sparingly)
   - redWords: Danger words, warnings, pain points
   - underlineStyle: "brush-red" | "brush-black" | "regular" | "brush-stroke-red"
   - circleStyle: "red-solid" | "red-dotted" | "black-solid"

6. **INFOGRAPHIC**: Set isInfographic true if this is an "explain" moment. Set infographicAbsorbCount to how many NEXT slides should be bundled as cycling captions (0-4). Pick gradientName: "blue" | "purple" | "teal" | "orange".

7. **HEADSHOT**: Set isHeadshot true if speaker is introducing themselves.

8. **IMAGE KEYWORD**: For image presets, refine imageKeyword into a 2-4 word cinematic stock photo search term.

9. **LAYOUT NUMBERS** (optional): textSize one of {text_sizes}; splitRatio 50-70 for image-text; blur 0-20.

VARIETY RULES:
- Never use the same preset twice in a row
- Use at least 3 different presets in any 6 consecutive slides
- Mix text-only and image slides
- Use infographic for 1-2 teaching moments per script
- Headshot only when speaker literally introduces themselves
- Not every slide needs word emphasis; sometimes clean text is best

Return ONLY valid JSON array (no markdown), one object per slide, using the slide id shown in brackets:
[
  {
    "slideId": "abc",
    "preset": "image-backdrop",
    "displayMode": "blurred",
    "crispness": 40,
    "textColor": "white",
    "boldWords": ["breakthrough"],
    "underlineWords": [],
    "circleWords": [],
    "redWords": [],
    "underlineStyle": "brush-red",
    "circleStyle": "red-solid",
    "isInfographic": false,
    "infographicAbsorbCount": 0,
    "gradientName": "purple",
    "isHeadshot": false,
    "imageKeyword": "woman walking sunrise",
    "textSize": 96
  }
]""",
    description="Pick preset, emphasis and layout for a chunk of slides"
)


def format_slide_line(slide: Slide, global_index: int) -> str:
    return (
        f'{global_index}. [{slide.id}] "{slide.full_script_text}" '
        f"(scene: {slide.scene_title or 'unknown'}, emotion: {slide.emotion or 'neutral'}, "
        f"hasImage: {'true' if slide.image_keyword else 'false'}"
        f"{', imageKeyword: ' + slide.image_keyword if slide.image_keyword else ''})"
    )


def build_style_prompt(
    slides: List[Slide],
    chunk_index: int,
    chunk_size: int,
    total_slides: int,
    style_directive: Optional[str] = None,
) -> str:
    lines = "\n".join(
        format_slide_line(slide, chunk_index * chunk_size + i + 1)
        for i, slide in enumerate(slides)
    )
    directive = ""
    if style_directive and style_directive.strip():
        directive = f"\nUSER STYLE DIRECTION (follow it unless it breaks the rules below):\n{style_directive.strip()}\n"
    return STYLE_SLIDES_PROMPT.format(
        total_slides=total_slides,
        style_directive=directive,
        slides=lines,
        text_sizes=", ".join(str(size) for size in TEXT_SIZES),
    )
