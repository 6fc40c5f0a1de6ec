"""
Stage endpoints: script splitting, style direction, image keywords,
infographic visuals and caption bundles, image prompts.

Each endpoint runs one pipeline stage statelessly; the project-level
``/projects/{id}/generate`` endpoint chains them.
"""

from fastapi import APIRouter, Depends, HTTPException

from ..models import (
    GeneratePromptRequest,
    GeneratePromptResponse,
    ImageKeywordRequest,
    ImageKeywordResponse,
    InfographicLinesRequest,
    InfographicLinesResponse,
    InfographicVisualRequest,
    InfographicVisualResponse,
    Slide,
    SplitScriptRequest,
    SplitScriptResponse,
    StyleSlidesRequest,
    StyleSlidesResponse,
)
from ..services.media import ImagePromptService
from ..services.pipeline import ImageKeywordGenerator, InfographicEnricher, ScriptSplitter, StyleDirector
from ..services.pipeline.infographic import ContextSlide
from .dependencies import (
    get_enricher,
    get_keyword_generator,
    get_prompt_service,
    get_splitter,
    get_style_director,
)
from .errors import HANDLED_ERRORS, http_error

router = APIRouter(tags=["generation"])


@router.post("/split-script", response_model=SplitScriptResponse)
async def split_script(request: SplitScriptRequest, splitter: ScriptSplitter = Depends(get_splitter)):
    """Group script lines into scenes of slides"""
    if not request.script.strip():
        raise HTTPException(status_code=400, detail="Script is required")
    try:
        result = await splitter.split(request.script)
    except HANDLED_ERRORS as e:
        raise http_error(e)
    return SplitScriptResponse.model_validate(result.to_dict())


@router.post("/style-slides", response_model=StyleSlidesResponse)
async def style_slides(request: StyleSlidesRequest, director: StyleDirector = Depends(get_style_director)):
    """Decide preset, emphasis and layout for each slide"""
    if request.chunk_size is not None and request.chunk_size != director.chunk_size:
        director = StyleDirector(engine=director.engine, chunk_size=request.chunk_size,
                                 concurrency=director.concurrency)

    slides = [
        Slide(
            id=item.id,
            full_script_text=item.full_script_text,
            scene_title=item.scene_title,
            emotion=item.emotion,
            image_keyword=item.image_keyword,
        )
        for item in request.slides
    ]
    try:
        decisions = await director.decide(slides, request.style_directive)
    except HANDLED_ERRORS as e:
        raise http_error(e)
    return StyleSlidesResponse(styles=[d.model_dump(by_alias=True, exclude_none=True) for d in decisions])


@router.post("/image-keyword", response_model=ImageKeywordResponse)
async def image_keyword(
    request: ImageKeywordRequest,
    generator: ImageKeywordGenerator = Depends(get_keyword_generator),
):
    """Short stock-photo search phrase for a slide (never fails)"""
    if not request.slide_text.strip():
        raise HTTPException(status_code=400, detail="Slide text is required")
    keyword = await generator.generate(request.slide_text, request.emotion, request.scene_title)
    return ImageKeywordResponse(keyword=keyword)


@router.post("/infographic-visual", response_model=InfographicVisualResponse)
async def infographic_visual(
    request: InfographicVisualRequest,
    enricher: InfographicEnricher = Depends(get_enricher),
):
    """Pick an emoji or inline SVG for an infographic slide"""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")
    visual = await enricher.visual(request.text, request.emotion, request.context)
    return InfographicVisualResponse(type=visual.type, value=visual.value, reasoning=visual.reasoning)


@router.post("/infographic-lines", response_model=InfographicLinesResponse)
async def infographic_lines(
    request: InfographicLinesRequest,
    enricher: InfographicEnricher = Depends(get_enricher),
):
    """Choose which following slides an infographic bundles as captions"""
    current = ContextSlide(**request.current_slide.model_dump())
    next_slides = [ContextSlide(**item.model_dump()) for item in request.next_slides]
    lines = await enricher.lines(current, next_slides, request.max_lines)
    return InfographicLinesResponse(
        bundled_slide_ids=lines.bundled_slide_ids,
        captions=lines.captions,
        reasoning=lines.reasoning,
    )


@router.post("/generate-prompt", response_model=GeneratePromptResponse)
async def generate_prompt(
    request: GeneratePromptRequest,
    service: ImagePromptService = Depends(get_prompt_service),
):
    """Image-generation prompt from the webhook, or a local template"""
    if not request.slide_text.strip():
        raise HTTPException(status_code=400, detail="Slide text is required")
    prompt = await service.generate(request.slide_text, request.image_keyword,
                                    request.scene_title, request.emotion)
    return GeneratePromptResponse(prompt=prompt.prompt, source=prompt.source)
