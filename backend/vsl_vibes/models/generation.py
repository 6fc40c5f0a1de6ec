"""
API schemas for generation endpoints

Request/Response models for the stateless stage endpoints (split, style,
keyword, infographic, prompt) and for project generation runs. Field names
are camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional


class ApiModel(BaseModel):
    """Base for wire models: camelCase aliases, snake_case attributes."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# === Script Splitter ===

class SplitScriptRequest(ApiModel):
    script: str


class SceneSlideOut(ApiModel):
    full_script_text: str
    has_image: bool = False
    image_keyword: Optional[str] = None


class SceneOut(ApiModel):
    scene_number: int
    title: str
    emotion: str
    slides: List[SceneSlideOut] = []


class SplitStats(ApiModel):
    total_slides: int
    image_slides: int


class SplitScriptResponse(ApiModel):
    scenes: List[SceneOut]
    stats: SplitStats


# === Style Director ===

class StyleSlideIn(ApiModel):
    """Minimal slide view the style director needs."""
    id: str
    full_script_text: str
    scene_title: Optional[str] = None
    emotion: Optional[str] = None
    image_keyword: Optional[str] = None


class StyleSlidesRequest(ApiModel):
    slides: List[StyleSlideIn] = Field(min_length=1)
    style_directive: Optional[str] = None
    chunk_size: Optional[int] = None  # 20 (default) or 50


class StyleSlidesResponse(BaseModel):
    styles: List[Dict[str, Any]]  # StyleDecision dumped by alias


# === Image keyword and prompt ===

class ImageKeywordRequest(ApiModel):
    slide_text: str
    emotion: Optional[str] = None
    scene_title: Optional[str] = None


class ImageKeywordResponse(ApiModel):
    keyword: str


class GeneratePromptRequest(ApiModel):
    slide_text: str
    image_keyword: Optional[str] = None
    scene_title: Optional[str] = None
    emotion: Optional[str] = None


class GeneratePromptResponse(ApiModel):
    prompt: str
    source: str  # "webhook" | "fallback"


# === Infographic Enricher ===

class InfographicVisualRequest(ApiModel):
    text: str
    emotion: Optional[str] = None
    context: Optional[str] = None


class InfographicVisualResponse(ApiModel):
    type: str  # "emoji" | "icon" | "svg"
    value: str
    reasoning: str = ""


class ContextSlideIn(ApiModel):
    id: str
    full_script_text: str
    emotion: Optional[str] = None
    scene_title: Optional[str] = None


class InfographicLinesRequest(ApiModel):
    current_slide: ContextSlideIn
    next_slides: List[ContextSlideIn] = []
    max_lines: int = 5


class InfographicLinesResponse(ApiModel):
    bundled_slide_ids: List[str]
    captions: List[str]
    reasoning: str = ""


# === Generation runs ===

class StartGenerationBody(ApiModel):
    """Body of POST /projects/{id}/generate; a script replaces the stored one."""
    script: Optional[str] = None
    style_directive: Optional[str] = None
    chunk_size: Optional[int] = None


class GenerationStatusResponse(BaseModel):
    project_id: str
    state: str
    progress: float
    message: str
    error: Optional[str] = None
    stats: Dict[str, Any] = {}
    history: List[str] = []
    cancel_requested: bool = False
    started_at: Optional[str] = None
    updated_at: Optional[str] = None
