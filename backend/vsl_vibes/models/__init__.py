"""
Pydantic models for API request/response schemas

The deck domain model (projects, slides, styles) lives in ``deck``;
generation run states live in ``status``.
"""

from .deck import Project, ProjectSettings, Scene, SceneSlide, Slide, SlideStyle, new_slide_from_text
from .generation import (
    ApiModel,
    ContextSlideIn,
    GeneratePromptRequest,
    GeneratePromptResponse,
    GenerationStatusResponse,
    ImageKeywordRequest,
    ImageKeywordResponse,
    InfographicLinesRequest,
    InfographicLinesResponse,
    InfographicVisualRequest,
    InfographicVisualResponse,
    SplitScriptRequest,
    SplitScriptResponse,
    StartGenerationBody,
    StyleSlideIn,
    StyleSlidesRequest,
    StyleSlidesResponse,
)
from .media import (
    ApiKeyRequest,
    GenerateImageRequest,
    Json2VideoRequest,
    PhotoSearchRequest,
    PhotoSearchResponse,
    RenderSlideRequest,
    RenderSlideResponse,
    TtsRequest,
    TtsResponse,
)
from .projects import (
    CreateProjectRequest,
    ExportProjectRequest,
    NarrateSlideRequest,
    ProjectSummary,
    ReplaceSlidesRequest,
    UpdateProjectRequest,
    normalize_document,
)
from .status import GenerationState

__all__ = [
    "Project",
    "ProjectSettings",
    "Scene",
    "SceneSlide",
    "Slide",
    "SlideStyle",
    "new_slide_from_text",
    "ApiModel",
    "ContextSlideIn",
    "GeneratePromptRequest",
    "GeneratePromptResponse",
    "GenerationStatusResponse",
    "ImageKeywordRequest",
    "ImageKeywordResponse",
    "InfographicLinesRequest",
    "InfographicLinesResponse",
    "InfographicVisualRequest",
    "InfographicVisualResponse",
    "SplitScriptRequest",
    "SplitScriptResponse",
    "StartGenerationBody",
    "StyleSlideIn",
    "StyleSlidesRequest",
    "StyleSlidesResponse",
    "ApiKeyRequest",
    "GenerateImageRequest",
    "Json2VideoRequest",
    "PhotoSearchRequest",
    "PhotoSearchResponse",
    "RenderSlideRequest",
    "RenderSlideResponse",
    "TtsRequest",
    "TtsResponse",
    "CreateProjectRequest",
    "ExportProjectRequest",
    "NarrateSlideRequest",
    "ProjectSummary",
    "ReplaceSlidesRequest",
    "UpdateProjectRequest",
    "normalize_document",
    "GenerationState",
]
