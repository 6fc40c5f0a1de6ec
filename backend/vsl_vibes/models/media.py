"""
API schemas for media and rendering proxy endpoints

A caller-supplied ``apiKey`` always wins over the server environment.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from .generation import ApiModel


class GenerateImageRequest(ApiModel):
    prompt: str
    provider: str = "openai"  # "openai" | "gemini"
    api_key: Optional[str] = None


class PhotoSearchRequest(ApiModel):
    query: str
    per_page: Optional[int] = None
    api_key: Optional[str] = None


class PhotoOut(ApiModel):
    url: str
    thumbnail: Optional[str] = None
    photographer: Optional[str] = None
    id: Optional[str] = None
    alt: Optional[str] = None


class PhotoSearchResponse(ApiModel):
    photos: List[PhotoOut]


class ApiKeyRequest(ApiModel):
    api_key: Optional[str] = None


class TtsRequest(ApiModel):
    text: str
    voice_id: str
    api_key: Optional[str] = None
    stability: Optional[float] = None
    similarity_boost: Optional[float] = None
    speed: Optional[float] = None


class TtsResponse(ApiModel):
    audio_content: str
    duration: float


class RenderSlideRequest(ApiModel):
    slide: Dict[str, Any]


class RenderSlideResponse(ApiModel):
    image_url: str


class Json2VideoRequest(ApiModel):
    action: str  # "create" | "status"
    api_key: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    project_id: Optional[str] = Field(default=None)
