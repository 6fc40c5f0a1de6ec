"""
API schemas for the project document store

Slide documents are accepted in either camelCase or snake_case and are
stored and returned in snake_case (the ``Slide.to_dict()`` form).
"""

import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from .generation import ApiModel

# Values of these keys are word -> style maps; their keys are slide words
_WORD_MAPS = {"underline_styles", "circle_styles"}
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake_key(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def normalize_document(value: Any) -> Any:
    """Recursively convert camelCase keys of a slide/settings document."""
    if isinstance(value, list):
        return [normalize_document(item) for item in value]
    if not isinstance(value, dict):
        return value
    normalized = {}
    for key, item in value.items():
        snake = to_snake_key(key)
        normalized[snake] = dict(item) if snake in _WORD_MAPS and isinstance(item, dict) else normalize_document(item)
    return normalized


class CreateProjectRequest(ApiModel):
    name: str = Field(default="Untitled", min_length=1, max_length=200)
    owner: str = "local"
    original_script: str = ""


class UpdateProjectRequest(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    original_script: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None


class ReplaceSlidesRequest(ApiModel):
    slides: List[Dict[str, Any]]


class NarrateSlideRequest(ApiModel):
    voice_id: Optional[str] = None
    api_key: Optional[str] = None


class ExportProjectRequest(ApiModel):
    format: Literal["zip", "video"] = "zip"
    renderer: Literal["local", "remote"] = "local"
    video_backend: Literal["json2video", "ffmpeg"] = "json2video"


class ProjectSummary(ApiModel):
    id: str
    owner: str
    name: str
    created_at: str
    updated_at: str
