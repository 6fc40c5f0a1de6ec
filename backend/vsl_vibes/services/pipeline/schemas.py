"""
Pipeline Response Schemas

Validating models for the JSON returned by each LLM stage. Models answer
in camelCase; fields are exposed in snake_case and dumped back to camelCase
with ``by_alias=True``. Out-of-range values are clamped or snapped rather
than rejected, so only structurally broken payloads fail validation.
"""

import math
from typing import Any, List, Literal, Optional, Type, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...core.exceptions import MalformedResponseError
from ...models.deck import GRADIENTS, snap_text_size

Preset = Literal[
    "black-background",
    "white-background",
    "headshot-bio",
    "image-backdrop",
    "image-text",
    "infographic",
]
PRESETS = (
    "black-background",
    "white-background",
    "headshot-bio",
    "image-backdrop",
    "image-text",
    "infographic",
)
DEFAULT_PRESET = "white-background"

M = TypeVar("M", bound=BaseModel)


class StageModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _clamp(value: Any, low: int, high: int) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return max(low, min(high, int(round(number))))


def _one_of(value: Any, allowed) -> Optional[str]:
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    return None


def _word_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(word).strip() for word in value if str(word).strip()]


# =============================================================================
# SCRIPT SPLITTER
# =============================================================================

class SplitSlidePayload(StageModel):
    full_script_text: str = Field(alias="fullScriptText")
    has_image: bool = Field(default=False, alias="hasImage")
    image_keyword: Optional[str] = Field(default=None, alias="imageKeyword")

    @field_validator("full_script_text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("slide text is empty")
        return value

    @field_validator("image_keyword", mode="before")
    @classmethod
    def _clean_keyword(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return None
        return value.strip().strip("\"'") or None


class ScenePayload(StageModel):
    scene_number: int = Field(default=0, alias="sceneNumber")
    title: str = ""
    emotion: str = "neutral"
    slides: List[SplitSlidePayload] = Field(default_factory=list)

    @field_validator("emotion", mode="before")
    @classmethod
    def _default_emotion(cls, value: Any) -> str:
        return value if isinstance(value, str) and value.strip() else "neutral"


# =============================================================================
# STYLE DIRECTOR
# =============================================================================

class StyleDecision(StageModel):
    slide_id: str = Field(alias="slideId")
    preset: Preset = DEFAULT_PRESET
    display_mode: Optional[Literal["blurred", "crisp", "split"]] = Field(default=None, alias="displayMode")
    crispness: Optional[int] = Field(default=None, validation_alias=AliasChoices("crispness", "opacity"))
    text_color: Optional[Literal["white", "black"]] = Field(default=None, alias="textColor")
    bold_words: List[str] = Field(default_factory=list, alias="boldWords")
    underline_words: List[str] = Field(default_factory=list, alias="underlineWords")
    circle_words: List[str] = Field(default_factory=list, alias="circleWords")
    red_words: List[str] = Field(default_factory=list, alias="redWords")
    underline_style: Optional[Literal["brush-red", "brush-black", "regular", "brush-stroke-red"]] = Field(
        default=None, alias="underlineStyle"
    )
    circle_style: Optional[Literal["red-solid", "red-dotted", "black-solid"]] = Field(
        default=None, alias="circleStyle"
    )
    is_infographic: bool = Field(default=False, alias="isInfographic")
    infographic_absorb_count: int = Field(default=0, alias="infographicAbsorbCount")
    gradient_name: Optional[Literal["blue", "purple", "teal", "orange"]] = Field(default=None, alias="gradientName")
    is_headshot: bool = Field(default=False, alias="isHeadshot")
    image_keyword: Optional[str] = Field(default=None, alias="imageKeyword")
    text_size: Optional[int] = Field(default=None, alias="textSize")
    split_ratio: Optional[int] = Field(default=None, alias="splitRatio")
    blur: Optional[int] = None

    @field_validator("slide_id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> str:
        return str(value)

    @field_validator("preset", mode="before")
    @classmethod
    def _known_preset(cls, value: Any) -> str:
        return _one_of(value, PRESETS) or DEFAULT_PRESET

    @field_validator("display_mode", mode="before")
    @classmethod
    def _known_display_mode(cls, value: Any) -> Optional[str]:
        return _one_of(value, ("blurred", "crisp", "split"))

    @field_validator("text_color", mode="before")
    @classmethod
    def _known_text_color(cls, value: Any) -> Optional[str]:
        return _one_of(value, ("white", "black"))

    @field_validator("underline_style", mode="before")
    @classmethod
    def _known_underline_style(cls, value: Any) -> Optional[str]:
        return _one_of(value, ("brush-red", "brush-black", "regular", "brush-stroke-red"))

    @field_validator("circle_style", mode="before")
    @classmethod
    def _known_circle_style(cls, value: Any) -> Optional[str]:
        return _one_of(value, ("red-solid", "red-dotted", "black-solid"))

    @field_validator("gradient_name", mode="before")
    @classmethod
    def _known_gradient(cls, value: Any) -> Optional[str]:
        return _one_of(value, tuple(GRADIENTS))

    @field_validator("bold_words", "underline_words", "circle_words", "red_words", mode="before")
    @classmethod
    def _words(cls, value: Any) -> List[str]:
        return _word_list(value)

    @field_validator("crispness", mode="before")
    @classmethod
    def _clamp_crispness(cls, value: Any) -> Optional[int]:
        return _clamp(value, 0, 100)

    @field_validator("infographic_absorb_count", mode="before")
    @classmethod
    def _clamp_absorb(cls, value: Any) -> int:
        return _clamp(value, 0, 4) or 0

    @field_validator("split_ratio", mode="before")
    @classmethod
    def _clamp_split(cls, value: Any) -> Optional[int]:
        return _clamp(value, 50, 70)

    @field_validator("blur", mode="before")
    @classmethod
    def _clamp_blur(cls, value: Any) -> Optional[int]:
        return _clamp(value, 0, 20)

    @field_validator("text_size", mode="before")
    @classmethod
    def _snap_size(cls, value: Any) -> Optional[int]:
        if value is None or value == "":
            return None
        return snap_text_size(value)

    @field_validator("is_infographic", "is_headshot", mode="before")
    @classmethod
    def _bool(cls, value: Any) -> bool:
        return bool(value) and value not in ("false", "False", "0")

    @field_validator("image_keyword", mode="before")
    @classmethod
    def _clean_keyword(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return None
        return value.strip().strip("\"'") or None


def default_decision(slide_id: str) -> StyleDecision:
    """The decision applied when the Style Director cannot style a slide."""
    return StyleDecision(slide_id=slide_id, preset=DEFAULT_PRESET, text_color="black")


# =============================================================================
# INFOGRAPHIC ENRICHER
# =============================================================================

class InfographicVisualPayload(StageModel):
    type: Literal["emoji", "icon", "svg"]
    value: str
    reasoning: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def _lower_type(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("value")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("visual value is empty")
        return value


class InfographicLinesPayload(StageModel):
    bundled_slide_ids: List[str] = Field(alias="bundledSlideIds")
    captions: List[str] = Field(default_factory=list)
    reasoning: str = ""

    @field_validator("bundled_slide_ids", mode="before")
    @classmethod
    def _ids(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            raise ValueError("bundledSlideIds must be a list")
        return [str(item) for item in value]

    @field_validator("captions", mode="before")
    @classmethod
    def _captions(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [str(item).strip() for item in value]


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

def validate_payload(model: Type[M], payload: Any) -> M:
    """Validate one JSON object, raising MalformedResponseError on failure."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise MalformedResponseError(f"{model.__name__} validation failed: {e.error_count()} error(s)") from e


def validate_list(model: Type[M], payload: Any, skip_invalid: bool = False) -> List[M]:
    """Validate a JSON array of objects.

    With ``skip_invalid`` individual broken items are dropped instead of
    failing the whole payload.
    """
    if not isinstance(payload, list):
        raise MalformedResponseError(f"Expected a JSON array of {model.__name__}")
    items: List[M] = []
    for item in payload:
        try:
            items.append(model.model_validate(item))
        except ValidationError as e:
            if not skip_invalid:
                raise MalformedResponseError(
                    f"{model.__name__} validation failed: {e.error_count()} error(s)"
                ) from e
    return items
