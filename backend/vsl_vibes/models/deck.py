"""
Deck domain model

Projects, slides and their styling documents. These are the internal
representations passed through the pipeline, the command layer and the
project repository; API schemas in the sibling modules are thin pydantic
wrappers around their dict form.

A slide is persisted as an opaque JSON document (``Slide.to_dict()``) plus an
explicit ``position``.
"""

import math
import uuid
from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional


Background = Literal["white", "dark", "image", "gradient", "split"]
TextColor = Literal["white", "black", "custom"]
TextWeight = Literal["regular", "bold", "extrabold"]
DisplayMode = Literal["blurred", "crisp", "split"]
UnderlineStyle = Literal["brush-red", "brush-black", "regular", "brush-stroke-red"]
CircleStyle = Literal["red-solid", "red-dotted", "black-solid"]
Emphasis = Literal["bold", "underline", "circle", "red", "none"]
VisualType = Literal["emoji", "icon", "svg"]

TEXT_SIZES = (48, 60, 72, 84, 96, 108, 120)

GRADIENTS = {
    "blue": "linear-gradient(135deg, #2193b0 0%, #6dd5ed 100%)",
    "purple": "linear-gradient(135deg, #667eea 0%, #764ba2 100%)",
    "teal": "linear-gradient(135deg, #11998e 0%, #38ef7d 100%)",
    "orange": "linear-gradient(135deg, #f46b45 0%, #eea849 100%)",
}


def now_iso() -> str:
    return datetime.now().isoformat()


def _build(cls, data: Optional[Dict[str, Any]]):
    """Instantiate a dataclass from a dict, ignoring keys it does not declare."""
    known = cls.__dataclass_fields__
    return cls(**{k: v for k, v in (data or {}).items() if k in known})


def snap_text_size(size: Any, default: int = 72) -> int:
    """Snap an arbitrary number to the closest allowed text size."""
    try:
        value = float(size)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value):
        return default
    return min(TEXT_SIZES, key=lambda allowed: abs(allowed - value))


def text_size_for(text: str) -> int:
    """Default text size from word count; short slides get the largest type."""
    word_count = len(text.split())
    if word_count <= 6:
        return 120
    if word_count <= 10:
        return 96
    if word_count <= 15:
        return 72
    return 60


@dataclass
class TextSegment:
    text: str
    emphasis: Emphasis = "none"
    underline_style: Optional[UnderlineStyle] = None
    circle_style: Optional[CircleStyle] = None


@dataclass
class SlideStyle:
    background: Background = "white"
    text_color: TextColor = "black"
    text_size: int = 72
    text_weight: TextWeight = "bold"
    gradient: Optional[str] = None
    gradient_name: Optional[str] = None
    icon: Optional[str] = None
    split_ratio: Optional[int] = None


@dataclass
class BackgroundImage:
    url: str = ""
    opacity: int = 40
    blur: int = 8
    display_mode: DisplayMode = "blurred"
    image_position_y: Optional[int] = None


@dataclass
class HeadshotSettings:
    image_url: Optional[str] = None
    name: Optional[str] = None
    title: Optional[str] = None


@dataclass
class InfographicVisual:
    type: VisualType = "emoji"
    value: str = "💡"


@dataclass
class Slide:
    """A single slide of the deck, including its full styling document."""
    full_script_text: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    segments: List[TextSegment] = field(default_factory=list)
    style: SlideStyle = field(default_factory=SlideStyle)

    bold_words: List[str] = field(default_factory=list)
    underline_words: List[str] = field(default_factory=list)
    circle_words: List[str] = field(default_factory=list)
    red_words: List[str] = field(default_factory=list)
    underline_styles: Dict[str, str] = field(default_factory=dict)
    circle_styles: Dict[str, str] = field(default_factory=dict)

    has_background_image: bool = False
    background_image: Optional[BackgroundImage] = None

    audio_url: Optional[str] = None
    audio_duration: Optional[float] = None
    audio_generated: bool = False

    headshot: Optional[HeadshotSettings] = None

    is_infographic: bool = False
    infographic_captions: List[str] = field(default_factory=list)
    infographic_visual: Optional[InfographicVisual] = None
    absorbed_slide_ids: List[str] = field(default_factory=list)

    scene_number: Optional[int] = None
    scene_title: Optional[str] = None
    emotion: Optional[str] = None
    image_keyword: Optional[str] = None
    reviewed: bool = False

    @property
    def needs_image(self) -> bool:
        """True when the slide has a search keyword but no resolved image yet."""
        if not self.image_keyword:
            return False
        return not (self.background_image and self.background_image.url)

    def rebuild_segments(self) -> None:
        """Recompute per-word segments from the emphasis sets."""
        def normalize(word: str) -> str:
            return word.strip(".,!?;:\"'()").lower()

        bold = {normalize(w) for w in self.bold_words}
        underline = {normalize(w) for w in self.underline_words}
        circle = {normalize(w) for w in self.circle_words}
        red = {normalize(w) for w in self.red_words}
        underline_styles = {normalize(k): v for k, v in self.underline_styles.items()}
        circle_styles = {normalize(k): v for k, v in self.circle_styles.items()}

        segments = []
        for word in self.full_script_text.split():
            key = normalize(word)
            segment = TextSegment(text=word)
            if key in circle:
                segment.emphasis = "circle"
                segment.circle_style = circle_styles.get(key, "red-solid")
            elif key in underline:
                segment.emphasis = "underline"
                segment.underline_style = underline_styles.get(key, "brush-red")
            elif key in red:
                segment.emphasis = "red"
            elif key in bold:
                segment.emphasis = "bold"
            segments.append(segment)
        self.segments = segments

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Slide":
        data = dict(data)
        data.pop("position", None)
        data["segments"] = [_build(TextSegment, s) for s in data.get("segments") or []]
        data["style"] = _build(SlideStyle, data.get("style"))
        for key, nested in (
            ("background_image", BackgroundImage),
            ("headshot", HeadshotSettings),
            ("infographic_visual", InfographicVisual),
        ):
            if data.get(key) is not None:
                data[key] = _build(nested, data[key])
        return _build(cls, data)


def new_slide_from_text(
    text: str,
    image_keyword: Optional[str] = None,
    scene_number: Optional[int] = None,
    scene_title: Optional[str] = None,
    emotion: Optional[str] = None,
) -> Slide:
    """Create an unstyled slide: white background, black bold text, no emphasis."""
    slide = Slide(
        full_script_text=text,
        style=SlideStyle(background="white", text_color="black", text_size=text_size_for(text), text_weight="bold"),
        scene_number=scene_number,
        scene_title=scene_title,
        emotion=emotion,
        image_keyword=image_keyword or None,
    )
    slide.rebuild_segments()
    return slide


@dataclass
class AudioSettings:
    voice_id: str = ""
    voice_name: Optional[str] = None
    stability: float = 0.5
    similarity_boost: float = 0.75
    speed: float = 1.0


@dataclass
class ProjectSettings:
    theme: Literal["light", "dark"] = "light"
    text_size: int = 72
    text_alignment: Literal["center", "left", "right"] = "center"
    audio: Optional[AudioSettings] = None
    selected_slide_index: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ProjectSettings":
        data = dict(data or {})
        if data.get("audio") is not None:
            data["audio"] = _build(AudioSettings, data["audio"])
        return _build(cls, data)


@dataclass
class Project:
    """A project with its ordered slide list.

    Slide order is the list order; positions are derived on serialization
    so they are always contiguous and unique.
    """
    owner: str
    name: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    original_script: str = ""
    settings: ProjectSettings = field(default_factory=ProjectSettings)
    slides: List[Slide] = field(default_factory=list)
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    def touch(self) -> "Project":
        return replace(self, updated_at=now_iso())

    def slide_index(self, slide_id: str) -> int:
        for index, slide in enumerate(self.slides):
            if slide.id == slide_id:
                return index
        return -1

    @property
    def all_reviewed(self) -> bool:
        return bool(self.slides) and all(slide.reviewed for slide in self.slides)

    def to_dict(self, include_slides: bool = True) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "owner": self.owner,
            "name": self.name,
            "original_script": self.original_script,
            "settings": asdict(self.settings),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_slides:
            data["slides"] = [
                {"position": position, **slide.to_dict()}
                for position, slide in enumerate(self.slides)
            ]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        rows = sorted(data.get("slides") or [], key=lambda row: row.get("position", 0))
        return cls(
            id=data["id"],
            owner=data.get("owner", ""),
            name=data.get("name", "Untitled"),
            original_script=data.get("original_script") or "",
            settings=ProjectSettings.from_dict(data.get("settings")),
            slides=[Slide.from_dict(row) for row in rows],
            created_at=data.get("created_at", now_iso()),
            updated_at=data.get("updated_at", now_iso()),
        )


@dataclass
class SceneSlide:
    full_script_text: str
    has_image: bool = False
    image_keyword: Optional[str] = None


@dataclass
class Scene:
    """Narrative beat produced by the Script Splitter (never persisted)."""
    scene_number: int
    title: str
    emotion: str
    slides: List[SceneSlide] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
