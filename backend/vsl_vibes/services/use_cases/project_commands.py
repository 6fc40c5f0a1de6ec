"""
Project mutations as commands.

Every change to a project (user edits, audio attachment, pipeline
checkpoints) is expressed as a command object. ``apply_command`` is pure:
it never mutates its input and returns a ``CommandResult`` carrying both the
new and the previous project, so ``rollback`` is simply "use the previous
one". ``ProjectSession`` owns the authoritative in-memory project, persists
each result and rolls back when persistence fails.
"""

import copy
from dataclasses import asdict, dataclass, field
from threading import RLock
from typing import Any, Dict, List, Union

from ...core.exceptions import SlideNotFoundError
from ...core.logging import get_logger
from ...models.deck import (
    AudioSettings,
    Project,
    ProjectSettings,
    Slide,
    now_iso,
    snap_text_size,
)
from ..infrastructure.storage.project_repository import ProjectRepository

logger = get_logger(__name__, component="commands")

# Slide fields whose change invalidates the per-word segments
_SEGMENT_SOURCES = {
    "full_script_text",
    "bold_words",
    "underline_words",
    "circle_words",
    "red_words",
    "underline_styles",
    "circle_styles",
}


@dataclass(frozen=True)
class UpdateSlide:
    """Merge a partial slide document into one slide."""
    slide_id: str
    changes: Dict[str, Any]


@dataclass(frozen=True)
class ReplaceSlides:
    """Replace the whole ordered slide list (bulk save, pipeline checkpoint)."""
    slides: List[Slide]


@dataclass(frozen=True)
class RenameProject:
    name: str


@dataclass(frozen=True)
class UpdateSettings:
    changes: Dict[str, Any]


@dataclass(frozen=True)
class UpdateScript:
    script: str


@dataclass(frozen=True)
class MarkAllReviewed:
    pass


@dataclass(frozen=True)
class AttachAudio:
    slide_id: str
    audio_url: str
    duration: float


Command = Union[
    UpdateSlide,
    ReplaceSlides,
    RenameProject,
    UpdateSettings,
    UpdateScript,
    MarkAllReviewed,
    AttachAudio,
]


@dataclass(frozen=True)
class CommandResult:
    project: Project
    previous: Project
    command: Any = field(default=None, compare=False)


def _merge_slide(slide: Slide, changes: Dict[str, Any]) -> Slide:
    data = slide.to_dict()
    for key, value in changes.items():
        if key in ("id", "position"):
            continue
        if key == "style" and isinstance(value, dict):
            data["style"] = {**data["style"], **value}
        elif key == "background_image" and isinstance(value, dict) and data.get("background_image"):
            data["background_image"] = {**data["background_image"], **value}
        else:
            data[key] = value
    if "text_size" in data["style"]:
        data["style"]["text_size"] = snap_text_size(data["style"]["text_size"])
    merged = Slide.from_dict(data)
    if _SEGMENT_SOURCES.intersection(changes) and "segments" not in changes:
        merged.rebuild_segments()
    return merged


def _find_slide(project: Project, slide_id: str) -> int:
    index = project.slide_index(slide_id)
    if index < 0:
        raise SlideNotFoundError(f"Slide not found: {slide_id}")
    return index


def apply_command(project: Project, command: Command) -> CommandResult:
    """
    Apply a command to a copy of the project.

    Raises:
        SlideNotFoundError: if the command targets a slide that does not exist
        TypeError: for an unknown command type
    """
    previous = copy.deepcopy(project)
    updated = copy.deepcopy(project)

    if isinstance(command, UpdateSlide):
        index = _find_slide(updated, command.slide_id)
        updated.slides[index] = _merge_slide(updated.slides[index], command.changes)

    elif isinstance(command, ReplaceSlides):
        updated.slides = copy.deepcopy(list(command.slides))

    elif isinstance(command, RenameProject):
        updated.name = command.name.strip() or updated.name

    elif isinstance(command, UpdateSettings):
        settings = updated.settings
        merged = {
            "theme": settings.theme,
            "text_size": settings.text_size,
            "text_alignment": settings.text_alignment,
            "audio": asdict(settings.audio) if settings.audio else None,
            "selected_slide_index": settings.selected_slide_index,
        }
        for key, value in command.changes.items():
            if key == "audio" and isinstance(value, dict):
                merged["audio"] = {**(merged["audio"] or asdict(AudioSettings())), **value}
            else:
                merged[key] = value
        updated.settings = ProjectSettings.from_dict(merged)

    elif isinstance(command, UpdateScript):
        updated.original_script = command.script

    elif isinstance(command, MarkAllReviewed):
        for slide in updated.slides:
            slide.reviewed = True

    elif isinstance(command, AttachAudio):
        slide = updated.slides[_find_slide(updated, command.slide_id)]
        slide.audio_url = command.audio_url
        slide.audio_duration = command.duration
        slide.audio_generated = True

    else:
        raise TypeError(f"Unknown command: {type(command).__name__}")

    updated.updated_at = now_iso()
    return CommandResult(project=updated, previous=previous, command=command)


def rollback(result: CommandResult) -> Project:
    """Undo a command result: the previous project, untouched."""
    return copy.deepcopy(result.previous)


class ProjectSession:
    """Authoritative in-memory project bound to a repository."""

    def __init__(self, repository: ProjectRepository, project: Project):
        self.repository = repository
        self.project = project
        self._lock = RLock()

    @classmethod
    def load(cls, repository: ProjectRepository, project_id: str) -> "ProjectSession":
        return cls(repository, repository.require(project_id))

    def execute(self, command: Command) -> CommandResult:
        """Apply a command and persist it; restore the previous state if saving fails."""
        with self._lock:
            result = apply_command(self.project, command)
            self.project = result.project
            try:
                self.repository.save(result.project)
            except OSError as e:
                self.project = rollback(result)
                logger.error("Persisting command failed, rolled back", extra={
                    "project_id": self.project.id,
                    "command": type(command).__name__,
                    "error": str(e),
                })
                raise
            return result


_sessions: Dict[str, ProjectSession] = {}
_sessions_lock = RLock()


def get_session(repository: ProjectRepository, project_id: str) -> ProjectSession:
    """Return the live session for a project, loading it on first use."""
    with _sessions_lock:
        session = _sessions.get(project_id)
        if session is None or session.repository is not repository:
            session = ProjectSession.load(repository, project_id)
            _sessions[project_id] = session
        return session


def drop_session(project_id: str) -> None:
    with _sessions_lock:
        _sessions.pop(project_id, None)


def clear_sessions() -> None:
    with _sessions_lock:
        _sessions.clear()
