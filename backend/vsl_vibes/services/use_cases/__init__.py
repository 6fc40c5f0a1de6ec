"""
Use Cases package - Application layer.

Modules:
- base: Base use case abstract class
- project_commands: Project mutations as commands with rollback
- generation_use_case: Start, inspect and cancel generation runs
- narration_use_case: Narrate a single slide
- export_use_case: Export a project

Only the command layer is re-exported here: the pipeline orchestrator
depends on it, and the use case modules depend on the pipeline. Import
use cases from their modules.
"""

from .base import UseCase
from .project_commands import (
    AttachAudio,
    CommandResult,
    MarkAllReviewed,
    ProjectSession,
    RenameProject,
    ReplaceSlides,
    UpdateScript,
    UpdateSettings,
    UpdateSlide,
    apply_command,
    clear_sessions,
    drop_session,
    get_session,
    rollback,
)

__all__ = [
    "UseCase",
    "AttachAudio",
    "CommandResult",
    "MarkAllReviewed",
    "ProjectSession",
    "RenameProject",
    "ReplaceSlides",
    "UpdateScript",
    "UpdateSettings",
    "UpdateSlide",
    "apply_command",
    "clear_sessions",
    "drop_session",
    "get_session",
    "rollback",
]
