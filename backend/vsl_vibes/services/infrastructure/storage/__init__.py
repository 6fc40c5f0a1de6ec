"""Storage layer - data persistence."""

from .export_cleanup import ExportCleanupService
from .project_repository import (
    ProjectRepository,
    FileProjectRepository,
    get_project_repository,
    set_project_repository,
)

__all__ = [
    "ExportCleanupService",
    "ProjectRepository",
    "FileProjectRepository",
    "get_project_repository",
    "set_project_repository",
]
