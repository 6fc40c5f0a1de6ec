"""
ExportUseCase - export a stored project as a ZIP archive or a video.
"""

from dataclasses import dataclass
from typing import Optional

from ...core.exceptions import ReviewIncompleteError
from ..export import ExportArtifact, Exporter, get_exporter
from ..infrastructure.storage import ProjectRepository, get_project_repository
from .base import UseCase
from .project_commands import get_session


@dataclass
class ExportRequest:
    project_id: str
    format: str = "zip"
    renderer: str = "local"
    video_backend: str = "json2video"


class ExportUseCase(UseCase[ExportRequest, ExportArtifact]):
    def __init__(self, repository: Optional[ProjectRepository] = None,
                 exporter: Optional[Exporter] = None):
        self.repository = repository or get_project_repository()
        self.exporter = exporter or get_exporter()

    async def execute(self, request: ExportRequest) -> ExportArtifact:
        project = get_session(self.repository, request.project_id).project
        if project.slides and not project.all_reviewed:
            raise ReviewIncompleteError("Review every slide before exporting")
        return await self.exporter.export(
            project,
            format=request.format,
            renderer=request.renderer,
            video_backend=request.video_backend,
        )
