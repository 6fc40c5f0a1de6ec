"""
GenerationUseCase - starts a generation run for a project.

Keeps HTTP routes thin: the run is registered synchronously (so a second
request for the same project fails immediately with InvalidTransitionError)
and the stages are scheduled as a FastAPI background task.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import BackgroundTasks

from ...core.exceptions import EmptyScriptError
from ...core.logging import get_logger
from ..infrastructure.orchestration import GenerationRegistry, get_generation_registry
from ..pipeline.orchestrator import GenerationOrchestrator, get_orchestrator
from ..pipeline.styling import normalize_chunk_size
from .base import UseCase

logger = get_logger(__name__, component="generation_use_case")


@dataclass
class StartGenerationRequest:
    project_id: str
    script: Optional[str] = None
    style_directive: Optional[str] = None
    chunk_size: Optional[int] = None


class GenerationUseCase(UseCase[StartGenerationRequest, Dict[str, Any]]):
    """Handle generation run lifecycle and background execution."""

    def __init__(
        self,
        background_tasks: Optional[BackgroundTasks] = None,
        orchestrator: Optional[GenerationOrchestrator] = None,
        registry: Optional[GenerationRegistry] = None,
    ):
        self.background_tasks = background_tasks
        self.orchestrator = orchestrator or get_orchestrator()
        self.registry = registry or get_generation_registry()

    async def execute(self, request: StartGenerationRequest) -> Dict[str, Any]:
        """
        Validate input, register the run and schedule the stages.

        Raises:
            ProjectNotFoundError: unknown project
            EmptyScriptError: no script supplied and none stored
            InvalidTransitionError: a run is already active for the project
        """
        project = self.orchestrator.repository.require(request.project_id)
        script = request.script if request.script is not None else project.original_script
        if not (script or "").strip():
            raise EmptyScriptError("Script is empty")

        chunk_size = normalize_chunk_size(request.chunk_size) if request.chunk_size is not None else None
        run = self.orchestrator.begin(request.project_id)

        if self.background_tasks is not None:
            self.background_tasks.add_task(
                self.orchestrator.execute, run, script, request.style_directive, chunk_size
            )
        else:
            await self.orchestrator.execute(run, script, request.style_directive, chunk_size)

        logger.info("Generation scheduled", extra={"project_id": request.project_id})
        return run.to_dict()

    def status(self, project_id: str) -> Dict[str, Any]:
        self.orchestrator.repository.require(project_id)
        return self.registry.status(project_id)

    def cancel(self, project_id: str) -> Dict[str, Any]:
        """Best-effort cancel; returns the (possibly unchanged) run status."""
        self.orchestrator.repository.require(project_id)
        self.registry.cancel(project_id)
        return self.registry.status(project_id)
