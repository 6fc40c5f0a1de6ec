"""
Project document store, generation runs, narration and export.

Every mutation goes through the project's command session so the in-memory
project and the stored document never diverge.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Query
from fastapi.responses import FileResponse

from ..core.logging import get_logger
from ..models import (
    CreateProjectRequest,
    ExportProjectRequest,
    GenerationStatusResponse,
    NarrateSlideRequest,
    Project,
    ProjectSummary,
    ReplaceSlidesRequest,
    Slide,
    StartGenerationBody,
    UpdateProjectRequest,
    normalize_document,
)
from ..services.export import Exporter
from ..services.infrastructure.orchestration import GenerationRegistry
from ..services.infrastructure.storage import ProjectRepository
from ..services.pipeline.orchestrator import GenerationOrchestrator
from ..services.use_cases import (
    MarkAllReviewed,
    RenameProject,
    ReplaceSlides,
    UpdateScript,
    UpdateSettings,
    UpdateSlide,
    drop_session,
    get_session,
)
from ..services.use_cases.export_use_case import ExportRequest, ExportUseCase
from ..services.use_cases.generation_use_case import GenerationUseCase, StartGenerationRequest
from ..services.use_cases.narration_use_case import NarrationRequest, NarrationUseCase
from .dependencies import get_generation_orchestrator, get_project_exporter, get_registry, get_repository
from .errors import HANDLED_ERRORS, http_error

logger = get_logger(__name__, component="routes")

router = APIRouter(prefix="/projects", tags=["projects"])


def _slides_from_documents(documents: List[Dict[str, Any]]) -> List[Slide]:
    try:
        return [Slide.from_dict(normalize_document(document)) for document in documents]
    except (TypeError, KeyError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid slide data: {e}")


@router.post("", status_code=201)
async def create_project(request: CreateProjectRequest,
                         repository: ProjectRepository = Depends(get_repository)) -> Dict[str, Any]:
    project = Project(owner=request.owner, name=request.name.strip(), original_script=request.original_script)
    repository.save(project)
    logger.info("Project created", extra={"project_id": project.id})
    return project.to_dict()


@router.get("", response_model=List[ProjectSummary])
async def list_projects(owner: str = Query(default="local"),
                        repository: ProjectRepository = Depends(get_repository)):
    """Owner's projects, most recently updated first"""
    return [ProjectSummary.model_validate(p.to_dict(include_slides=False)) for p in repository.list_for_owner(owner)]


@router.get("/{project_id}")
async def get_project(project_id: str, repository: ProjectRepository = Depends(get_repository)) -> Dict[str, Any]:
    try:
        return get_session(repository, project_id).project.to_dict()
    except HANDLED_ERRORS as e:
        raise http_error(e)


@router.patch("/{project_id}")
async def update_project(project_id: str, request: UpdateProjectRequest,
                         repository: ProjectRepository = Depends(get_repository)) -> Dict[str, Any]:
    """Rename, replace the script, or merge settings"""
    try:
        session = get_session(repository, project_id)
        if request.name is not None:
            session.execute(RenameProject(request.name))
        if request.original_script is not None:
            session.execute(UpdateScript(request.original_script))
        if request.settings is not None:
            session.execute(UpdateSettings(normalize_document(request.settings)))
        return session.project.to_dict()
    except HANDLED_ERRORS as e:
        raise http_error(e)


@router.delete("/{project_id}")
async def delete_project(project_id: str,
                         repository: ProjectRepository = Depends(get_repository),
                         registry: GenerationRegistry = Depends(get_registry)) -> Dict[str, str]:
    registry.cancel(project_id)
    if not repository.delete(project_id):
        raise HTTPException(status_code=404, detail=f"Project not found: {project_id}")
    drop_session(project_id)
    registry.forget(project_id)
    logger.info("Project deleted", extra={"project_id": project_id})
    return {"message": "Project deleted", "project_id": project_id}


@router.put("/{project_id}/slides")
async def replace_slides(project_id: str, request: ReplaceSlidesRequest,
                         repository: ProjectRepository = Depends(get_repository)) -> Dict[str, Any]:
    """Bulk save: the given order becomes the slide order"""
    slides = _slides_from_documents(request.slides)
    try:
        session = get_session(repository, project_id)
        session.execute(ReplaceSlides(slides=slides))
        return session.project.to_dict()
    except HANDLED_ERRORS as e:
        raise http_error(e)


@router.patch("/{project_id}/slides/{slide_id}")
async def update_slide(project_id: str, slide_id: str, changes: Dict[str, Any] = Body(...),
                       repository: ProjectRepository = Depends(get_repository)) -> Dict[str, Any]:
    """Merge a partial slide document into one slide"""
    try:
        result = get_session(repository, project_id).execute(UpdateSlide(slide_id, normalize_document(changes)))
    except (TypeError, KeyError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid slide data: {e}")
    except HANDLED_ERRORS as e:
        raise http_error(e)
    project = result.project
    return project.slides[project.slide_index(slide_id)].to_dict()


@router.post("/{project_id}/slides/{slide_id}/audio")
async def narrate_slide(project_id: str, slide_id: str,
                        request: Optional[NarrateSlideRequest] = None,
                        repository: ProjectRepository = Depends(get_repository)) -> Dict[str, Any]:
    """Generate ElevenLabs narration for one slide and attach it"""
    request = request or NarrateSlideRequest()
    use_case = NarrationUseCase(repository=repository)
    try:
        return await use_case.execute(NarrationRequest(
            project_id=project_id,
            slide_id=slide_id,
            voice_id=request.voice_id,
            api_key=request.api_key,
        ))
    except HANDLED_ERRORS as e:
        raise http_error(e)


@router.post("/{project_id}/review")
async def mark_reviewed(project_id: str, repository: ProjectRepository = Depends(get_repository)) -> Dict[str, Any]:
    try:
        session = get_session(repository, project_id)
        session.execute(MarkAllReviewed())
        return {"project_id": project_id, "all_reviewed": session.project.all_reviewed}
    except HANDLED_ERRORS as e:
        raise http_error(e)


@router.post("/{project_id}/generate", response_model=GenerationStatusResponse, status_code=202)
async def start_generation(project_id: str, background_tasks: BackgroundTasks,
                           request: Optional[StartGenerationBody] = None,
                           orchestrator: GenerationOrchestrator = Depends(get_generation_orchestrator)):
    """Run split, style, images and infographics in the background"""
    request = request or StartGenerationBody()
    use_case = GenerationUseCase(background_tasks=background_tasks, orchestrator=orchestrator,
                                 registry=orchestrator.registry)
    try:
        return await use_case.execute(StartGenerationRequest(
            project_id=project_id,
            script=request.script,
            style_directive=request.style_directive,
            chunk_size=request.chunk_size,
        ))
    except HANDLED_ERRORS as e:
        raise http_error(e)


@router.get("/{project_id}/generation", response_model=GenerationStatusResponse)
async def generation_status(project_id: str,
                            orchestrator: GenerationOrchestrator = Depends(get_generation_orchestrator)):
    use_case = GenerationUseCase(orchestrator=orchestrator, registry=orchestrator.registry)
    try:
        return use_case.status(project_id)
    except HANDLED_ERRORS as e:
        raise http_error(e)


@router.post("/{project_id}/generation/cancel", response_model=GenerationStatusResponse)
async def cancel_generation(project_id: str,
                            orchestrator: GenerationOrchestrator = Depends(get_generation_orchestrator)):
    """Best-effort cancel; slides checkpointed so far are kept"""
    use_case = GenerationUseCase(orchestrator=orchestrator, registry=orchestrator.registry)
    try:
        return use_case.cancel(project_id)
    except HANDLED_ERRORS as e:
        raise http_error(e)


@router.post("/{project_id}/export")
async def export_project(project_id: str,
                         request: Optional[ExportProjectRequest] = None,
                         repository: ProjectRepository = Depends(get_repository),
                         exporter: Exporter = Depends(get_project_exporter)):
    """ZIP of slide PNG/MP3 files, a local MP4, or a hosted json2video URL"""
    request = request or ExportProjectRequest()
    use_case = ExportUseCase(repository=repository, exporter=exporter)
    try:
        artifact = await use_case.execute(ExportRequest(
            project_id=project_id,
            format=request.format,
            renderer=request.renderer,
            video_backend=request.video_backend,
        ))
    except HANDLED_ERRORS as e:
        raise http_error(e)

    if artifact.path is not None:
        return FileResponse(str(artifact.path), media_type=artifact.media_type, filename=artifact.filename)
    return artifact.to_dict()
