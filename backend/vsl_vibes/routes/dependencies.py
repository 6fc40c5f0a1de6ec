"""
FastAPI dependency providers.

Routes receive their collaborators through ``Depends`` so tests can swap
them with ``app.dependency_overrides``.
"""

from ..services.export import Exporter, RemoteSlideRenderer, get_exporter
from ..services.infrastructure.orchestration import GenerationRegistry, get_generation_registry
from ..services.infrastructure.storage import ProjectRepository, get_project_repository
from ..services.media import ImageGenerator, ImagePromptService
from ..services.pipeline import ImageKeywordGenerator, InfographicEnricher, ScriptSplitter
from ..services.pipeline.orchestrator import GenerationOrchestrator, get_orchestrator


def get_repository() -> ProjectRepository:
    return get_project_repository()


def get_registry() -> GenerationRegistry:
    return get_generation_registry()


def get_generation_orchestrator() -> GenerationOrchestrator:
    return get_orchestrator()


def get_splitter() -> ScriptSplitter:
    return get_generation_orchestrator().splitter


def get_enricher() -> InfographicEnricher:
    return get_generation_orchestrator().enricher


def get_keyword_generator() -> ImageKeywordGenerator:
    return ImageKeywordGenerator()


def get_prompt_service() -> ImagePromptService:
    return ImagePromptService()


def get_image_generator() -> ImageGenerator:
    return ImageGenerator()


def get_slide_renderer() -> RemoteSlideRenderer:
    return RemoteSlideRenderer()


def get_project_exporter() -> Exporter:
    return get_exporter()


def get_style_director():
    return get_generation_orchestrator().director
