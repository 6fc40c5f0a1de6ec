"""
Generation Orchestrator

Runs stages 1-4 for one project and checkpoints the slide set after each:

    splitting -> styling -> resolving-images -> enriching -> done

Stage-local failures are absorbed by each stage's fallback, so a run only
ends in ``error`` for failures outside the stages (empty script, storage).
Cancellation is checked between stages, batches and lookups; slides
checkpointed before the cancel are kept.
"""

from typing import List, Optional

from ...core.exceptions import EmptyScriptError, GenerationCancelled, VslVibesError
from ...core.logging import get_logger, set_project_id, set_stage
from ...models.deck import Slide
from ...models.status import GenerationState
from ..infrastructure.orchestration import GenerationRegistry, GenerationRun, get_generation_registry
from ..infrastructure.storage import ProjectRepository, get_project_repository
from ..use_cases.project_commands import ProjectSession, ReplaceSlides, UpdateScript, get_session
from .concurrency import CancellationToken
from .images import ImageResolver
from .infographic import InfographicEnricher
from .splitter import ScriptSplitter, flatten_scenes
from .styling import StyleDirector

logger = get_logger(__name__, component="orchestrator")


class GenerationOrchestrator:
    """
    Drives a full generation run for a project.

    Usage:
        orchestrator = GenerationOrchestrator()
        run = orchestrator.begin(project_id)
        await orchestrator.execute(run, style_directive="bold and punchy")
    """

    def __init__(
        self,
        repository: Optional[ProjectRepository] = None,
        registry: Optional[GenerationRegistry] = None,
        splitter: Optional[ScriptSplitter] = None,
        director: Optional[StyleDirector] = None,
        resolver: Optional[ImageResolver] = None,
        enricher: Optional[InfographicEnricher] = None,
    ):
        self.repository = repository or get_project_repository()
        self.registry = registry or get_generation_registry()
        self._splitter = splitter
        self._director = director
        self._resolver = resolver
        self._enricher = enricher

    # Stages are built lazily so constructing the orchestrator never needs credentials
    @property
    def splitter(self) -> ScriptSplitter:
        if self._splitter is None:
            self._splitter = ScriptSplitter()
        return self._splitter

    @property
    def director(self) -> StyleDirector:
        if self._director is None:
            self._director = StyleDirector()
        return self._director

    @property
    def resolver(self) -> ImageResolver:
        if self._resolver is None:
            self._resolver = ImageResolver()
        return self._resolver

    @property
    def enricher(self) -> InfographicEnricher:
        if self._enricher is None:
            self._enricher = InfographicEnricher()
        return self._enricher

    def begin(self, project_id: str) -> GenerationRun:
        """
        Register a new run in ``splitting`` state.

        Raises:
            ProjectNotFoundError: if the project does not exist
            InvalidTransitionError: if a run for the project is already active
        """
        self.repository.require(project_id)
        return self.registry.start(project_id)

    async def run(
        self,
        project_id: str,
        script: Optional[str] = None,
        style_directive: Optional[str] = None,
        chunk_size: Optional[int] = None,
    ) -> GenerationRun:
        """Begin and execute a run in one call."""
        run = self.begin(project_id)
        return await self.execute(run, script, style_directive, chunk_size)

    async def execute(
        self,
        run: GenerationRun,
        script: Optional[str] = None,
        style_directive: Optional[str] = None,
        chunk_size: Optional[int] = None,
    ) -> GenerationRun:
        """Execute a run started with ``begin``; failures end the run in ``error`` instead of raising."""
        token = run.cancel_token
        set_project_id(run.project_id)
        try:
            session = get_session(self.repository, run.project_id)
            if script is not None and script != session.project.original_script:
                session.execute(UpdateScript(script))
            script = session.project.original_script

            logger.info("Generation run started", extra={"script_chars": len(script or "")})
            await self._run_stages(run, session, script, style_directive, chunk_size, token)
            logger.info("Generation run finished", extra=run.stats)

        except GenerationCancelled:
            run.advance(GenerationState.CANCELLED, "Generation cancelled")
        except EmptyScriptError as e:
            run.fail(str(e))
        except (VslVibesError, OSError) as e:
            logger.error("Generation run failed", extra={"error": str(e)}, exc_info=True)
            run.fail(str(e))
        except Exception as e:
            logger.error("Unexpected error during generation run", extra={"error": str(e)}, exc_info=True)
            run.fail(str(e) or e.__class__.__name__)
        finally:
            set_stage(None)
            set_project_id(None)
        return run

    async def _run_stages(
        self,
        run: GenerationRun,
        session: ProjectSession,
        script: str,
        style_directive: Optional[str],
        chunk_size: Optional[int],
        token: CancellationToken,
    ) -> None:
        set_stage(GenerationState.SPLITTING.value)
        split = await self.splitter.split(script, token)
        slides = flatten_scenes(split.scenes)
        run.stats["split"] = {**split.stats, "scenes": len(split.scenes),
                              "fallback_batches": len(split.fallback_batches)}
        self._checkpoint(session, slides)

        self._advance(run, token, GenerationState.STYLING, "Designing slide styles")
        director = self.director
        if chunk_size is not None and chunk_size != director.chunk_size:
            director = StyleDirector(engine=director.engine, chunk_size=chunk_size,
                                     concurrency=director.concurrency)
        slides = await director.style(slides, style_directive, token)
        self._checkpoint(session, slides)

        self._advance(run, token, GenerationState.RESOLVING_IMAGES, "Finding images")
        resolved = await self.resolver.resolve(slides, token)
        run.stats["images"] = resolved.to_dict()
        slides = resolved.slides
        self._checkpoint(session, slides)

        self._advance(run, token, GenerationState.ENRICHING, "Building infographics")
        enriched = await self.enricher.enrich(slides, token)
        run.stats["infographics"] = enriched.to_dict()
        self._checkpoint(session, enriched.slides)

        self._advance(run, token, GenerationState.DONE, "Slides ready for review")
        run.stats["total_slides"] = len(enriched.slides)

    @staticmethod
    def _advance(run: GenerationRun, token: CancellationToken, target: GenerationState, message: str) -> None:
        token.raise_if_cancelled()
        run.advance(target, message)
        set_stage(target.value)

    @staticmethod
    def _checkpoint(session: ProjectSession, slides: List[Slide]) -> None:
        session.execute(ReplaceSlides(slides=slides))
        logger.debug("Checkpoint saved", extra={"slides": len(slides)})


_orchestrator_instance: Optional[GenerationOrchestrator] = None


def get_orchestrator() -> GenerationOrchestrator:
    global _orchestrator_instance
    if _orchestrator_instance is None:
        _orchestrator_instance = GenerationOrchestrator()
    return _orchestrator_instance


def set_orchestrator(orchestrator: Optional[GenerationOrchestrator]) -> None:
    global _orchestrator_instance
    _orchestrator_instance = orchestrator
