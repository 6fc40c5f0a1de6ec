"""
NarrationUseCase - generate ElevenLabs audio for one slide and attach it.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ...core.exceptions import ReviewIncompleteError, SlideNotFoundError
from ...core.logging import get_logger
from ..infrastructure.storage import ProjectRepository, get_project_repository
from ..media import ElevenLabsClient
from .base import UseCase
from .project_commands import AttachAudio, get_session

logger = get_logger(__name__, component="narration")


@dataclass
class NarrationRequest:
    project_id: str
    slide_id: str
    voice_id: Optional[str] = None
    api_key: Optional[str] = None


class NarrationUseCase(UseCase[NarrationRequest, Dict[str, Any]]):
    """
    Voice settings come from the project's audio settings; a ``voice_id`` on
    the request overrides the stored voice.
    """

    def __init__(self, repository: Optional[ProjectRepository] = None,
                 tts: Optional[ElevenLabsClient] = None):
        self.repository = repository or get_project_repository()
        self.tts = tts

    async def execute(self, request: NarrationRequest) -> Dict[str, Any]:
        """
        Raises:
            ProjectNotFoundError / SlideNotFoundError: unknown target
            ReviewIncompleteError: some slide is not reviewed yet
            ValueError: no voice selected
            ProviderError: ElevenLabs failure (status preserved)
        """
        session = get_session(self.repository, request.project_id)
        project = session.project
        index = project.slide_index(request.slide_id)
        if index < 0:
            raise SlideNotFoundError(f"Slide not found: {request.slide_id}")
        if not project.all_reviewed:
            raise ReviewIncompleteError("Review every slide before generating audio")
        slide = project.slides[index]

        settings = project.settings.audio
        voice_id = request.voice_id or (settings.voice_id if settings else "")
        if not voice_id:
            raise ValueError("No voice selected for this project")

        tts = self.tts or ElevenLabsClient(api_key=request.api_key)
        speech = await tts.synthesize(
            slide.full_script_text,
            voice_id,
            stability=settings.stability if settings else None,
            similarity_boost=settings.similarity_boost if settings else None,
            speed=settings.speed if settings else None,
        )
        result = session.execute(AttachAudio(request.slide_id, speech.audio_content, speech.duration))
        updated = result.project.slides[index]
        logger.info("Slide narrated", extra={"project_id": project.id, "slide_id": request.slide_id})
        return {"slide": updated.to_dict(), "duration": speech.duration}
