"""
Deck exporter.

    zip    slide_001.png (+ slide_001.mp3 when narrated), ...
    video  json2video (hosted slide images, remote renderer required)
           or ffmpeg (local MP4 from rendered slides and narration)

Any failure aborts the whole export and is raised as ExportError carrying
the raw reason.
"""

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Literal, Optional

from ...config import EXPORT_DIR
from ...core.exceptions import ExportError, ProviderError
from ...core.logging import LogTimer, get_logger
from ...core.security import sanitize_filename
from ...models.deck import Project
from .archive import build_archive, collect_audio
from .renderer import LocalSlideRenderer, RemoteSlideRenderer, render_slides
from .video import FfmpegComposer, Json2VideoClient

logger = get_logger(__name__, component="exporter")

ExportFormat = Literal["zip", "video"]
RendererName = Literal["local", "remote"]
VideoBackend = Literal["json2video", "ffmpeg"]


@dataclass
class ExportArtifact:
    """Result of an export: a local file, or a hosted URL for json2video."""
    format: str
    filename: str
    media_type: str
    path: Optional[Path] = None
    url: Optional[str] = None

    def to_dict(self):
        return {
            "format": self.format,
            "filename": self.filename,
            "mediaType": self.media_type,
            "url": self.url,
        }


def export_filename(project: Project, extension: str) -> str:
    stem = sanitize_filename(project.name, default="deck")
    return f"{stem}.{extension}"


class Exporter:
    def __init__(
        self,
        local_renderer: Optional[LocalSlideRenderer] = None,
        remote_renderer: Optional[RemoteSlideRenderer] = None,
        video_client: Optional[Json2VideoClient] = None,
        composer: Optional[FfmpegComposer] = None,
        export_dir: Path = EXPORT_DIR,
    ):
        self.local_renderer = local_renderer or LocalSlideRenderer()
        self.remote_renderer = remote_renderer or RemoteSlideRenderer()
        self.video_client = video_client or Json2VideoClient()
        self.composer = composer or FfmpegComposer()
        self.export_dir = Path(export_dir)

    def _renderer(self, name: str):
        if name == "local":
            return self.local_renderer
        if name == "remote":
            return self.remote_renderer
        raise ExportError(f"Unknown renderer: {name}")

    def _output_path(self, project: Project, extension: str) -> Path:
        self.export_dir.mkdir(parents=True, exist_ok=True)
        return self.export_dir / f"{project.id}_{uuid.uuid4().hex[:8]}.{extension}"

    async def export(
        self,
        project: Project,
        format: ExportFormat = "zip",
        renderer: RendererName = "local",
        video_backend: VideoBackend = "json2video",
    ) -> ExportArtifact:
        """
        Export the project's slides.

        Raises:
            ExportError: with the raw reason of the first failure
        """
        if not project.slides:
            raise ExportError("Project has no slides to export")

        with LogTimer(logger, f"export {format}"):
            try:
                if format == "zip":
                    return await self._export_zip(project, renderer)
                if format == "video":
                    if video_backend == "json2video":
                        return await self._export_json2video(project)
                    if video_backend == "ffmpeg":
                        return await self._export_ffmpeg(project, renderer)
                    raise ExportError(f"Unknown video backend: {video_backend}")
                raise ExportError(f"Unknown export format: {format}")
            except ExportError:
                raise
            except (ProviderError, OSError, ValueError) as e:
                raise ExportError(str(e)) from e

    async def _export_zip(self, project: Project, renderer: str) -> ExportArtifact:
        images = await render_slides(self._renderer(renderer), project.slides)
        audio = collect_audio([slide.audio_url for slide in project.slides])

        path = self._output_path(project, "zip")
        path.write_bytes(build_archive(images, audio))
        logger.info("ZIP export written", extra={
            "project_id": project.id,
            "slides": len(images),
            "audio_files": len(audio),
        })
        return ExportArtifact(format="zip", filename=export_filename(project, "zip"),
                              media_type="application/zip", path=path)

    async def _export_json2video(self, project: Project) -> ExportArtifact:
        image_urls: List[str] = []
        for slide in project.slides:
            image_urls.append(await self.remote_renderer.render_url(slide))

        audio_urls: List[Optional[str]] = []
        for index, slide in enumerate(project.slides):
            url = slide.audio_url
            if url and not url.startswith(("http://", "https://")):
                # json2video fetches media itself and cannot read inline audio
                logger.warning("Skipping inline narration for hosted video", extra={"index": index})
                url = None
            audio_urls.append(url)

        movie_url = await self.video_client.render_movie(image_urls, audio_urls)
        return ExportArtifact(format="video", filename=export_filename(project, "mp4"),
                              media_type="video/mp4", url=movie_url)

    async def _export_ffmpeg(self, project: Project, renderer: str) -> ExportArtifact:
        images = await render_slides(self._renderer(renderer), project.slides)
        audio = collect_audio([slide.audio_url for slide in project.slides])
        path = await self.composer.compose(images, audio, self._output_path(project, "mp4"))
        return ExportArtifact(format="video", filename=export_filename(project, "mp4"),
                              media_type="video/mp4", path=path)


_exporter_instance: Optional[Exporter] = None


def get_exporter() -> Exporter:
    global _exporter_instance
    if _exporter_instance is None:
        _exporter_instance = Exporter()
    return _exporter_instance


def set_exporter(exporter: Optional[Exporter]) -> None:
    global _exporter_instance
    _exporter_instance = exporter
