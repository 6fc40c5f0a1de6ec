"""
Video assembly backends.

json2video (remote):
    create a movie from hosted slide images and narration, then poll the
    status endpoint until it finishes or fails.

ffmpeg (local):
    encode one still-image segment per slide (narration or a fixed default
    duration) and concatenate the segments with the concat demuxer.
"""

import asyncio
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from ...config import JSON2VIDEO_URL, get_api_key
from ...config.pipeline import DEFAULT_SLIDE_DURATION, VIDEO_POLL_INTERVAL, VIDEO_POLL_MAX_ATTEMPTS
from ...core.exceptions import ExportError, UpstreamError
from ...core.logging import get_logger
from ...core.runtime import LOCAL_VIDEO_TOOLS, missing_runtime_tools
from ..media.http import Sleep, require_key, send_json, with_retry
from .archive import slide_basename

logger = get_logger(__name__, component="video")

DONE_STATUSES = {"done", "finished"}
FAILED_STATUSES = {"error", "failed"}
FFMPEG_TIMEOUT = 600


def build_movie_payload(
    image_urls: List[str],
    audio_urls: Optional[List[Optional[str]]] = None,
    default_duration: float = DEFAULT_SLIDE_DURATION,
) -> Dict[str, Any]:
    """
    json2video movie definition: one scene per slide.

    Scenes with narration take its length; the rest last ``default_duration``.
    """
    audio_urls = audio_urls or []
    scenes = []
    for index, image_url in enumerate(image_urls):
        elements: List[Dict[str, Any]] = [{
            "type": "image",
            "src": image_url,
            "settings": {"width": "100%", "height": "100%"},
        }]
        scene: Dict[str, Any] = {"comment": f"Slide {index + 1}", "elements": elements}
        audio = audio_urls[index] if index < len(audio_urls) else None
        if audio:
            elements.append({"type": "audio", "src": audio})
        else:
            scene["duration"] = default_duration
        scenes.append(scene)
    return {"resolution": "full-hd", "quality": "high", "scenes": scenes}


def extract_project_id(data: Dict[str, Any]) -> Optional[str]:
    for key in ("project", "id", "project_id", "movie_id"):
        value = data.get(key)
        if value:
            return str(value)
    return None


def movie_status(data: Dict[str, Any]) -> Dict[str, Any]:
    """Status fields may be top-level or nested under ``movie``."""
    movie = data.get("movie")
    return movie if isinstance(movie, dict) else data


class Json2VideoClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = JSON2VIDEO_URL,
        poll_interval: float = VIDEO_POLL_INTERVAL,
        max_attempts: int = VIDEO_POLL_MAX_ATTEMPTS,
        sleep: Sleep = asyncio.sleep,
    ):
        self.api_key = api_key
        self.client = client
        self.base_url = base_url
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.sleep = sleep

    def _headers(self) -> Dict[str, str]:
        key = require_key(get_api_key("JSON2VIDEO_API_KEY", self.api_key),
                          "JSON2VIDEO_API_KEY not configured", "json2video")
        return {"x-api-key": key}

    async def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Submit a movie definition; returns the raw provider response."""
        headers = self._headers()
        return await with_retry(
            lambda: send_json("POST", self.base_url, provider="json2video", client=self.client,
                              headers=headers, json=payload),
            description="json2video create",
            sleep=self.sleep,
        )

    async def status(self, project_id: str) -> Dict[str, Any]:
        headers = self._headers()
        return await with_retry(
            lambda: send_json("GET", self.base_url, provider="json2video", client=self.client,
                              headers=headers, params={"project": project_id}),
            description="json2video status",
            sleep=self.sleep,
        )

    async def wait(self, project_id: str) -> str:
        """
        Poll until the movie is ready.

        Returns:
            The finished movie URL

        Raises:
            ExportError: when rendering fails or polling runs out of attempts
        """
        for attempt in range(1, self.max_attempts + 1):
            status = movie_status(await self.status(project_id))
            state = str(status.get("status") or "").lower()
            if state in DONE_STATUSES:
                url = status.get("url") or status.get("movie_url")
                if not url:
                    raise ExportError("Video finished without a URL")
                return url
            if state in FAILED_STATUSES:
                raise ExportError(f"Video rendering failed: {status.get('message') or state}")
            logger.debug("Video still rendering", extra={"project_id": project_id, "attempt": attempt})
            await self.sleep(self.poll_interval)
        raise ExportError("Video rendering timed out")

    async def render_movie(self, image_urls: List[str], audio_urls: List[Optional[str]]) -> str:
        created = await self.create(build_movie_payload(image_urls, audio_urls))
        project_id = extract_project_id(created)
        if not project_id:
            raise UpstreamError("json2video returned no project id", provider="json2video")
        logger.info("Video rendering started", extra={"project_id": project_id, "scenes": len(image_urls)})
        return await self.wait(project_id)


class FfmpegComposer:
    """Local MP4 assembly from slide PNGs and MP3 narration."""

    def __init__(self, default_duration: float = DEFAULT_SLIDE_DURATION, timeout: int = FFMPEG_TIMEOUT):
        self.default_duration = default_duration
        self.timeout = timeout

    @staticmethod
    def available() -> bool:
        return not missing_runtime_tools(LOCAL_VIDEO_TOOLS)

    def segment_cmd(self, image_path: Path, audio_path: Optional[Path], output_path: Path) -> List[str]:
        cmd = ["ffmpeg", "-y", "-loop", "1", "-i", str(image_path)]
        if audio_path is not None:
            cmd += ["-i", str(audio_path), "-shortest"]
        else:
            cmd += ["-f", "lavfi", "-i", "anullsrc=r=44100:cl=stereo", "-t", str(self.default_duration)]
        cmd += [
            "-map", "0:v:0", "-map", "1:a:0",
            "-c:v", "libx264", "-tune", "stillimage", "-pix_fmt", "yuv420p",
            "-r", "30", "-c:a", "aac", "-ar", "44100", "-ac", "2",
            str(output_path),
        ]
        return cmd

    async def _run(self, cmd: List[str]) -> None:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            raise ExportError("ffmpeg timed out") from e
        if process.returncode != 0:
            raise ExportError(f"ffmpeg failed: {stderr.decode(errors='replace')[-500:]}")

    async def compose(self, images: List[bytes], audio: Dict[int, bytes], output_path: Path) -> Path:
        missing = missing_runtime_tools(LOCAL_VIDEO_TOOLS)
        if missing:
            raise ExportError(f"Local video export requires: {', '.join(missing)}")
        if not images:
            raise ExportError("No slides to export")

        with tempfile.TemporaryDirectory(prefix="vsl_video_") as work:
            work_dir = Path(work)
            segments = []
            for index, png in enumerate(images):
                name = slide_basename(index)
                image_path = work_dir / f"{name}.png"
                image_path.write_bytes(png)
                audio_path = None
                if index in audio:
                    audio_path = work_dir / f"{name}.mp3"
                    audio_path.write_bytes(audio[index])
                segment = work_dir / f"{name}.mp4"
                await self._run(self.segment_cmd(image_path, audio_path, segment))
                segments.append(segment)

            concat_list = work_dir / "concat_list.txt"
            with open(concat_list, "w", encoding="utf-8") as f:
                for segment in segments:
                    f.write(f"file '{segment}'\n")

            output_path.parent.mkdir(parents=True, exist_ok=True)
            await self._run([
                "ffmpeg", "-y",
                "-f", "concat",
                "-safe", "0",
                "-i", str(concat_list),
                "-c", "copy",
                str(output_path),
            ])

        logger.info("Video composed locally", extra={"slides": len(images), "path": str(output_path)})
        return output_path
