"""
Rendering proxy endpoints: single-slide image rendering and json2video.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from ..config import JSON2VIDEO_FILE_HOSTS
from ..config.pipeline import HTTP_TIMEOUT
from ..core.logging import get_logger
from ..core.security import sanitize_filename
from ..models import Json2VideoRequest, RenderSlideRequest, RenderSlideResponse, Slide, normalize_document
from ..services.export import Json2VideoClient, RemoteSlideRenderer
from .dependencies import get_slide_renderer
from .errors import HANDLED_ERRORS, http_error

logger = get_logger(__name__, component="routes")

router = APIRouter(tags=["render"])


def is_allowed_movie_url(url: str) -> bool:
    parsed = urlparse(url)
    if parsed.scheme != "https" or not parsed.hostname:
        return False
    host = parsed.hostname.lower()
    return any(host == allowed or host.endswith(f".{allowed}") for allowed in JSON2VIDEO_FILE_HOSTS)


@router.post("/render-slide", response_model=RenderSlideResponse)
async def render_slide(request: RenderSlideRequest,
                       renderer: RemoteSlideRenderer = Depends(get_slide_renderer)):
    """Render one slide to a hosted 1920x1080 image"""
    if not request.slide:
        raise HTTPException(status_code=400, detail="Slide data is required")
    try:
        slide = Slide.from_dict(normalize_document(request.slide))
        image_url = await renderer.render_url(slide)
    except (TypeError, KeyError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid slide data: {e}")
    except HANDLED_ERRORS as e:
        raise http_error(e)
    return RenderSlideResponse(image_url=image_url)


@router.post("/json2video")
async def json2video(request: Json2VideoRequest) -> Dict[str, Any]:
    """Proxy json2video movie creation and status checks"""
    client = Json2VideoClient(api_key=request.api_key)
    try:
        if request.action == "create":
            if not request.data:
                raise HTTPException(status_code=400, detail="Movie data is required")
            return await client.create(request.data)
        if request.action == "status":
            if not request.project_id:
                raise HTTPException(status_code=400, detail="projectId is required")
            return await client.status(request.project_id)
    except HANDLED_ERRORS as e:
        raise http_error(e)
    raise HTTPException(status_code=400, detail="Invalid action")


@router.get("/json2video/file")
async def json2video_file(url: str = Query(...), filename: Optional[str] = Query(default=None)):
    """Stream a finished movie through the API (avoids cross-origin downloads)"""
    if not is_allowed_movie_url(url):
        raise HTTPException(status_code=400, detail="URL is not a json2video movie")

    client = httpx.AsyncClient(timeout=HTTP_TIMEOUT, follow_redirects=True)
    try:
        upstream = await client.send(client.build_request("GET", url), stream=True)
    except httpx.HTTPError as e:
        await client.aclose()
        raise HTTPException(status_code=502, detail=f"Movie download failed: {e}")

    if not upstream.is_success:
        status_code = upstream.status_code
        await upstream.aclose()
        await client.aclose()
        raise HTTPException(status_code=502, detail=f"Movie download failed: {status_code}")

    async def close() -> None:
        await upstream.aclose()
        await client.aclose()

    name = sanitize_filename(filename or urlparse(url).path.rsplit("/", 1)[-1], default="video.mp4")
    logger.info("Streaming movie file", extra={"host": urlparse(url).hostname})
    return StreamingResponse(
        upstream.aiter_bytes(),
        media_type=upstream.headers.get("content-type", "video/mp4"),
        headers={"Content-Disposition": f'attachment; filename="{name}"'},
        background=BackgroundTask(close),
    )
