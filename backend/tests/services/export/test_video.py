"""
Tests for json2video movie rendering and local ffmpeg composition.
"""

import json
from unittest.mock import patch

import httpx
import pytest

from vsl_vibes.core.exceptions import CredentialError, ExportError
from vsl_vibes.services.export.video import (
    FfmpegComposer,
    Json2VideoClient,
    build_movie_payload,
    extract_project_id,
    movie_status,
)


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestPayload:
    def test_scene_duration_only_without_audio(self):
        payload = build_movie_payload(
            ["https://img/1.png", "https://img/2.png"],
            ["https://audio/1.mp3", None],
            default_duration=3.0,
        )
        first, second = payload["scenes"]
        assert payload["resolution"] == "full-hd"
        assert payload["quality"] == "high"
        assert "duration" not in first
        assert first["elements"][1] == {"type": "audio", "src": "https://audio/1.mp3"}
        assert second["duration"] == 3.0
        assert len(second["elements"]) == 1

    def test_project_id_and_status_shapes(self):
        assert extract_project_id({"project": "p1"}) == "p1"
        assert extract_project_id({"id": 7}) == "7"
        assert extract_project_id({}) is None
        assert movie_status({"movie": {"status": "done"}}) == {"status": "done"}
        assert movie_status({"status": "running"}) == {"status": "running"}


class TestJson2VideoClient:
    @pytest.mark.asyncio
    async def test_render_movie_polls_until_done(self):
        calls = []
        statuses = iter(["queued", "running", "done"])

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            assert request.headers["x-api-key"] == "key"
            if request.method == "POST":
                body = json.loads(request.content)
                assert len(body["scenes"]) == 1
                return httpx.Response(200, json={"success": True, "project": "proj-1"})
            assert request.url.params["project"] == "proj-1"
            state = next(statuses)
            movie = {"status": state}
            if state == "done":
                movie["url"] = "https://json2video.example/movie.mp4"
            return httpx.Response(200, json={"movie": movie})

        sleep = RecordingSleep()
        client = Json2VideoClient(api_key="key", client=_client(handler), poll_interval=3.0, sleep=sleep)

        url = await client.render_movie(["https://img/1.png"], [None])

        assert url == "https://json2video.example/movie.mp4"
        assert sleep.delays == [3.0, 3.0]
        assert [r.method for r in calls] == ["POST", "GET", "GET", "GET"]

    @pytest.mark.asyncio
    async def test_failed_render(self):
        def handler(request):
            if request.method == "POST":
                return httpx.Response(200, json={"project": "p"})
            return httpx.Response(200, json={"status": "error", "message": "bad image"})

        client = Json2VideoClient(api_key="key", client=_client(handler), sleep=RecordingSleep())
        with pytest.raises(ExportError, match="Video rendering failed: bad image"):
            await client.render_movie(["https://img/1.png"], [])

    @pytest.mark.asyncio
    async def test_timeout(self):
        client = Json2VideoClient(
            api_key="key",
            client=_client(lambda request: httpx.Response(200, json={"status": "running"})),
            max_attempts=2,
            sleep=RecordingSleep(),
        )
        with pytest.raises(ExportError, match="Video rendering timed out"):
            await client.wait("p")

    @pytest.mark.asyncio
    async def test_done_without_url(self):
        client = Json2VideoClient(
            api_key="key",
            client=_client(lambda request: httpx.Response(200, json={"status": "done"})),
            sleep=RecordingSleep(),
        )
        with pytest.raises(ExportError, match="Video finished without a URL"):
            await client.wait("p")

    @pytest.mark.asyncio
    async def test_create_retries_server_errors(self):
        responses = iter([httpx.Response(503), httpx.Response(502), httpx.Response(200, json={"project": "p"})])
        sleep = RecordingSleep()
        client = Json2VideoClient(api_key="key", client=_client(lambda request: next(responses)), sleep=sleep)

        created = await client.create({"scenes": []})

        assert created == {"project": "p"}
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_missing_key(self):
        with pytest.raises(CredentialError, match="JSON2VIDEO_API_KEY not configured"):
            await Json2VideoClient().create({})


class TestFfmpegComposer:
    def test_segment_cmd_with_and_without_audio(self, tmp_path):
        composer = FfmpegComposer(default_duration=2.5)
        with_audio = composer.segment_cmd(tmp_path / "a.png", tmp_path / "a.mp3", tmp_path / "a.mp4")
        silent = composer.segment_cmd(tmp_path / "b.png", None, tmp_path / "b.mp4")

        assert "-shortest" in with_audio
        assert "anullsrc=r=44100:cl=stereo" in silent
        assert silent[silent.index("-t") + 1] == "2.5"
        assert silent[-1] == str(tmp_path / "b.mp4")

    @pytest.mark.asyncio
    async def test_missing_tools(self, tmp_path):
        with patch("vsl_vibes.services.export.video.missing_runtime_tools", return_value=["ffmpeg", "ffprobe"]):
            assert not FfmpegComposer.available()
            with pytest.raises(ExportError, match="Local video export requires: ffmpeg, ffprobe"):
                await FfmpegComposer().compose([b"png"], {}, tmp_path / "out.mp4")
