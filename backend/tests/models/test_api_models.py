"""
Tests for the API wire schemas (camelCase on the wire, snake_case in code).
"""

import pytest
from pydantic import ValidationError

from vsl_vibes.models import (
    ExportProjectRequest,
    InfographicLinesRequest,
    SplitScriptResponse,
    StyleSlidesRequest,
    TtsResponse,
    normalize_document,
)
from vsl_vibes.models.projects import to_snake_key


class TestNormalizeDocument:
    def test_snake_keys(self):
        assert to_snake_key("fullScriptText") == "full_script_text"
        assert to_snake_key("imagePositionY") == "image_position_y"
        assert to_snake_key("already_snake") == "already_snake"

    def test_nested_slide_document(self):
        document = {
            "fullScriptText": "Hello",
            "style": {"textSize": 96, "splitRatio": 60},
            "backgroundImage": {"displayMode": "split"},
            "segments": [{"text": "Hello", "underlineStyle": "regular"}],
        }
        normalized = normalize_document(document)
        assert normalized["full_script_text"] == "Hello"
        assert normalized["style"] == {"text_size": 96, "split_ratio": 60}
        assert normalized["background_image"] == {"display_mode": "split"}
        assert normalized["segments"][0]["underline_style"] == "regular"

    def test_word_map_keys_untouched(self):
        normalized = normalize_document({"underlineStyles": {"BigWin": "brush-black"}})
        assert normalized == {"underline_styles": {"BigWin": "brush-black"}}


class TestStageSchemas:
    def test_style_request_accepts_camel_case(self):
        request = StyleSlidesRequest.model_validate({
            "slides": [{"id": "s1", "fullScriptText": "Hi", "imageKeyword": "sun"}],
            "styleDirective": "moody",
            "chunkSize": 50,
        })
        assert request.slides[0].full_script_text == "Hi"
        assert request.style_directive == "moody"
        assert request.chunk_size == 50

    def test_style_request_needs_slides(self):
        with pytest.raises(ValidationError):
            StyleSlidesRequest.model_validate({"slides": []})

    def test_split_response_dumps_camel_case(self):
        response = SplitScriptResponse.model_validate({
            "scenes": [{"scene_number": 1, "title": "Hook", "emotion": "curiosity",
                        "slides": [{"full_script_text": "Hi", "has_image": True, "image_keyword": "wave"}]}],
            "stats": {"total_slides": 1, "image_slides": 1},
        })
        dumped = response.model_dump(by_alias=True)
        assert dumped["scenes"][0]["sceneNumber"] == 1
        assert dumped["scenes"][0]["slides"][0]["fullScriptText"] == "Hi"
        assert dumped["stats"]["totalSlides"] == 1

    def test_lines_request_defaults(self):
        request = InfographicLinesRequest.model_validate({
            "currentSlide": {"id": "a", "fullScriptText": "Stat one"},
        })
        assert request.max_lines == 5
        assert request.next_slides == []

    def test_tts_response_alias(self):
        assert TtsResponse(audio_content="data:x", duration=1.0).model_dump(by_alias=True) == {
            "audioContent": "data:x", "duration": 1.0,
        }


class TestExportRequest:
    def test_defaults(self):
        request = ExportProjectRequest()
        assert (request.format, request.renderer, request.video_backend) == ("zip", "local", "json2video")

    def test_rejects_unknown_format(self):
        with pytest.raises(ValidationError):
            ExportProjectRequest.model_validate({"format": "pdf"})

    def test_camel_case_backend(self):
        assert ExportProjectRequest.model_validate({"format": "video", "videoBackend": "ffmpeg"}).video_backend == "ffmpeg"
