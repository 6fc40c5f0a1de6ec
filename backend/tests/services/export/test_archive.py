import base64
import io
import zipfile

import pytest

from vsl_vibes.services.export import build_archive, collect_audio, decode_data_url, slide_basename
from vsl_vibes.services.export.archive import is_data_url


def _data_url(payload: bytes, mime="audio/mpeg") -> str:
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


def test_slide_basename_is_one_based_and_padded():
    assert slide_basename(0) == "slide_001"
    assert slide_basename(41) == "slide_042"


def test_decode_data_url():
    mime, data = decode_data_url(_data_url(b"ID3audio"))
    assert mime == "audio/mpeg"
    assert data == b"ID3audio"


def test_decode_rejects_plain_urls():
    with pytest.raises(ValueError):
        decode_data_url("https://cdn.example/voice.mp3")
    assert not is_data_url("https://cdn.example/voice.mp3")
    assert not is_data_url(None)


def test_collect_audio_skips_missing_and_remote():
    audio = collect_audio([_data_url(b"one"), None, "https://cdn.example/x.mp3", _data_url(b"four")])
    assert audio == {0: b"one", 3: b"four"}


def test_build_archive_names_entries_in_deck_order():
    archive = build_archive([b"png-1", b"png-2", b"png-3"], {1: b"mp3-2"})

    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        assert zf.namelist() == ["slide_001.png", "slide_002.png", "slide_002.mp3", "slide_003.png"]
        assert zf.read("slide_002.mp3") == b"mp3-2"
