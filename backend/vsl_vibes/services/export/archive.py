"""
ZIP packaging of rendered slides and narration.

Entries are numbered from 1 with three digits so they sort in deck order:

    slide_001.png
    slide_001.mp3
    slide_002.png
"""

import base64
import binascii
import io
import re
import zipfile
from typing import Dict, List, Optional, Tuple

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^,;]+)*?);base64,(?P<data>.*)$", re.DOTALL)


def is_data_url(url: Optional[str]) -> bool:
    return bool(url) and url.startswith("data:")


def decode_data_url(url: str) -> Tuple[str, bytes]:
    """
    Decode a base64 data URL.

    Returns:
        (mime type, raw bytes)

    Raises:
        ValueError: if the URL is not a valid base64 data URL
    """
    match = _DATA_URL.match(url or "")
    if not match:
        raise ValueError("Not a base64 data URL")
    try:
        data = base64.b64decode(match.group("data"), validate=False)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
    return match.group("mime") or "application/octet-stream", data


def slide_basename(index: int) -> str:
    """File stem for the slide at zero-based ``index``."""
    return f"slide_{index + 1:03d}"


def collect_audio(audio_urls: List[Optional[str]]) -> Dict[int, bytes]:
    """Decode the narration of every slide that has a data URL."""
    audio: Dict[int, bytes] = {}
    for index, url in enumerate(audio_urls):
        if is_data_url(url):
            _, data = decode_data_url(url)
            if data:
                audio[index] = data
    return audio


def build_archive(images: List[bytes], audio: Dict[int, bytes]) -> bytes:
    """Pack slide PNGs and MP3s into an in-memory ZIP."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for index, png in enumerate(images):
            name = slide_basename(index)
            archive.writestr(f"{name}.png", png)
            if index in audio:
                archive.writestr(f"{name}.mp3", audio[index])
    return buffer.getvalue()
