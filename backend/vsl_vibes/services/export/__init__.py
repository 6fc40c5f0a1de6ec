"""
Export of decks to ZIP archives and MP4 videos.
"""

from .archive import build_archive, collect_audio, decode_data_url, slide_basename
from .exporter import ExportArtifact, Exporter, get_exporter, set_exporter
from .renderer import LocalSlideRenderer, RemoteSlideRenderer, build_slide_html
from .video import FfmpegComposer, Json2VideoClient, build_movie_payload

__all__ = [
    "build_archive",
    "collect_audio",
    "decode_data_url",
    "slide_basename",
    "ExportArtifact",
    "Exporter",
    "get_exporter",
    "set_exporter",
    "LocalSlideRenderer",
    "RemoteSlideRenderer",
    "build_slide_html",
    "FfmpegComposer",
    "Json2VideoClient",
    "build_movie_payload",
]
