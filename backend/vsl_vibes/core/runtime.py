"""
Runtime environment guards: data directories, optional video tools and
provider credentials.
"""

import os
import shutil
from pathlib import Path
from typing import Dict, Iterable, List, Mapping


# Only needed for local MP4 export
LOCAL_VIDEO_TOOLS = ("ffmpeg", "ffprobe")

PROVIDER_CREDENTIALS = (
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
    "PEXELS_API_KEY",
    "PIXABAY_API_KEY",
    "ELEVENLABS_API_KEY",
    "HCTI_USER_ID",
    "HCTI_API_KEY",
    "JSON2VIDEO_API_KEY",
)


def parse_bool_env(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def missing_runtime_tools(tools: Iterable[str]) -> List[str]:
    return [tool for tool in tools if shutil.which(tool) is None]


def credential_report(environ: Mapping[str, str] | None = None,
                      names: Iterable[str] = PROVIDER_CREDENTIALS) -> Dict[str, bool]:
    """Which provider credentials the server environment supplies.

    Requests may still bring their own ``apiKey``; this only says what the
    server can do without one.
    """
    environ = os.environ if environ is None else environ
    configured = {name: bool(environ.get(name)) for name in names}
    if not configured.get("OPENAI_API_KEY", True) and environ.get("OPEN_AI_API_KEY"):
        configured["OPENAI_API_KEY"] = True
    return configured


def directory_is_writable(path: Path) -> bool:
    """Non-creating check used by the health endpoint."""
    return path.is_dir() and os.access(path, os.W_OK)


def assert_directory_writable(path: Path, *, create: bool = True) -> None:
    if create:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise RuntimeError(f"Cannot create directory: {path}") from exc
    if not path.is_dir():
        raise RuntimeError(f"Required directory is missing: {path}")

    probe = path / f".vsl_probe_{os.getpid()}"
    try:
        probe.write_text("ok", encoding="utf-8")
        probe.unlink(missing_ok=True)
    except OSError as exc:
        raise RuntimeError(f"Directory is not writable: {path}") from exc


def run_startup_runtime_checks(*, directories: Dict[str, Path]) -> Dict[str, object]:
    """Check data directories are writable and report optional capabilities.

    Only an unwritable directory marks the report as not ok. Missing ffmpeg
    disables local video export and missing credentials disable the matching
    provider unless a request supplies its own key.
    """
    report: Dict[str, object] = {"directories": {}, "ok": True}

    for name, path in directories.items():
        entry: Dict[str, object] = {"path": str(path), "writable": True}
        try:
            assert_directory_writable(path)
        except RuntimeError as exc:
            entry.update(writable=False, error=str(exc))
            report["ok"] = False
        report["directories"][name] = entry

    report["tools"] = {
        "optional": list(LOCAL_VIDEO_TOOLS),
        "missing": missing_runtime_tools(LOCAL_VIDEO_TOOLS),
    }
    credentials = credential_report()
    report["unconfigured_providers"] = sorted(name for name, ok in credentials.items() if not ok)
    return report
