"""
Export cleanup service.

Deletes expired export artifacts (ZIP archives and locally composed MP4s)
to prevent unbounded disk growth.
"""

import asyncio
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional

from ....core.logging import get_logger
from ....core.runtime import parse_bool_env

logger = get_logger(__name__, component="export_cleanup")


def _env_float(name: str, default: float, minimum: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(float(raw), minimum)
    except (TypeError, ValueError):
        return default


def _env_int(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(int(raw), minimum)
    except (TypeError, ValueError):
        return default


class ExportCleanupService:
    """Remove export files older than the retention window."""

    def __init__(self, export_dir: Path):
        self.export_dir = Path(export_dir)
        self.enabled = parse_bool_env(os.getenv("EXPORT_CLEANUP_ENABLED"), default=True)
        self.retention_hours = _env_float("EXPORT_RETENTION_HOURS", 24.0, 0.0)
        self.max_deletions = _env_int("EXPORT_CLEANUP_MAX_DELETIONS", 100, 1)
        self.interval_minutes = _env_int("EXPORT_CLEANUP_INTERVAL_MINUTES", 60, 1)

    @staticmethod
    def _hours_since(unix_ts: float, now_ts: float) -> float:
        return max(0.0, (now_ts - unix_ts) / 3600.0)

    def run_once(self, now_ts: Optional[float] = None) -> Dict[str, Any]:
        """Run one cleanup pass and return summary statistics."""
        summary = {"enabled": self.enabled, "deleted_files": 0, "errors": 0}
        if not self.enabled or not self.export_dir.exists():
            return summary

        now_ts = time.time() if now_ts is None else now_ts
        deletions_left = self.max_deletions
        for path in sorted(self.export_dir.iterdir(), key=lambda p: p.stat().st_mtime):
            if deletions_left <= 0:
                break
            if not path.is_file():
                continue
            if self._hours_since(path.stat().st_mtime, now_ts) < self.retention_hours:
                continue
            try:
                path.unlink(missing_ok=True)
                summary["deleted_files"] += 1
                deletions_left -= 1
            except OSError as exc:
                logger.warning("Failed to remove export file", extra={"path": str(path), "error": str(exc)})
                summary["errors"] += 1

        if summary["deleted_files"] or summary["errors"]:
            logger.info("Export cleanup pass complete", extra=summary)
        return summary

    async def run_periodic(self) -> None:
        """Run cleanup forever at the configured interval."""
        while True:
            await asyncio.sleep(self.interval_minutes * 60)
            try:
                self.run_once()
            except OSError as exc:
                logger.error("Export cleanup pass failed", extra={"error": str(exc)}, exc_info=True)
