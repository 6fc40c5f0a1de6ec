"""
Lifecycle management for the VSL Vibes application.
Handles startup checks, export cleanup, and shutdown tasks.
"""

import asyncio
from typing import Optional

from fastapi import FastAPI

from ....config import DATA_DIR, EXPORT_DIR, PROJECT_DATA_DIR
from ....core.logging import get_logger
from ....core.runtime import run_startup_runtime_checks
from ..storage.export_cleanup import ExportCleanupService
from .generation_runs import GenerationRegistry, get_generation_registry

logger = get_logger(__name__, service="lifecycle")


class StartupManager:
    def __init__(
        self,
        app: FastAPI,
        registry: Optional[GenerationRegistry] = None,
        cleanup_service: Optional[ExportCleanupService] = None,
    ):
        self.app = app
        self.registry = registry or get_generation_registry()
        self.cleanup_service = cleanup_service or ExportCleanupService(EXPORT_DIR)

    async def run_startup(self) -> None:
        """Check data directories and start the periodic export cleanup."""
        runtime_report = run_startup_runtime_checks(directories={
            "data": DATA_DIR,
            "projects": PROJECT_DATA_DIR,
            "exports": EXPORT_DIR,
        })
        self.app.state.runtime_report = runtime_report
        if runtime_report["ok"]:
            logger.info("Startup runtime checks complete", extra={"runtime_report": runtime_report})
        else:
            logger.error("Startup runtime checks failed", extra={"runtime_report": runtime_report})

        self.app.state.export_cleanup_task = None
        try:
            self.cleanup_service.run_once()
            self.app.state.export_cleanup_task = asyncio.create_task(self.cleanup_service.run_periodic())
        except OSError as exc:
            logger.error("Failed to initialize export cleanup", extra={"error": str(exc)}, exc_info=True)

    async def run_shutdown(self) -> None:
        """Signal running generations and stop background services."""
        cancelled = self.registry.cancel_all()
        if cancelled:
            logger.info("Cancelled active generation runs on shutdown", extra={"runs": cancelled})

        cleanup_task = getattr(self.app.state, "export_cleanup_task", None)
        if cleanup_task:
            cleanup_task.cancel()
            try:
                await cleanup_task
            except asyncio.CancelledError:
                pass
