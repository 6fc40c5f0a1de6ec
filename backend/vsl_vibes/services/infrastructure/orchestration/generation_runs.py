"""
Generation Runs - track one pipeline run per project.

State changes go through the transition table in ``models.status`` so an
illegal change (e.g. starting a second run while one is active) raises
``InvalidTransitionError`` instead of silently clobbering the first run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from threading import RLock
from typing import Any, Dict, List, Optional

from ....core.logging import get_logger
from ....models.status import STATE_PROGRESS, GenerationState, transition
from .cancellation import CancellationToken

logger = get_logger(__name__, component="generation_runs")


@dataclass
class GenerationRun:
    project_id: str
    state: GenerationState = GenerationState.IDLE
    progress: float = 0.0
    message: str = "Idle"
    error: Optional[str] = None
    stats: Dict[str, Any] = field(default_factory=dict)
    history: List[str] = field(default_factory=list)
    cancel_token: CancellationToken = field(default_factory=CancellationToken, repr=False, compare=False)
    started_at: Optional[str] = None
    updated_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def advance(self, target: GenerationState, message: Optional[str] = None) -> None:
        """Move to ``target``; raises InvalidTransitionError for illegal moves."""
        self.state = transition(self.state, target)
        self.progress = float(STATE_PROGRESS[target])
        self.message = message or target.value
        self.history.append(target.value)
        self.updated_at = datetime.now().isoformat()
        logger.info("Generation state changed", extra={
            "project_id": self.project_id,
            "state": target.value,
        })

    def fail(self, error: str) -> None:
        self.error = error
        self.advance(GenerationState.ERROR, f"Generation failed: {error}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "state": self.state.value,
            "progress": self.progress,
            "message": self.message,
            "error": self.error,
            "stats": self.stats,
            "history": list(self.history),
            "cancel_requested": self.cancel_token.cancelled,
            "started_at": self.started_at,
            "updated_at": self.updated_at,
        }


class GenerationRegistry:
    """In-memory registry of the latest run per project."""

    def __init__(self):
        self._runs: Dict[str, GenerationRun] = {}
        self._lock = RLock()

    def start(self, project_id: str) -> GenerationRun:
        """
        Begin a new run for the project.

        Raises:
            InvalidTransitionError: if a run for the project is still active
        """
        with self._lock:
            existing = self._runs.get(project_id)
            source = existing.state if existing else GenerationState.IDLE
            run = GenerationRun(project_id=project_id, state=source)
            run.advance(GenerationState.SPLITTING, "Splitting script into slides")
            run.started_at = run.updated_at
            self._runs[project_id] = run
            return run

    def get(self, project_id: str) -> Optional[GenerationRun]:
        with self._lock:
            return self._runs.get(project_id)

    def status(self, project_id: str) -> Dict[str, Any]:
        run = self.get(project_id)
        if run is None:
            return GenerationRun(project_id=project_id).to_dict()
        return run.to_dict()

    def cancel(self, project_id: str) -> Optional[GenerationRun]:
        """Request cancellation; returns the run, or None if nothing is active."""
        with self._lock:
            run = self._runs.get(project_id)
            if run is None or not run.state.is_active():
                return None
            run.cancel_token.cancel()
            run.message = "Cancellation requested"
            logger.info("Generation cancellation requested", extra={"project_id": project_id})
            return run

    def cancel_all(self) -> int:
        """Request cancellation of every active run; returns how many were signalled."""
        with self._lock:
            active = [run for run in self._runs.values() if run.state.is_active()]
            for run in active:
                run.cancel_token.cancel()
        return len(active)

    def is_active(self, project_id: str) -> bool:
        run = self.get(project_id)
        return run is not None and run.state.is_active()

    def forget(self, project_id: str) -> None:
        with self._lock:
            self._runs.pop(project_id, None)

    def clear(self) -> None:
        with self._lock:
            self._runs.clear()


_registry_instance: Optional[GenerationRegistry] = None


def get_generation_registry() -> GenerationRegistry:
    """Get or create the global generation registry."""
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = GenerationRegistry()
    return _registry_instance
