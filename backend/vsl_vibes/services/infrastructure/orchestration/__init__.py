"""Generation orchestration - run tracking per project and app lifecycle."""

from .cancellation import CancellationToken
from .generation_runs import GenerationRegistry, GenerationRun, get_generation_registry
from .lifecycle import StartupManager

__all__ = [
    "CancellationToken",
    "GenerationRegistry",
    "GenerationRun",
    "get_generation_registry",
    "StartupManager",
]
