"""
Cooperative cancellation shared by generation runs and pipeline stages.
"""

import asyncio

from ....core.exceptions import GenerationCancelled


class CancellationToken:
    """Best-effort cancel signal checked between stages, batches and lookups."""

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise GenerationCancelled("Generation was cancelled")
