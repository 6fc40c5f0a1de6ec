"""
Bounded fan-out helpers for the pipeline stages.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from ..infrastructure.orchestration.cancellation import CancellationToken

T = TypeVar("T")
R = TypeVar("R")


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    """Split a sequence into consecutive lists of at most ``size`` items."""
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


async def gather_in_batches(
    items: Sequence[T],
    worker: Callable[[int, T], Awaitable[R]],
    concurrency: int,
    cancel_token: Optional[CancellationToken] = None,
) -> List[R]:
    """
    Run ``worker(index, item)`` over items, ``concurrency`` at a time.

    Each group is awaited as a whole before the next one starts. Results keep
    the input order regardless of completion order. Workers are expected to
    handle their own failures.
    """
    results: List[R] = []
    for start in range(0, len(items), concurrency):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        group = items[start:start + concurrency]
        results.extend(await asyncio.gather(
            *(worker(start + offset, item) for offset, item in enumerate(group))
        ))
    return results
