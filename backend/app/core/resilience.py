"""
Resilience Patterns Module.

Bounded concurrent fan-out for calls to external dependencies: a
semaphore caps in-flight calls and a single deadline caps the batch.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from backend.app.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class BatchTimeoutError(TimeoutError):
    """Raised (per item) when the batch deadline expires before the item finished."""
    pass


async def bounded_gather(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    limit: int,
    timeout: Optional[float] = None,
    on_error: Callable[[T, BaseException], R],
) -> List[R]:
    """
    Run ``worker`` over ``items`` with at most ``limit`` calls in flight.

    Results come back in input order. A worker that raises is replaced by
    ``on_error(item, exc)``; the failure never aborts its siblings. When
    ``timeout`` elapses, unfinished workers are cancelled and resolved
    through ``on_error`` with a ``BatchTimeoutError``.
    """
    if limit < 1:
        raise ValueError("limit must be >= 1")
    if not items:
        return []

    semaphore = asyncio.Semaphore(limit)

    async def _run(item: T) -> R:
        async with semaphore:
            return await worker(item)

    tasks = [asyncio.create_task(_run(item)) for item in items]
    try:
        done, pending = await asyncio.wait(tasks, timeout=timeout)
    except asyncio.CancelledError:
        # Caller went away; take the workers down with it
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    if pending:
        logger.warning(
            f"Batch deadline of {timeout}s reached with {len(pending)}/{len(tasks)} calls unfinished; cancelling"
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    results: List[R] = []
    for item, task in zip(items, tasks):
        if task in pending:
            results.append(on_error(item, BatchTimeoutError(f"batch deadline of {timeout}s exceeded")))
            continue
        exc = task.exception()
        if exc is not None:
            results.append(on_error(item, exc))
        else:
            results.append(task.result())
    return results
