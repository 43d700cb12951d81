"""Batch scheduling for bulk calls against the rate-limited search API.

The search API publishes no rate limit, but it starts refusing requests
when a full gallery page (25+ artists, two queries each) is fired at once.
:func:`run_batched` keeps the number of in-flight requests bounded by
splitting the work list into fixed-size chunks:

    items ──split──→ [chunk 1] ──gather──→ pause ──→ [chunk 2] ──gather──→ ...

- Items inside a chunk run concurrently (fan-out).
- A chunk starts only after the previous one has fully settled.
- ``delay_ms`` is inserted between chunks, never after the last one.
- Results come back in input order, whatever order the items finished in.

Failure policy is chosen by the caller.  With ``return_exceptions=False``
(the default) the first failing item cancels the rest of its chunk and the
exception propagates, so later chunks never start.  With
``return_exceptions=True`` failures are returned in place of results and
every chunk runs; the gallery pipeline uses this for best-effort bulk
resolution.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

import structlog

from kexplorer.utils.logging import get_logger

_T = TypeVar("_T")
_R = TypeVar("_R")

DEFAULT_BATCH_DELAY_MS = 600

_logger: structlog.BoundLogger = get_logger(__name__)


async def run_batched(
    items: Iterable[_T],
    batch_size: int,
    work: Callable[[_T], Awaitable[_R]],
    delay_ms: int = DEFAULT_BATCH_DELAY_MS,
    return_exceptions: bool = False,
) -> list[_R | BaseException]:
    """Apply *work* to every item, *batch_size* items at a time.

    Parameters
    ----------
    items:
        Work items, processed in order.
    batch_size:
        Maximum number of items in flight at once.  Must be at least 1.
    work:
        Async callable applied to each item.
    delay_ms:
        Pause between consecutive chunks, in milliseconds.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than aborting the run.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list
        One result per input item, in input order.

    Raises
    ------
    ValueError
        If *batch_size* is below 1 or *delay_ms* is negative.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be a positive integer, got {batch_size}")
    if delay_ms < 0:
        raise ValueError(f"delay_ms must not be negative, got {delay_ms}")

    pending = list(items)
    results: list[_R | BaseException] = []
    total_batches = (len(pending) + batch_size - 1) // batch_size

    for batch_index, start in enumerate(range(0, len(pending), batch_size)):
        chunk = pending[start : start + batch_size]
        results.extend(await _run_chunk(chunk, work, return_exceptions))

        _logger.debug(
            "batch_complete",
            batch=batch_index + 1,
            total_batches=total_batches,
            size=len(chunk),
        )

        if start + batch_size < len(pending):
            await asyncio.sleep(delay_ms / 1000)

    return results


async def _run_chunk(
    chunk: list[_T],
    work: Callable[[_T], Awaitable[_R]],
    return_exceptions: bool,
) -> list[_R | BaseException]:
    """Run one chunk concurrently and wait for all of it to settle."""
    tasks = [asyncio.ensure_future(work(item)) for item in chunk]

    if return_exceptions:
        return await asyncio.gather(*tasks, return_exceptions=True)

    try:
        return await asyncio.gather(*tasks)
    except BaseException as exc:
        for task in tasks:
            if not task.done():
                task.cancel()
        # Let the cancelled siblings unwind before the error propagates.
        await asyncio.gather(*tasks, return_exceptions=True)
        _logger.warning("batch_aborted", error=str(exc), size=len(chunk))
        raise
