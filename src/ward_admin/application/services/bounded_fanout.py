"""Semaphore-gated fan-out for independent async reads."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

T = TypeVar("T")


async def gather_bounded(
    factories: Sequence[Callable[[], Awaitable[T]]],
    *,
    limit: int,
) -> list[T]:
    """Run `factories` with at most `limit` in flight; results keep input order.

    The first failure cancels every call still pending or running and is
    re-raised unchanged, so callers never see a partial result list.
    """

    if limit < 1:
        raise ValueError("limit must be a positive integer")
    if not factories:
        return []

    semaphore = asyncio.Semaphore(limit)

    async def _run(factory: Callable[[], Awaitable[T]]) -> T:
        async with semaphore:
            return await factory()

    tasks = [asyncio.ensure_future(_run(factory)) for factory in factories]
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        for task in done:
            error = task.exception()
            if error is not None:
                raise error
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    return [task.result() for task in tasks]
