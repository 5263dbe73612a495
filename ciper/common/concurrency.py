"""Bounded-concurrency helpers for asyncio pipelines.

``map_limit`` keeps at most ``limit`` calls in flight. After the first
failure it stops starting new calls, waits for the calls already running,
then re-raises that first failure; later failures and all results are
discarded. In-flight calls are never cancelled.
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import typing as typ

DEFAULT_LIMIT = 10


class InvalidLimitError(ValueError):
    """Raised when a concurrency limit is below one."""

    def __init__(self, limit: int) -> None:
        """Build a consistent error message for the invalid limit."""
        super().__init__(f"concurrency limit must be at least 1, got {limit}")


async def map_limit[T, R](
    items: cabc.Iterable[T],
    func: cabc.Callable[[T], cabc.Awaitable[R]],
    limit: int = DEFAULT_LIMIT,
) -> list[R]:
    """Apply ``func`` to every item with at most ``limit`` calls in flight.

    Parameters
    ----------
    items
        Inputs, consumed eagerly.
    func
        Coroutine function applied to each input.
    limit
        Maximum number of concurrent calls.

    Returns
    -------
    list[R]
        Results in input order.

    Raises
    ------
    InvalidLimitError
        If ``limit`` is below one.
    Exception
        The first exception raised by ``func``.

    """
    if limit < 1:
        raise InvalidLimitError(limit)

    pending = list(items)
    results: list[R | None] = [None] * len(pending)
    failures: list[Exception] = []
    next_index = 0

    async def worker() -> None:
        nonlocal next_index
        while not failures and next_index < len(pending):
            index = next_index
            next_index += 1
            try:
                results[index] = await func(pending[index])
            except Exception as exc:  # noqa: BLE001 - re-raised after the stage drains
                failures.append(exc)

    await asyncio.gather(*(worker() for _ in range(min(limit, len(pending)))))
    if failures:
        raise failures[0]
    return typ.cast("list[R]", results)


async def each_limit[T](
    items: cabc.Iterable[T],
    func: cabc.Callable[[T], cabc.Awaitable[object]],
    limit: int = DEFAULT_LIMIT,
) -> None:
    """Run ``func`` over ``items`` like :func:`map_limit`, discarding results."""
    await map_limit(items, func, limit)


async def run_parallel(*awaitables: cabc.Awaitable[object]) -> list[object]:
    """Await every awaitable concurrently and raise the first failure.

    All awaitables run to completion even when one of them fails.
    """
    outcomes = await asyncio.gather(*awaitables, return_exceptions=True)
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome
    return list(outcomes)
