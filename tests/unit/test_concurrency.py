"""Unit tests for bounded-concurrency helpers."""

from __future__ import annotations

import asyncio

import pytest

from ciper.common.concurrency import (
    InvalidLimitError,
    each_limit,
    map_limit,
    run_parallel,
)


class _Tracker:
    """Record how many calls overlap."""

    def __init__(self) -> None:
        self.in_flight = 0
        self.max_in_flight = 0
        self.started: list[int] = []

    async def run(self, item: int) -> int:
        self.started.append(item)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.001)
            return item * 2
        finally:
            self.in_flight -= 1


class TestMapLimit:
    """Tests for map_limit."""

    @pytest.mark.asyncio
    async def test_results_follow_input_order(self) -> None:
        """Results line up with inputs whatever the completion order."""

        async def delayed(item: int) -> int:
            await asyncio.sleep(0.001 * (5 - item))
            return item

        assert await map_limit(range(5), delayed, 3) == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [1, 2, 5])
    async def test_never_exceeds_limit(self, limit: int) -> None:
        """No more than ``limit`` calls are in flight."""
        tracker = _Tracker()

        results = await map_limit(range(12), tracker.run, limit)

        assert results == [item * 2 for item in range(12)]
        assert tracker.max_in_flight == limit

    @pytest.mark.asyncio
    async def test_empty_input(self) -> None:
        """Empty inputs return an empty list."""
        tracker = _Tracker()

        assert await map_limit([], tracker.run, 3) == []
        assert tracker.started == []

    @pytest.mark.asyncio
    async def test_first_failure_stops_scheduling(self) -> None:
        """After a failure no new calls start and the first error propagates."""
        started: list[int] = []
        finished: list[int] = []

        async def flaky(item: int) -> int:
            started.append(item)
            if item == 1:
                raise RuntimeError("boom")
            await asyncio.sleep(0.01)
            finished.append(item)
            return item

        with pytest.raises(RuntimeError, match="boom"):
            await map_limit(range(10), flaky, 2)

        assert started == [0, 1]
        assert finished == [0]

    @pytest.mark.asyncio
    async def test_later_failures_are_discarded(self) -> None:
        """Only the first recorded failure is raised."""

        async def failing(item: int) -> int:
            await asyncio.sleep(0.001 * item)
            raise ValueError(str(item))

        with pytest.raises(ValueError, match="^0$"):
            await map_limit(range(3), failing, 3)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, -1])
    async def test_rejects_limit_below_one(self, limit: int) -> None:
        """Limits must be positive."""
        tracker = _Tracker()

        with pytest.raises(InvalidLimitError):
            await map_limit([1], tracker.run, limit)


@pytest.mark.asyncio
async def test_each_limit_discards_results() -> None:
    """each_limit runs every item and returns nothing."""
    tracker = _Tracker()

    result = await each_limit(range(4), tracker.run, 2)

    assert result is None
    assert sorted(tracker.started) == [0, 1, 2, 3]


class TestRunParallel:
    """Tests for run_parallel."""

    @pytest.mark.asyncio
    async def test_returns_outcomes_in_order(self) -> None:
        """Outcomes follow argument order."""
        tracker = _Tracker()

        assert await run_parallel(tracker.run(1), tracker.run(2)) == [2, 4]

    @pytest.mark.asyncio
    async def test_failure_waits_for_siblings(self) -> None:
        """A failure is raised only after every awaitable has finished."""
        finished: list[str] = []

        async def slow() -> None:
            await asyncio.sleep(0.01)
            finished.append("slow")

        async def failing() -> None:
            raise RuntimeError("hook failure")

        with pytest.raises(RuntimeError, match="hook failure"):
            await run_parallel(failing(), slow())

        assert finished == ["slow"]
