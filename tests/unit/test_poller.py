"""Unit tests for the background poller."""

from __future__ import annotations

import asyncio
import typing as typ

import pytest

from ciper.github.errors import GitHubFetchError
from ciper.sync import (
    EventChannel,
    InvalidIntervalError,
    LifecycleEvent,
    Poller,
    SyncEvent,
)

if typ.TYPE_CHECKING:
    from ciper.sync import SyncOrchestrator
    from tests.helpers.fakes import FakeGitHub

    MakeOrchestrator = typ.Callable[..., SyncOrchestrator]

_HTTP_SERVER_ERROR = 500


def _recording_poller(
    orchestrator: SyncOrchestrator, interval_s: float = 3600.0
) -> tuple[Poller, list[SyncEvent]]:
    received: list[SyncEvent] = []
    poller = Poller(orchestrator, interval_s=interval_s)
    poller.events.subscribe(received.append)
    return poller, received


def test_rejects_non_positive_interval(make_orchestrator: MakeOrchestrator) -> None:
    """Intervals must be positive."""
    with pytest.raises(InvalidIntervalError):
        Poller(make_orchestrator(), interval_s=0)


def test_shares_orchestrator_channel(make_orchestrator: MakeOrchestrator) -> None:
    """Without an explicit channel the poller reuses the orchestrator's."""
    channel = EventChannel()

    poller = Poller(make_orchestrator(events=channel))

    assert poller.events is channel


class TestRunCycle:
    """Tests for a single poll cycle."""

    @pytest.mark.asyncio
    async def test_successful_cycle_events(
        self, make_orchestrator: MakeOrchestrator, github: FakeGitHub
    ) -> None:
        """A cycle emits poll:start, the per-organization event, then poll:finish."""
        github.add_repository("org1", "thing", {"name": "thing"})
        poller, received = _recording_poller(make_orchestrator())

        assert await poller.run_cycle()

        assert [event.kind for event in received] == [
            LifecycleEvent.POLL_START,
            LifecycleEvent.SYNC,
            LifecycleEvent.POLL_FINISH,
        ]

    @pytest.mark.asyncio
    async def test_failed_cycle_emits_error(
        self, make_orchestrator: MakeOrchestrator, github: FakeGitHub
    ) -> None:
        """Failures are reported as an error event instead of being raised."""
        failure = GitHubFetchError.http_error(_HTTP_SERVER_ERROR, "/orgs/org1/repos")
        github.fetch_errors["org1"] = failure
        poller, received = _recording_poller(make_orchestrator())

        assert not await poller.run_cycle()

        assert [event.kind for event in received] == [
            LifecycleEvent.POLL_START,
            LifecycleEvent.ERROR,
        ]
        assert received[-1].error is failure

    @pytest.mark.asyncio
    async def test_missing_organizations_emit_error(
        self, make_orchestrator: MakeOrchestrator
    ) -> None:
        """A poller without organizations reports the configuration error."""
        poller, received = _recording_poller(make_orchestrator(organizations=()))

        assert not await poller.run_cycle()

        assert received[-1].kind is LifecycleEvent.ERROR


class TestTimer:
    """Tests for arming and disarming the timer."""

    @pytest.mark.asyncio
    async def test_ticks_run_cycles(self, make_orchestrator: MakeOrchestrator) -> None:
        """An armed poller runs a cycle per interval."""
        poller, received = _recording_poller(make_orchestrator())

        poller.start(0.01)
        await asyncio.sleep(0.055)
        poller.stop()
        await poller.wait_idle()

        finished = [e for e in received if e.kind is LifecycleEvent.POLL_FINISH]
        assert len(finished) >= 2

    @pytest.mark.asyncio
    async def test_first_cycle_waits_for_interval(
        self, make_orchestrator: MakeOrchestrator
    ) -> None:
        """Without ``immediate`` nothing runs before the first tick."""
        poller, received = _recording_poller(make_orchestrator())

        poller.start()
        await asyncio.sleep(0)

        assert poller.running
        assert received == []
        poller.stop()

    @pytest.mark.asyncio
    async def test_immediate_runs_first_cycle(
        self, make_orchestrator: MakeOrchestrator
    ) -> None:
        """``immediate`` launches a cycle right away."""
        poller, received = _recording_poller(make_orchestrator())

        poller.start(immediate=True)
        await poller.wait_idle()
        poller.stop()

        assert [event.kind for event in received][-1] is LifecycleEvent.POLL_FINISH

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(
        self, make_orchestrator: MakeOrchestrator
    ) -> None:
        """Stopping twice, or before starting, is harmless."""
        poller, _ = _recording_poller(make_orchestrator())

        poller.stop()
        poller.start()
        poller.stop()
        poller.stop()

        assert not poller.running

    @pytest.mark.asyncio
    async def test_restart_replaces_timer(
        self, make_orchestrator: MakeOrchestrator
    ) -> None:
        """Starting an armed poller re-arms it with the new interval."""
        poller, received = _recording_poller(make_orchestrator())

        poller.start(3600)
        poller.start(0.01)
        await asyncio.sleep(0.035)
        poller.stop()
        await poller.wait_idle()

        assert any(event.kind is LifecycleEvent.POLL_FINISH for event in received)

    @pytest.mark.asyncio
    async def test_stop_leaves_running_cycle(
        self, make_orchestrator: MakeOrchestrator, github: FakeGitHub
    ) -> None:
        """Cycles already in flight finish after the timer is disarmed."""
        github.add_repository("org1", "thing", {"name": "thing"})
        github.fetch_delay_s = 0.02
        poller, received = _recording_poller(make_orchestrator())

        poller.start(immediate=True)
        await asyncio.sleep(0)
        assert poller.in_flight == 1
        poller.stop()
        await poller.wait_idle()

        assert poller.in_flight == 0
        assert received[-1].kind is LifecycleEvent.POLL_FINISH

    @pytest.mark.asyncio
    async def test_rejects_non_positive_start_interval(
        self, make_orchestrator: MakeOrchestrator
    ) -> None:
        """start validates an explicit interval."""
        poller, _ = _recording_poller(make_orchestrator())

        with pytest.raises(InvalidIntervalError):
            poller.start(-1)
        assert not poller.running
