"""Periodically re-sync every configured organization.

The poller owns one asyncio timer task. Every tick launches an independent
cycle task, so a slow cycle does not delay the next tick and cycles may
overlap. Cycle outcomes are reported through the event channel:
``poll:start`` then ``poll:finish`` on success, or ``error`` on failure.
"""

from __future__ import annotations

import asyncio
import typing as typ

from ciper.common.time import utcnow
from ciper.logging import get_logger, log_debug

from .events import EventChannel, LifecycleEvent, SyncEvent
from .observability import SyncEventLogger

if typ.TYPE_CHECKING:
    from .orchestrator import SyncOrchestrator

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL_S = 3600.0


class InvalidIntervalError(ValueError):
    """Raised when a poll interval is not positive."""

    def __init__(self, interval_s: float) -> None:
        """Build a consistent error message for the invalid interval."""
        super().__init__(f"poll interval must be positive, got {interval_s}")


class Poller:
    """Recurring timer that runs :meth:`SyncOrchestrator.sync_orgs`."""

    def __init__(
        self,
        orchestrator: SyncOrchestrator,
        *,
        interval_s: float = DEFAULT_POLL_INTERVAL_S,
        events: EventChannel | None = None,
        event_logger: SyncEventLogger | None = None,
    ) -> None:
        """Bind the poller to an orchestrator; the timer starts disarmed."""
        if interval_s <= 0:
            raise InvalidIntervalError(interval_s)
        self._orchestrator = orchestrator
        self._interval_s = interval_s
        self._events = events or orchestrator.events
        self._event_logger = event_logger or SyncEventLogger()
        self._timer: asyncio.Task[None] | None = None
        self._cycles: set[asyncio.Task[bool]] = set()

    @property
    def events(self) -> EventChannel:
        """Return the channel receiving poll lifecycle events."""
        return self._events

    @property
    def running(self) -> bool:
        """Return True while the timer is armed."""
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight(self) -> int:
        """Return the number of cycles currently running."""
        return len(self._cycles)

    def start(
        self, interval_s: float | None = None, *, immediate: bool = False
    ) -> Poller:
        """Arm the timer on the running event loop.

        Starting an armed poller re-arms it with the new interval.

        Parameters
        ----------
        interval_s
            Seconds between cycles; defaults to the configured interval.
        immediate
            Run the first cycle now instead of after one interval.

        """
        interval = self._interval_s if interval_s is None else interval_s
        if interval <= 0:
            raise InvalidIntervalError(interval)

        self.stop()
        if immediate:
            self._launch_cycle()
        self._timer = asyncio.create_task(self._tick(interval))
        log_debug(logger, "poll armed every %.3fs", interval)
        return self

    def stop(self) -> None:
        """Disarm the timer. Cycles already running are left to finish."""
        if self._timer is None:
            return
        self._timer.cancel()
        self._timer = None
        log_debug(logger, "poll disarmed")

    async def wait_idle(self) -> None:
        """Wait until no cycle is running."""
        while self._cycles:
            await asyncio.gather(*tuple(self._cycles), return_exceptions=True)

    async def run_cycle(self) -> bool:
        """Run one poll cycle and report its outcome as events.

        Failures are not raised: they are logged and emitted as an ``error``
        event carrying the exception.

        Returns
        -------
        bool
            True when every organization synced.

        """
        started_at = utcnow()
        self._events.emit(SyncEvent(kind=LifecycleEvent.POLL_START))
        self._event_logger.log_poll_started(
            organizations=self._orchestrator.organizations
        )
        try:
            results = await self._orchestrator.sync_orgs()
        except Exception as exc:  # noqa: BLE001 - reported through the error event
            self._event_logger.log_poll_failed(
                error=exc, duration=utcnow() - started_at
            )
            self._events.emit(SyncEvent(kind=LifecycleEvent.ERROR, error=exc))
            return False

        self._event_logger.log_poll_completed(
            organizations=len(results), duration=utcnow() - started_at
        )
        self._events.emit(SyncEvent(kind=LifecycleEvent.POLL_FINISH))
        return True

    async def _tick(self, interval_s: float) -> None:
        while True:
            await asyncio.sleep(interval_s)
            self._launch_cycle()

    def _launch_cycle(self) -> asyncio.Task[bool]:
        task = asyncio.create_task(self.run_cycle())
        self._cycles.add(task)
        task.add_done_callback(self._cycles.discard)
        return task
