"""Lifecycle notifications for organization syncs and background polling.

Callers of the orchestrator get their outcome from the awaited result; the
event channel is a separate, optional subscription for observers such as
the poller's owner.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import enum


class LifecycleEvent(enum.StrEnum):
    """Names of the lifecycle events."""

    SYNC = "sync"
    UNSYNC = "unsync"
    RESYNC = "resync"
    POLL_START = "poll:start"
    POLL_FINISH = "poll:finish"
    ERROR = "error"


@dataclasses.dataclass(frozen=True, slots=True)
class SyncEvent:
    """A lifecycle notification.

    ``organization`` is set for the per-organization action events and
    ``error`` only for :attr:`LifecycleEvent.ERROR`.
    """

    kind: LifecycleEvent
    organization: str | None = None
    error: BaseException | None = None


type EventListener = cabc.Callable[[SyncEvent], None]


class EventChannel:
    """Fan lifecycle events out to subscribed listeners, in subscription order."""

    def __init__(self) -> None:
        """Start with no listeners."""
        self._listeners: list[EventListener] = []

    def subscribe(self, listener: EventListener) -> cabc.Callable[[], None]:
        """Register ``listener`` and return a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: SyncEvent) -> None:
        """Deliver ``event`` to every listener subscribed at call time."""
        for listener in tuple(self._listeners):
            listener(event)
