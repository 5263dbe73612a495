"""Organization sync orchestration and background polling.

Usage
-----
Sync every configured organization once::

    from ciper.factory import build_runtime

    runtime = build_runtime(config)
    results = await runtime.orchestrator.sync_orgs()

Poll in the background and observe cycles::

    runtime.poller.events.subscribe(print)
    runtime.poller.start(interval_s=600)

"""

from ciper.sync.events import EventChannel, EventListener, LifecycleEvent, SyncEvent
from ciper.sync.models import OrganizationSyncResult
from ciper.sync.observability import SyncEventLogger, SyncEventType
from ciper.sync.orchestrator import SyncOrchestrator
from ciper.sync.poller import DEFAULT_POLL_INTERVAL_S, InvalidIntervalError, Poller

__all__ = [
    "DEFAULT_POLL_INTERVAL_S",
    "EventChannel",
    "EventListener",
    "InvalidIntervalError",
    "LifecycleEvent",
    "OrganizationSyncResult",
    "Poller",
    "SyncEvent",
    "SyncEventLogger",
    "SyncEventType",
    "SyncOrchestrator",
]
