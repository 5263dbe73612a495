"""Emit structured log events for organization syncs and poll cycles.

Usage
-----
>>> event_logger = SyncEventLogger()
>>> event_logger.log_org_started(organization="octo-org", action="sync")

"""

from __future__ import annotations

import enum
import typing as typ

from ciper.errors import ConfigError, RemoteAPIError, RemoteFetchError
from ciper.logging import get_logger, log_error, log_info

if typ.TYPE_CHECKING:
    import datetime as dt

    from .models import OrganizationSyncResult

logger = get_logger(__name__)


class SyncEventType(enum.StrEnum):
    """Structured log event types for sync runs."""

    ORG_STARTED = "sync.org.started"
    ORG_COMPLETED = "sync.org.completed"
    ORG_FAILED = "sync.org.failed"
    POLL_STARTED = "sync.poll.started"
    POLL_COMPLETED = "sync.poll.completed"
    POLL_FAILED = "sync.poll.failed"


class ErrorCategory(enum.StrEnum):
    """Categories for failure classification in alerts."""

    CONFIGURATION = "configuration"
    FETCH = "fetch"
    REMOTE_API = "remote_api"
    UNKNOWN = "unknown"


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (ConfigError, ErrorCategory.CONFIGURATION),
    (RemoteFetchError, ErrorCategory.FETCH),
    (RemoteAPIError, ErrorCategory.REMOTE_API),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Classify a sync failure for alert routing."""
    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category
    return ErrorCategory.UNKNOWN


class SyncEventLogger:
    """Emit structured sync events via femtologging."""

    def log_org_started(self, *, organization: str, action: str) -> None:
        """Log the start of an action for one organization."""
        log_info(
            logger,
            "[%s] organization=%s action=%s",
            SyncEventType.ORG_STARTED,
            organization,
            action,
        )

    def log_org_completed(
        self, result: OrganizationSyncResult, duration: dt.timedelta
    ) -> None:
        """Log a successful action with repository counts.

        Parameters
        ----------
        result
            Outcome returned to the caller.
        duration
            Elapsed time of the action.

        """
        log_info(
            logger,
            "[%s] organization=%s action=%s repositories_listed=%d "
            "repositories_qualified=%d duration_s=%.3f",
            SyncEventType.ORG_COMPLETED,
            result.organization,
            result.action,
            result.repositories_listed,
            result.repositories_qualified,
            duration.total_seconds(),
        )

    def log_org_failed(
        self,
        *,
        organization: str,
        action: str,
        error: BaseException,
        duration: dt.timedelta,
    ) -> None:
        """Log a failed action with error classification and exc_info."""
        log_error(
            logger,
            "[%s] organization=%s action=%s error_type=%s category=%s "
            "error=%s duration_s=%.3f",
            SyncEventType.ORG_FAILED,
            organization,
            action,
            type(error).__name__,
            categorize_error(error),
            error,
            duration.total_seconds(),
            exc_info=error,
        )

    def log_poll_started(self, *, organizations: typ.Sequence[str]) -> None:
        """Log the start of a poll cycle."""
        log_info(
            logger,
            "[%s] organizations=%s",
            SyncEventType.POLL_STARTED,
            ",".join(organizations),
        )

    def log_poll_completed(self, *, organizations: int, duration: dt.timedelta) -> None:
        """Log the end of a successful poll cycle."""
        log_info(
            logger,
            "[%s] organizations=%d duration_s=%.3f",
            SyncEventType.POLL_COMPLETED,
            organizations,
            duration.total_seconds(),
        )

    def log_poll_failed(self, *, error: BaseException, duration: dt.timedelta) -> None:
        """Log a failed poll cycle."""
        log_error(
            logger,
            "[%s] error_type=%s category=%s error=%s duration_s=%.3f",
            SyncEventType.POLL_FAILED,
            type(error).__name__,
            categorize_error(error),
            error,
            duration.total_seconds(),
            exc_info=error,
        )
