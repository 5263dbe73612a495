"""Reconcile every repository of one or more GitHub organizations.

Each action runs the same pipeline per organization:

1. list the organization's repositories;
2. qualify each repository by its ``package.json`` (bounded concurrency);
3. drop repositories that did not qualify;
4. apply the action to each remaining package (bounded concurrency);
5. emit the action's lifecycle event.

A failing stage stops scheduling new work, lets the calls already in flight
finish, and propagates the first error. No success event is emitted then.
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from ciper.common.concurrency import (
    DEFAULT_LIMIT,
    InvalidLimitError,
    each_limit,
    map_limit,
    run_parallel,
)
from ciper.common.time import utcnow
from ciper.errors import ConfigError
from ciper.logging import get_logger, log_debug
from ciper.package import PackageDescriptor, coerce_package

from .events import EventChannel, LifecycleEvent, SyncEvent
from .models import OrganizationSyncResult
from .observability import SyncEventLogger

if typ.TYPE_CHECKING:
    from ciper.github.client import SourceControlClient
    from ciper.github.qualifier import RepositoryQualifier
    from ciper.github.webhooks import WebhookReconciler
    from ciper.jenkins.jobs import JobReconciler

logger = get_logger(__name__)

type PackageInput = PackageDescriptor | cabc.Mapping[str, typ.Any]
type PackageAction = cabc.Callable[[PackageDescriptor], cabc.Awaitable[object]]
type OrganizationRun = cabc.Callable[[str], cabc.Awaitable[OrganizationSyncResult]]


class SyncOrchestrator:
    """Drive the webhook and job reconcilers across organizations.

    Parameters
    ----------
    client
        GitHub client used to list repositories.
    qualifier
        Turns repository addresses into package descriptors.
    webhooks
        Webhook reconciler for the managed trigger hooks.
    jobs
        Jenkins job reconciler.
    organizations
        Organizations acted on when a call does not name its own.
    limit
        Maximum number of in-flight repository operations per stage.
    events
        Channel receiving the per-organization lifecycle events.

    """

    def __init__(  # noqa: PLR0913 - collaborators are injected explicitly
        self,
        client: SourceControlClient,
        *,
        qualifier: RepositoryQualifier,
        webhooks: WebhookReconciler,
        jobs: JobReconciler,
        organizations: cabc.Sequence[str] = (),
        limit: int = DEFAULT_LIMIT,
        events: EventChannel | None = None,
        event_logger: SyncEventLogger | None = None,
    ) -> None:
        """Wire the orchestrator to its collaborators."""
        if limit < 1:
            raise InvalidLimitError(limit)
        self._client = client
        self._qualifier = qualifier
        self._webhooks = webhooks
        self._jobs = jobs
        self._organizations = tuple(organizations)
        self._limit = limit
        self._events = events or EventChannel()
        self._event_logger = event_logger or SyncEventLogger()

    @property
    def organizations(self) -> tuple[str, ...]:
        """Return the configured organizations."""
        return self._organizations

    @property
    def events(self) -> EventChannel:
        """Return the lifecycle event channel."""
        return self._events

    def resolve_organizations(
        self, organizations: str | cabc.Sequence[str] | None = None
    ) -> tuple[str, ...]:
        """Return the organizations to act on.

        Explicit organizations override the configured ones; a single name
        is accepted in place of a sequence.

        Raises
        ------
        ConfigError
            If neither the call nor the configuration names an organization.

        """
        if isinstance(organizations, str):
            resolved: tuple[str, ...] = (organizations,)
        else:
            resolved = tuple(organizations or self._organizations)
        if not resolved:
            raise ConfigError.no_organizations()
        return resolved

    async def sync_orgs(
        self, organizations: str | cabc.Sequence[str] | None = None
    ) -> list[OrganizationSyncResult]:
        """Run :meth:`sync` for each organization with bounded concurrency."""
        orgs = self.resolve_organizations(organizations)
        log_debug(logger, "sync orgs start %s", ",".join(orgs))
        results = await map_limit(orgs, self.sync, self._limit)
        log_debug(logger, "sync orgs finish %s", ",".join(orgs))
        return results

    async def sync(self, organization: str) -> OrganizationSyncResult:
        """Set up webhooks and jobs for every qualifying repository."""
        return await self._generate(LifecycleEvent.SYNC, self.setup)(organization)

    async def unsync(self, organization: str) -> OrganizationSyncResult:
        """Remove webhooks and jobs from every qualifying repository."""
        return await self._generate(LifecycleEvent.UNSYNC, self.unsetup)(organization)

    async def resync(self, organization: str) -> OrganizationSyncResult:
        """Patch the existing job of every qualifying repository."""
        return await self._generate(LifecycleEvent.RESYNC, self.update)(organization)

    async def setup(self, pkg: PackageInput) -> None:
        """Ensure the webhooks and create the job of one package."""
        package = coerce_package(pkg)
        log_debug(logger, "setup:start %s", package.repo)
        await run_parallel(
            self._webhooks.ensure(package.repo),
            self._jobs.create(package),
        )
        log_debug(logger, "setup:finish %s", package.repo)

    async def unsetup(self, pkg: PackageInput) -> None:
        """Remove the webhooks and delete the job of one package."""
        package = coerce_package(pkg)
        log_debug(logger, "unsetup:start %s", package.repo)
        await run_parallel(
            self._webhooks.remove(package.repo),
            self._jobs.delete(package),
        )
        log_debug(logger, "unsetup:finish %s", package.repo)

    async def update(self, pkg: PackageInput) -> None:
        """Patch the job of one package."""
        await self._jobs.update(coerce_package(pkg))

    def _generate(self, kind: LifecycleEvent, action: PackageAction) -> OrganizationRun:
        """Return the organization pipeline parameterised by ``action``."""

        async def run(organization: str) -> OrganizationSyncResult:
            started_at = utcnow()
            self._event_logger.log_org_started(
                organization=organization, action=kind.value
            )
            try:
                result = await self._run_pipeline(organization, kind, action)
            except Exception as exc:
                self._event_logger.log_org_failed(
                    organization=organization,
                    action=kind.value,
                    error=exc,
                    duration=utcnow() - started_at,
                )
                raise

            self._event_logger.log_org_completed(result, utcnow() - started_at)
            self._events.emit(SyncEvent(kind=kind, organization=organization))
            return result

        return run

    async def _run_pipeline(
        self,
        organization: str,
        kind: LifecycleEvent,
        action: PackageAction,
    ) -> OrganizationSyncResult:
        repositories = await self._client.list_repositories(
            organization, organization=True
        )
        addresses = [repository.ssh_url for repository in repositories]

        qualified = await map_limit(addresses, self._qualifier.qualify, self._limit)
        packages = tuple(pkg for pkg in qualified if pkg is not None)

        await each_limit(packages, action, self._limit)
        return OrganizationSyncResult(
            organization=organization,
            action=kind.value,
            repositories_listed=len(addresses),
            packages=packages,
        )
