"""Assemble a ready-to-run orchestrator from a :class:`CiperConfig`.

Usage
-----
Build, use and close a runtime::

    from ciper.config import CiperConfig
    from ciper.factory import build_runtime

    runtime = build_runtime(CiperConfig.from_env())
    try:
        await runtime.orchestrator.sync_orgs()
    finally:
        await runtime.aclose()

"""

from __future__ import annotations

import dataclasses
import typing as typ

from ciper.github import (
    GitHubRestClient,
    GitHubRestConfig,
    RepositoryQualifier,
    WebhookReconciler,
)
from ciper.jenkins import JenkinsClient, JenkinsConfig, JobDefaults, JobReconciler
from ciper.sync import EventChannel, Poller, SyncOrchestrator

if typ.TYPE_CHECKING:
    import httpx

    from ciper.config import CiperConfig

__all__ = ["CiperRuntime", "build_runtime"]


@dataclasses.dataclass(frozen=True, slots=True)
class CiperRuntime:
    """Orchestrator, poller and the HTTP clients they own."""

    orchestrator: SyncOrchestrator
    poller: Poller
    github: GitHubRestClient
    jenkins: JenkinsClient

    async def aclose(self) -> None:
        """Stop polling and close the HTTP clients."""
        self.poller.stop()
        await self.github.aclose()
        await self.jenkins.aclose()


def build_runtime(
    config: CiperConfig,
    *,
    github_http_client: httpx.AsyncClient | None = None,
    jenkins_http_client: httpx.AsyncClient | None = None,
) -> CiperRuntime:
    """Wire clients, reconcilers, orchestrator and poller for ``config``.

    Parameters
    ----------
    config
        Process configuration.
    github_http_client
        Optional pre-built httpx client for GitHub, mainly for tests.
    jenkins_http_client
        Optional pre-built httpx client for Jenkins, mainly for tests.

    Returns
    -------
    CiperRuntime
        Runtime whose poller is not yet started.

    """
    github = GitHubRestClient(
        GitHubRestConfig(tokens=config.github_tokens, api_url=config.github_api_url),
        http_client=github_http_client,
    )
    jenkins = JenkinsClient(
        JenkinsConfig(
            url=config.jenkins_url,
            user=config.jenkins_user,
            api_token=config.jenkins_token,
        ),
        http_client=jenkins_http_client,
    )
    defaults = JobDefaults(
        admins=config.admins,
        organizations=config.organizations,
        permit_all=config.permit_all,
        credentials_id=config.credentials_id,
        github_auth_id=config.github_auth_id,
        node_type=config.node_type,
    )
    events = EventChannel()
    orchestrator = SyncOrchestrator(
        github,
        qualifier=RepositoryQualifier(github),
        webhooks=WebhookReconciler(github, config.jenkins_url),
        jobs=JobReconciler(
            jenkins, defaults=defaults, template_path=config.template_path
        ),
        organizations=config.organizations,
        limit=config.limit,
        events=events,
    )
    poller = Poller(orchestrator, interval_s=config.poll_interval_s, events=events)
    return CiperRuntime(
        orchestrator=orchestrator,
        poller=poller,
        github=github,
        jenkins=jenkins,
    )
