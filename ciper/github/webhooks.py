"""Keep the Jenkins trigger webhooks registered on repositories.

Two hooks are managed: the ``jenkins`` hook that triggers builds on push, and
the ``web`` hook that feeds the pull-request builder. Hooks with any other
name are never touched.
"""

from __future__ import annotations

import typing as typ
import urllib.parse

from ciper.common.concurrency import run_parallel
from ciper.errors import RemoteAPIError
from ciper.logging import get_logger, log_debug, log_info

from .models import WebhookSpec

if typ.TYPE_CHECKING:
    from .client import SourceControlClient
    from .models import Webhook

logger = get_logger(__name__)

JENKINS_HOOK_NAME = "jenkins"
WEB_HOOK_NAME = "web"
MANAGED_HOOK_NAMES = frozenset({JENKINS_HOOK_NAME, WEB_HOOK_NAME})

PUSH_HOOK_PATH = "/github_webhook/"
PULL_REQUEST_HOOK_PATH = "/ghprbhook/"
PUSH_EVENTS = ("push",)
PULL_REQUEST_EVENTS = (
    "pull_request",
    "pull_request_review_comment",
    "issue_comment",
)


def is_managed_hook(name: str) -> bool:
    """Return True for hook names this reconciler owns.

    Any other hook on the repository is assumed to be someone else's.
    """
    return name in MANAGED_HOOK_NAMES


def managed_hook_specs(jenkins_url: str) -> tuple[WebhookSpec, WebhookSpec]:
    """Return the push and pull-request hook definitions for a Jenkins server.

    The hook endpoints are resolved against the server root, so any path on
    ``jenkins_url`` is replaced.
    """
    return (
        WebhookSpec(
            name=JENKINS_HOOK_NAME,
            config={
                "jenkins_hook_url": urllib.parse.urljoin(jenkins_url, PUSH_HOOK_PATH)
            },
            events=PUSH_EVENTS,
        ),
        WebhookSpec(
            name=WEB_HOOK_NAME,
            config={"url": urllib.parse.urljoin(jenkins_url, PULL_REQUEST_HOOK_PATH)},
            events=PULL_REQUEST_EVENTS,
        ),
    )


class WebhookReconciler:
    """Create and remove the managed webhooks of a repository."""

    def __init__(self, client: SourceControlClient, jenkins_url: str) -> None:
        """Bind the reconciler to a GitHub client and Jenkins server URL."""
        self._client = client
        self._specs = managed_hook_specs(jenkins_url)

    async def ensure(self, repo: str) -> bool:
        """Create the managed hooks unless the repository already has them.

        The check is by count only: two or more managed hooks means the
        repository is treated as synced, whatever their configuration.

        Returns
        -------
        bool
            True when hooks were created, False when the call was a no-op.

        Raises
        ------
        RemoteAPIError
            If listing or creating hooks fails.

        """
        log_debug(logger, "hooks:start %s", repo)
        hooks = await self._client.list_webhooks(repo)
        managed = [hook.name for hook in hooks if is_managed_hook(hook.name)]
        if len(managed) >= len(self._specs):
            log_debug(logger, "hooks:noop %s already synced", repo)
            return False

        await run_parallel(
            *(self._client.create_webhook(repo, spec) for spec in self._specs)
        )
        log_info(logger, "Created %d webhooks on %s", len(self._specs), repo)
        return True

    async def remove(self, repo: str) -> int:
        """Delete every managed hook from the repository.

        Hooks that disappear between listing and deletion are ignored.

        Returns
        -------
        int
            Number of managed hooks found on the repository.

        """
        log_debug(logger, "hooks:delete:start %s", repo)
        hooks = await self._client.list_webhooks(repo)
        managed = [hook for hook in hooks if is_managed_hook(hook.name)]
        await run_parallel(*(self._delete(repo, hook) for hook in managed))
        log_debug(logger, "hooks:delete:finish %s (%d hooks)", repo, len(managed))
        return len(managed)

    async def _delete(self, repo: str, hook: Webhook) -> None:
        try:
            await self._client.delete_webhook(repo, hook.id)
        except RemoteAPIError as exc:
            if not exc.not_found:
                raise
            log_debug(logger, "hooks:delete %s hook %d already gone", repo, hook.id)
