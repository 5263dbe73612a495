"""In-memory GitHub and Jenkins doubles implementing the client protocols."""

from __future__ import annotations

import asyncio
import base64
import dataclasses
import typing as typ

import msgspec

from ciper.github.errors import GitHubAPIError, GitHubFetchError
from ciper.github.models import FileContents, RepositorySummary, Webhook
from ciper.jenkins.errors import JenkinsAPIError

if typ.TYPE_CHECKING:
    from ciper.github.models import WebhookSpec

_HTTP_NOT_FOUND = 404


def encode_manifest(manifest: object) -> str:
    """Return ``manifest`` as the base64 JSON GitHub's contents API returns."""
    return base64.b64encode(msgspec.json.encode(manifest)).decode("ascii")


def ssh_url(owner: str, name: str) -> str:
    """Return the GitHub ssh address of ``owner/name``."""
    return f"git@github.com:{owner}/{name}.git"


@dataclasses.dataclass(slots=True)
class FakeGitHub:
    """GitHub double backed by dictionaries.

    ``files`` maps repository addresses to base64 ``package.json`` content;
    a missing entry behaves like a 404. ``fetch_errors`` and
    ``hook_errors`` inject failures per repository address.
    """

    repositories: dict[str, list[str]] = dataclasses.field(default_factory=dict)
    files: dict[str, str] = dataclasses.field(default_factory=dict)
    hooks: dict[str, list[Webhook]] = dataclasses.field(default_factory=dict)
    fetch_errors: dict[str, Exception] = dataclasses.field(default_factory=dict)
    hook_errors: dict[str, Exception] = dataclasses.field(default_factory=dict)
    delete_not_found: set[int] = dataclasses.field(default_factory=set)
    fetch_delay_s: float = 0.0
    calls: list[tuple[str, str]] = dataclasses.field(default_factory=list)
    manifest_paths: list[str] = dataclasses.field(default_factory=list)
    created: list[tuple[str, WebhookSpec]] = dataclasses.field(default_factory=list)
    deleted: list[tuple[str, int]] = dataclasses.field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0
    _next_hook_id: int = 1

    def add_repository(
        self, owner: str, name: str, manifest: object | None = None
    ) -> str:
        """Register a repository, optionally with a manifest, and return its address."""
        address = ssh_url(owner, name)
        self.repositories.setdefault(owner, []).append(address)
        if manifest is not None:
            self.files[address] = encode_manifest(manifest)
        return address

    def add_hook(self, repo: str, name: str) -> Webhook:
        """Register an existing hook on ``repo``."""
        hook = Webhook(id=self._next_hook_id, name=name)
        self._next_hook_id += 1
        self.hooks.setdefault(repo, []).append(hook)
        return hook

    async def list_repositories(
        self, owner: str, *, organization: bool = True
    ) -> list[RepositorySummary]:
        """Return the registered repositories of ``owner``."""
        self.calls.append(("list_repositories", owner))
        if owner in self.fetch_errors:
            raise self.fetch_errors[owner]
        del organization
        return [
            RepositorySummary(name=address.rsplit("/", 1)[-1], ssh_url=address)
            for address in self.repositories.get(owner, [])
        ]

    async def get_file_contents(self, repo: str, path: str) -> FileContents:
        """Return the manifest of ``repo`` while tracking concurrency."""
        self.calls.append(("get_file_contents", repo))
        self.manifest_paths.append(path)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.fetch_delay_s)
            if repo in self.fetch_errors:
                raise self.fetch_errors[repo]
            if repo not in self.files:
                raise GitHubFetchError.http_error(_HTTP_NOT_FOUND, path)
            return FileContents(content=self.files[repo], path=path)
        finally:
            self.in_flight -= 1

    async def list_webhooks(self, repo: str) -> list[Webhook]:
        """Return the hooks registered on ``repo``."""
        self.calls.append(("list_webhooks", repo))
        if repo in self.hook_errors:
            raise self.hook_errors[repo]
        return list(self.hooks.get(repo, []))

    async def create_webhook(self, repo: str, spec: WebhookSpec) -> None:
        """Record and register a new hook."""
        self.calls.append(("create_webhook", repo))
        self.created.append((repo, spec))
        self.add_hook(repo, spec.name)

    async def delete_webhook(self, repo: str, hook_id: int) -> None:
        """Remove a hook, or fail with not-found for ids in ``delete_not_found``."""
        self.calls.append(("delete_webhook", repo))
        if hook_id in self.delete_not_found:
            raise GitHubAPIError.http_error(_HTTP_NOT_FOUND, f"hooks/{hook_id}")
        self.deleted.append((repo, hook_id))
        self.hooks[repo] = [
            hook for hook in self.hooks.get(repo, []) if hook.id != hook_id
        ]


@dataclasses.dataclass(slots=True)
class FakeJenkins:
    """Jenkins double storing job definitions by id."""

    jobs: dict[str, str] = dataclasses.field(default_factory=dict)
    calls: list[tuple[str, str]] = dataclasses.field(default_factory=list)
    create_error: Exception | None = None

    async def create_job(self, job_id: str, config_xml: str) -> None:
        """Store a job, failing like Jenkins when the id is taken."""
        self.calls.append(("create_job", job_id))
        if self.create_error is not None:
            raise self.create_error
        if job_id in self.jobs:
            raise JenkinsAPIError.already_exists_error(job_id, 400)
        self.jobs[job_id] = config_xml

    async def get_job_config(self, job_id: str) -> str | None:
        """Return a stored definition, or ``None``."""
        self.calls.append(("get_job_config", job_id))
        return self.jobs.get(job_id)

    async def set_job_config(self, job_id: str, config_xml: str) -> None:
        """Overwrite a stored definition."""
        self.calls.append(("set_job_config", job_id))
        self.jobs[job_id] = config_xml

    async def destroy_job(self, job_id: str) -> None:
        """Remove a stored job, failing with not-found if absent."""
        self.calls.append(("destroy_job", job_id))
        if job_id not in self.jobs:
            raise JenkinsAPIError.not_found_error(job_id)
        del self.jobs[job_id]

    def calls_to(self, operation: str) -> list[str]:
        """Return the job ids passed to ``operation``."""
        return [job_id for name, job_id in self.calls if name == operation]
