"""GitHub REST client used for repository discovery and webhook management."""

from __future__ import annotations

import dataclasses
import itertools
import typing as typ
import urllib.parse

import httpx
import msgspec

from ciper.common.slug import parse_repository_address

from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubFetchError,
    GitHubResponseShapeError,
)
from .models import FileContents, RepositorySummary, Webhook, WebhookSpec

_HTTP_ERROR_STATUS_THRESHOLD = 400


class SourceControlClient(typ.Protocol):
    """Interface for the GitHub operations the reconcilers depend on."""

    async def list_repositories(
        self, owner: str, *, organization: bool = True
    ) -> list[RepositorySummary]:
        """Return every repository owned by an organization or user."""
        ...

    async def get_file_contents(self, repo: str, path: str) -> FileContents:
        """Return a file from the repository's default branch."""
        ...

    async def list_webhooks(self, repo: str) -> list[Webhook]:
        """Return every webhook registered on the repository."""
        ...

    async def create_webhook(self, repo: str, spec: WebhookSpec) -> None:
        """Register a webhook on the repository."""
        ...

    async def delete_webhook(self, repo: str, hook_id: int) -> None:
        """Delete a webhook from the repository."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Configuration for the GitHub REST API client.

    ``tokens`` are used round-robin, one per request, to spread rate limits.
    """

    tokens: tuple[str, ...]
    api_url: str = "https://api.github.com"
    timeout_s: float = 20.0
    user_agent: str = "ciper/0.1"
    per_page: int = 100


def _repo_path(repo: str) -> str:
    owner, name = parse_repository_address(repo)
    return f"/repos/{urllib.parse.quote(owner)}/{urllib.parse.quote(name)}"


class GitHubRestClient:
    """httpx implementation of :class:`SourceControlClient`."""

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        tokens = tuple(token.strip() for token in config.tokens if token.strip())
        if not tokens:
            raise GitHubConfigError.empty_tokens()

        self._config = config
        self._tokens = itertools.cycle(tokens)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "User-Agent": config.user_agent,
                "Accept": "application/vnd.github+json",
            },
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def list_repositories(
        self, owner: str, *, organization: bool = True
    ) -> list[RepositorySummary]:
        """Return every repository of ``owner``, following pagination links."""
        scope = "orgs" if organization else "users"
        path = f"/{scope}/{urllib.parse.quote(owner)}/repos"
        return await self._get_all(path, RepositorySummary, fetch=True)

    async def get_file_contents(self, repo: str, path: str) -> FileContents:
        """Return ``path`` from the default branch of ``repo``.

        Raises
        ------
        GitHubFetchError
            If the file does not exist (``not_found`` is set) or the request
            fails.

        """
        request_path = f"{_repo_path(repo)}/contents/{urllib.parse.quote(path)}"
        response = await self._request("GET", request_path, fetch=True)
        return self._decode(response, FileContents, request_path)

    async def list_webhooks(self, repo: str) -> list[Webhook]:
        """Return every webhook registered on ``repo``."""
        return await self._get_all(f"{_repo_path(repo)}/hooks", Webhook, fetch=False)

    async def create_webhook(self, repo: str, spec: WebhookSpec) -> None:
        """Register the webhook described by ``spec`` on ``repo``."""
        await self._request(
            "POST",
            f"{_repo_path(repo)}/hooks",
            fetch=False,
            json=msgspec.to_builtins(spec),
        )

    async def delete_webhook(self, repo: str, hook_id: int) -> None:
        """Delete webhook ``hook_id`` from ``repo``."""
        await self._request(
            "DELETE", f"{_repo_path(repo)}/hooks/{hook_id}", fetch=False
        )

    async def _get_all[T](
        self, path: str, item_type: type[T], *, fetch: bool
    ) -> list[T]:
        """Collect every page of a list endpoint."""
        items: list[T] = []
        url: str | None = path
        params: dict[str, typ.Any] | None = {"per_page": self._config.per_page}
        while url is not None:
            response = await self._request("GET", url, fetch=fetch, params=params)
            items.extend(self._decode(response, list[item_type], path))
            url = response.links.get("next", {}).get("url")
            # Link URLs already carry the query string.
            params = None
        return items

    async def _request(
        self,
        method: str,
        path_or_url: str,
        *,
        fetch: bool,
        params: dict[str, typ.Any] | None = None,
        json: object | None = None,
    ) -> httpx.Response:
        """Send an authenticated request and map failures to GitHub errors."""
        error_type = GitHubFetchError if fetch else GitHubAPIError
        url = (
            path_or_url
            if path_or_url.startswith(("http://", "https://"))
            else f"{self._config.api_url.rstrip('/')}{path_or_url}"
        )
        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                json=json,
                headers={"Authorization": f"token {next(self._tokens)}"},
            )
        except httpx.RequestError as exc:
            raise error_type.network_error(path_or_url, str(exc)) from exc

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise error_type.http_error(response.status_code, path_or_url)
        return response

    @staticmethod
    def _decode[T](response: httpx.Response, target: type[T], path: str) -> T:
        try:
            return msgspec.json.decode(response.content, type=target)
        except msgspec.DecodeError as exc:
            raise GitHubResponseShapeError.invalid(path, str(exc)) from exc
