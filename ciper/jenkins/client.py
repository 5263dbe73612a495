"""Jenkins remote API client for job definitions."""

from __future__ import annotations

import dataclasses
import typing as typ
import urllib.parse

import httpx

from .errors import JenkinsAPIError

_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_BAD_REQUEST = 400
_HTTP_NOT_FOUND = 404
_ALREADY_EXISTS_MARKER = "already exists"
_XML_CONTENT_TYPE = "application/xml"


class CIServerClient(typ.Protocol):
    """Interface for the Jenkins operations the job reconciler depends on."""

    async def create_job(self, job_id: str, config_xml: str) -> None:
        """Create a job from an XML definition."""
        ...

    async def get_job_config(self, job_id: str) -> str | None:
        """Return the job's XML definition, or ``None`` if it does not exist."""
        ...

    async def set_job_config(self, job_id: str, config_xml: str) -> None:
        """Replace the job's XML definition."""
        ...

    async def destroy_job(self, job_id: str) -> None:
        """Delete the job."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class JenkinsConfig:
    """Connection settings for a Jenkins server.

    ``user`` and ``api_token`` enable HTTP basic authentication. API tokens
    are exempt from CSRF crumbs, so no crumb is requested.
    """

    url: str
    user: str | None = None
    api_token: str | None = dataclasses.field(default=None, repr=False)
    timeout_s: float = 30.0
    user_agent: str = "ciper/0.1"


def _job_path(job_id: str) -> str:
    return f"/job/{urllib.parse.quote(job_id, safe='')}"


def _reports_existing_job(response: httpx.Response) -> bool:
    if response.status_code != _HTTP_BAD_REQUEST:
        return False
    detail = response.headers.get("X-Error") or response.text
    return _ALREADY_EXISTS_MARKER in detail


class JenkinsClient:
    """httpx implementation of :class:`CIServerClient`."""

    def __init__(
        self,
        config: JenkinsConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided server configuration."""
        self._config = config
        self._base_url = config.url.rstrip("/")
        self._owns_client = http_client is None
        self._auth: httpx.Auth | None = (
            httpx.BasicAuth(config.user, config.api_token)
            if config.user and config.api_token
            else None
        )
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={"User-Agent": config.user_agent},
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def create_job(self, job_id: str, config_xml: str) -> None:
        """Create ``job_id`` from ``config_xml``.

        Raises
        ------
        JenkinsAPIError
            With ``already_exists`` set when the job name is taken.

        """
        response = await self._send(
            "POST",
            "/createItem",
            job_id,
            params={"name": job_id},
            content=config_xml,
        )
        if _reports_existing_job(response):
            raise JenkinsAPIError.already_exists_error(job_id, response.status_code)
        self._raise_for_status(response, job_id)

    async def get_job_config(self, job_id: str) -> str | None:
        """Return the ``config.xml`` of ``job_id``, or ``None`` if it is missing."""
        response = await self._send("GET", f"{_job_path(job_id)}/config.xml", job_id)
        if response.status_code == _HTTP_NOT_FOUND:
            return None
        self._raise_for_status(response, job_id)
        return response.text or None

    async def set_job_config(self, job_id: str, config_xml: str) -> None:
        """Overwrite the ``config.xml`` of ``job_id``."""
        response = await self._send(
            "POST",
            f"{_job_path(job_id)}/config.xml",
            job_id,
            content=config_xml,
        )
        self._raise_for_status(response, job_id)

    async def destroy_job(self, job_id: str) -> None:
        """Delete ``job_id``.

        Raises
        ------
        JenkinsAPIError
            With ``not_found`` set when the job does not exist.

        """
        response = await self._send("POST", f"{_job_path(job_id)}/doDelete", job_id)
        if response.status_code == _HTTP_NOT_FOUND:
            raise JenkinsAPIError.not_found_error(job_id)
        self._raise_for_status(response, job_id)

    async def _send(
        self,
        method: str,
        path: str,
        job_id: str,
        *,
        params: dict[str, str] | None = None,
        content: str | None = None,
    ) -> httpx.Response:
        headers = {"Content-Type": _XML_CONTENT_TYPE} if content is not None else None
        try:
            return await self._client.request(
                method,
                f"{self._base_url}{path}",
                params=params,
                content=content.encode("utf-8") if content is not None else None,
                headers=headers,
                auth=self._auth or httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.RequestError as exc:
            raise JenkinsAPIError.network_error(job_id, str(exc)) from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response, job_id: str) -> None:
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise JenkinsAPIError.http_error(response.status_code, job_id)
