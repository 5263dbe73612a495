"""Create, patch and delete the pull-request build job of a package."""

from __future__ import annotations

import asyncio
import dataclasses
import typing as typ
from pathlib import Path
from xml.sax.saxutils import escape as xml_escape

from ciper.errors import ConfigError, RemoteAPIError
from ciper.logging import get_logger, log_debug, log_info

from .template import render

if typ.TYPE_CHECKING:
    from ciper.package import PackageDescriptor

    from .client import CIServerClient

logger = get_logger(__name__)

DEFAULT_TEMPLATE_PATH = (
    Path(__file__).resolve().parent.parent / "templates" / "build.xml"
)

PERMIT_ALL_DISABLED = "<permitAll>false</permitAll>"
PERMIT_ALL_ENABLED = "<permitAll>true</permitAll>"


@dataclasses.dataclass(frozen=True, slots=True)
class JobDefaults:
    """Process-wide template parameters shared by every job.

    Attributes
    ----------
    admins
        Jenkins users allowed to trigger and whitelist pull-request builds.
    organizations
        Organizations whose members may trigger builds.
    permit_all
        Let every contributor trigger builds even when organizations are
        configured.
    credentials_id
        Jenkins credentials used to clone repositories.
    github_auth_id
        Jenkins GitHub auth used by the pull-request builder.
    node_type
        Label of the build agents the job runs on.

    """

    admins: tuple[str, ...] = ()
    organizations: tuple[str, ...] = ()
    permit_all: bool = False
    credentials_id: str = ""
    github_auth_id: str = ""
    node_type: str = ""

    def template_params(self) -> dict[str, typ.Any]:
        """Return the defaults under their template placeholder names."""
        return {
            "admins": " ".join(self.admins),
            "orgs": " ".join(self.organizations),
            "permitAll": not self.organizations or self.permit_all,
            "credentialsId": self.credentials_id,
            "gitHubAuthId": self.github_auth_id,
            "nodeType": self.node_type,
        }


def job_params(defaults: JobDefaults, pkg: PackageDescriptor) -> dict[str, typ.Any]:
    """Layer the package's parameters over the process defaults."""
    return {**defaults.template_params(), **pkg.template_params()}


def enable_permit_all(config_xml: str) -> str:
    """Flip a disabled ``permitAll`` flag on in a job definition."""
    return config_xml.replace(PERMIT_ALL_DISABLED, PERMIT_ALL_ENABLED)


class JobReconciler:
    """Keep a package's Jenkins job in the desired state."""

    def __init__(
        self,
        client: CIServerClient,
        *,
        defaults: JobDefaults | None = None,
        template_path: Path = DEFAULT_TEMPLATE_PATH,
    ) -> None:
        """Bind the reconciler to a Jenkins client and a job template."""
        self._client = client
        self._defaults = defaults or JobDefaults()
        self._template_path = Path(template_path)

    async def render_job(self, pkg: PackageDescriptor) -> str:
        """Return the rendered job definition for ``pkg``.

        The template is read on every call so edits apply without a restart.

        Raises
        ------
        ConfigError
            If the template cannot be read.

        """
        try:
            template = await asyncio.to_thread(
                self._template_path.read_text, encoding="utf-8"
            )
        except OSError as exc:
            raise ConfigError.unreadable_template(
                str(self._template_path), exc.strerror or str(exc)
            ) from exc
        return render(template, job_params(self._defaults, pkg), escape=xml_escape)

    async def create(self, pkg: PackageDescriptor) -> bool:
        """Create the job for ``pkg``; an existing job counts as success.

        Returns
        -------
        bool
            True when Jenkins created the job, False when it already existed.

        """
        log_debug(logger, "jenkins:create %s - %s", pkg.repo, pkg.job_id)
        config_xml = await self.render_job(pkg)
        try:
            await self._client.create_job(pkg.job_id, config_xml)
        except RemoteAPIError as exc:
            if not exc.already_exists:
                raise
            log_debug(logger, "jenkins:create %s already exists", pkg.job_id)
            return False
        log_info(logger, "Created Jenkins job %s for %s", pkg.job_id, pkg.repo)
        return True

    async def update(self, pkg: PackageDescriptor) -> bool:
        """Enable ``permitAll`` on the existing job of ``pkg``.

        This is a literal patch of one flag, not a reconciliation of the whole
        definition. A missing job is a no-op.

        Returns
        -------
        bool
            True when the configuration was written back.

        """
        log_debug(logger, "jenkins:update %s - %s", pkg.repo, pkg.job_id)
        config_xml = await self._client.get_job_config(pkg.job_id)
        if not config_xml:
            log_debug(logger, "jenkins:update %s - No job config found", pkg.job_id)
            return False

        await self._client.set_job_config(pkg.job_id, enable_permit_all(config_xml))
        log_info(logger, "Updated Jenkins job %s", pkg.job_id)
        return True

    async def delete(self, pkg: PackageDescriptor) -> bool:
        """Delete the job of ``pkg``; a missing job counts as success.

        Returns
        -------
        bool
            True when a job was deleted.

        """
        try:
            await self._client.destroy_job(pkg.job_id)
        except RemoteAPIError as exc:
            if not exc.not_found:
                raise
            log_debug(logger, "jenkins:delete %s not found", pkg.job_id)
            return False
        log_info(logger, "Deleted Jenkins job %s", pkg.job_id)
        return True
