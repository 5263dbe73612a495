"""Decide whether a repository is a reconciliation target.

A repository qualifies when its default branch carries a ``package.json``
that decodes to a JSON object. Missing and malformed manifests are not
errors: the repository is simply skipped.
"""

from __future__ import annotations

import base64
import binascii
import typing as typ

import msgspec

from ciper.errors import RemoteFetchError
from ciper.logging import get_logger, log_debug
from ciper.package import PackageDescriptorError, build_package

from .errors import GitHubResponseShapeError

if typ.TYPE_CHECKING:
    from ciper.package import PackageDescriptor

    from .client import SourceControlClient

logger = get_logger(__name__)

MANIFEST_PATH = "package.json"


def decode_manifest(content: str) -> dict[str, typ.Any] | None:
    """Decode base64 transport content into a manifest object.

    Returns ``None`` when the content is not base64, not UTF-8 JSON, or not a
    JSON object.

    Examples
    --------
    >>> decode_manifest("eyJuYW1lIjogInRoaW5nIn0=")
    {'name': 'thing'}
    >>> decode_manifest("") is None
    True

    """
    try:
        raw = base64.b64decode(content)
    except (binascii.Error, ValueError):
        return None

    try:
        return msgspec.json.decode(raw, type=dict[str, typ.Any])
    except msgspec.DecodeError:
        return None


class RepositoryQualifier:
    """Turn repository addresses into package descriptors."""

    def __init__(
        self,
        client: SourceControlClient,
        *,
        manifest_path: str = MANIFEST_PATH,
    ) -> None:
        """Bind the qualifier to a GitHub client."""
        self._client = client
        self._manifest_path = manifest_path

    async def qualify(self, repo: str) -> PackageDescriptor | None:
        """Return the descriptor for ``repo``, or ``None`` if it does not qualify.

        Raises
        ------
        RemoteFetchError
            If fetching the manifest fails for any reason other than the
            file being absent or the response not describing a file.

        """
        log_debug(logger, "qualify:start %s", repo)
        try:
            contents = await self._client.get_file_contents(repo, self._manifest_path)
        except RemoteFetchError as exc:
            if not exc.not_found:
                raise
            log_debug(logger, "qualify:skip %s has no %s", repo, self._manifest_path)
            return None
        except GitHubResponseShapeError as exc:
            log_debug(logger, "qualify:skip %s: %s", repo, exc)
            return None

        manifest = decode_manifest(contents.content)
        if manifest is None:
            log_debug(logger, "qualify:skip %s has a malformed manifest", repo)
            return None

        try:
            pkg = build_package(manifest, repo)
        except PackageDescriptorError as exc:
            log_debug(logger, "qualify:skip %s: %s", repo, exc)
            return None

        log_debug(logger, "qualify:finish %s as %s", repo, pkg.job_name)
        return pkg
