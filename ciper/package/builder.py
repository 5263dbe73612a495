"""Build package descriptors from ``package.json`` manifests.

The builder is a pure function of the manifest and an optional repository
hint. It resolves the repository address first, derives the slug and job
name from it, then layers the remaining manifest keys underneath the explicit
fields so that the explicit fields always win.
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from ciper.common.slug import address_slug

from .errors import PackageDescriptorError
from .models import PackageDescriptor

DEFAULT_RUNTIME_VERSION = "4.2"

_SCOPE_MARKER = "@"
_SCOPE_SEPARATOR = "/"
_FLAT_SEPARATOR = "-"
_SHORTHAND_PREFIX = "github:"
_EXPLICIT_KEYS = frozenset(
    {
        "repo",
        "short",
        "name",
        "node",
        "short_name",
        "job_name",
        "runtime_version",
    }
)


def normalize_job_name(name: str) -> str:
    """Flatten a scoped package name into a Jenkins-safe job name.

    Examples
    --------
    >>> normalize_job_name("@scope/thing")
    'scope-thing'
    >>> normalize_job_name("thing")
    'thing'

    """
    if not name.startswith(_SCOPE_MARKER):
        return name
    return _FLAT_SEPARATOR.join(name[1:].split(_SCOPE_SEPARATOR))


def _string_or_none(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _manifest_repository(manifest: cabc.Mapping[str, typ.Any]) -> str | None:
    """Return the repository address declared by the manifest, if any."""
    explicit = _string_or_none(manifest.get("repo"))
    if explicit is not None:
        return explicit

    repository = manifest.get("repository")
    if isinstance(repository, cabc.Mapping):
        declared = _string_or_none(repository.get("url"))
    else:
        declared = _string_or_none(repository)
    if declared is None:
        return None
    return declared.removeprefix(_SHORTHAND_PREFIX)


def _resolve_repo(
    manifest: cabc.Mapping[str, typ.Any], repo_hint: str | None
) -> tuple[str, str]:
    """Return ``(repo, short_name)`` for the manifest."""
    repo = _string_or_none(repo_hint) or _manifest_repository(manifest)
    if repo is None:
        raise PackageDescriptorError.missing_repository(manifest.get("name"))

    short_name = _string_or_none(manifest.get("short"))
    if short_name is None:
        try:
            short_name = address_slug(repo)
        except ValueError as exc:
            raise PackageDescriptorError.invalid_repository(repo) from exc
    return repo, short_name


def _resolve_runtime_version(manifest: cabc.Mapping[str, typ.Any]) -> str:
    for key in ("engines", "engine"):
        engines = manifest.get(key)
        if isinstance(engines, cabc.Mapping):
            node = _string_or_none(engines.get("node"))
            if node is not None:
                return node
    return DEFAULT_RUNTIME_VERSION


def build_package(
    manifest: cabc.Mapping[str, typ.Any],
    repo_hint: str | None = None,
) -> PackageDescriptor:
    """Derive a :class:`PackageDescriptor` from a manifest.

    Parameters
    ----------
    manifest
        Parsed ``package.json`` (or any mapping with the same keys).
    repo_hint
        Repository address that takes precedence over the manifest's own
        ``repo``/``repository`` fields. The qualifier passes the address the
        manifest was fetched from.

    Returns
    -------
    PackageDescriptor
        Descriptor with ``extra`` holding every manifest key that is not an
        explicit field.

    Raises
    ------
    PackageDescriptorError
        If no repository address can be resolved, or the resolved address
        has no ``owner/name`` components.

    """
    repo, short_name = _resolve_repo(manifest, repo_hint)

    name = _string_or_none(manifest.get("name"))
    if name is None:
        name = short_name.rsplit("/", 1)[-1]

    extra = {
        key: value for key, value in manifest.items() if key not in _EXPLICIT_KEYS
    }
    return PackageDescriptor(
        repo=repo,
        short_name=short_name,
        job_name=normalize_job_name(name),
        runtime_version=_resolve_runtime_version(manifest),
        extra=extra,
    )


def coerce_package(
    value: PackageDescriptor | cabc.Mapping[str, typ.Any],
) -> PackageDescriptor:
    """Return ``value`` as a descriptor, building one from a manifest mapping."""
    if isinstance(value, PackageDescriptor):
        return value
    return build_package(value)
