"""Package descriptor model shared by every reconciliation step."""

from __future__ import annotations

import dataclasses
import types
import typing as typ

JOB_ID_SUFFIX = "build-pr"


@dataclasses.dataclass(frozen=True, slots=True)
class PackageDescriptor:
    """Canonical reconciliation target derived from a repository manifest.

    Instances are built fresh for every qualification or direct call and are
    never mutated afterwards; ``extra`` is exposed as a read-only mapping.

    Attributes
    ----------
    repo
        Transport address of the repository, used for every GitHub call.
    short_name
        ``owner/name`` slug of the repository.
    job_name
        Flat Jenkins-safe job name derived from the manifest ``name``.
    runtime_version
        Node version requested through the manifest ``engines`` field.
    extra
        Every other manifest key, kept verbatim for template interpolation.

    """

    repo: str
    short_name: str
    job_name: str
    runtime_version: str
    extra: typ.Mapping[str, typ.Any] = dataclasses.field(
        default_factory=lambda: types.MappingProxyType({})
    )

    def __post_init__(self) -> None:
        """Freeze ``extra`` so descriptors can be shared between tasks."""
        if not isinstance(self.extra, types.MappingProxyType):
            object.__setattr__(self, "extra", types.MappingProxyType(dict(self.extra)))

    @property
    def job_id(self) -> str:
        """Return the Jenkins job identifier for this package."""
        return f"{self.job_name}-{JOB_ID_SUFFIX}"

    def template_params(self) -> dict[str, typ.Any]:
        """Return template parameters with explicit fields layered over extras.

        Both the short placeholder names used by existing job templates
        (``repo``, ``short``, ``name``, ``node``) and the descriptive field
        names are provided.
        """
        explicit: dict[str, typ.Any] = {
            "repo": self.repo,
            "short": self.short_name,
            "name": self.job_name,
            "node": self.runtime_version,
            "short_name": self.short_name,
            "job_name": self.job_name,
            "runtime_version": self.runtime_version,
        }
        return {**self.extra, **explicit}
