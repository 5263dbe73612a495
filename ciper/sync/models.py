"""Result objects returned by the sync orchestrator."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    from ciper.package import PackageDescriptor


@dataclasses.dataclass(frozen=True, slots=True)
class OrganizationSyncResult:
    """Summary of one action applied to one organization.

    ``repositories_listed`` counts every repository GitHub returned;
    ``packages`` holds the descriptors of the repositories that qualified and
    were acted upon.
    """

    organization: str
    action: str
    repositories_listed: int
    packages: tuple[PackageDescriptor, ...] = ()

    @property
    def repositories_qualified(self) -> int:
        """Return the number of repositories the action was applied to."""
        return len(self.packages)
