"""Errors raised while building package descriptors."""

from __future__ import annotations

from ciper.errors import CiperError


class PackageDescriptorError(CiperError, ValueError):
    """Raised when a manifest cannot be turned into a package descriptor."""

    @classmethod
    def missing_repository(cls, name: object) -> PackageDescriptorError:
        """Return an error for a manifest with no repository address."""
        return cls(f"Cannot resolve a repository address for package {name!r}")

    @classmethod
    def invalid_repository(cls, repo: str) -> PackageDescriptorError:
        """Return an error for an address without owner/name components."""
        return cls(f"Repository address has no owner/name: {repo!r}")
