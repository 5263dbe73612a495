"""Error taxonomy shared by the reconcilers and remote clients.

Remote failures carry a :class:`RemoteFailure` classification so reconcilers
can forgive the outcomes they treat as success (a job that already exists on
create, a job or manifest that does not exist) without knowing which service
raised the error.
"""

from __future__ import annotations

import enum


class RemoteFailure(enum.StrEnum):
    """Classification of a failed remote call."""

    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    OTHER = "other"


class CiperError(Exception):
    """Base class for ciper errors."""


class ConfigError(CiperError):
    """Raised when the process configuration cannot drive a reconciliation."""

    @classmethod
    def no_organizations(cls) -> ConfigError:
        """Return an error for a sync with no resolvable organizations."""
        return cls("Requires organizations: none were given or configured")

    @classmethod
    def missing_env(cls, name: str) -> ConfigError:
        """Return an error for a required environment variable that is unset."""
        return cls(f"{name} is required")

    @classmethod
    def invalid_value(cls, name: str, value: str, expected: str) -> ConfigError:
        """Return an error for an environment variable that cannot be parsed."""
        return cls(f"Invalid {name} value {value!r}: expected {expected}")

    @classmethod
    def unreadable_template(cls, path: str, detail: str) -> ConfigError:
        """Return an error for a job template that cannot be read."""
        return cls(f"Cannot read job template {path}: {detail}")


class RemoteAPIError(CiperError):
    """Raised when a call to GitHub or Jenkins fails."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        failure: RemoteFailure = RemoteFailure.OTHER,
    ) -> None:
        """Initialise with a message, optional HTTP status and classification."""
        self.status_code = status_code
        self.failure = failure
        super().__init__(message)

    @property
    def not_found(self) -> bool:
        """Return True when the remote entity does not exist."""
        return self.failure is RemoteFailure.NOT_FOUND

    @property
    def already_exists(self) -> bool:
        """Return True when the remote entity already exists."""
        return self.failure is RemoteFailure.ALREADY_EXISTS


class RemoteFetchError(RemoteAPIError):
    """Raised when listing repositories or fetching content fails."""
