"""GitHub client errors."""

from __future__ import annotations

from ciper.errors import ConfigError, RemoteAPIError, RemoteFailure, RemoteFetchError

_HTTP_NOT_FOUND = 404


class GitHubAPIError(RemoteAPIError):
    """Raised when GitHub rejects a webhook call or returns an error response."""

    @classmethod
    def http_error(cls, status_code: int, path: str) -> GitHubAPIError:
        """Return an error for a non-2xx HTTP response."""
        failure = (
            RemoteFailure.NOT_FOUND
            if status_code == _HTTP_NOT_FOUND
            else RemoteFailure.OTHER
        )
        return cls(
            f"GitHub REST HTTP {status_code} for {path}",
            status_code=status_code,
            failure=failure,
        )

    @classmethod
    def network_error(cls, path: str, detail: str) -> GitHubAPIError:
        """Return an error for a transport failure."""
        return cls(f"GitHub REST request to {path} failed: {detail}")


class GitHubFetchError(GitHubAPIError, RemoteFetchError):
    """Raised when listing repositories or fetching file contents fails."""


class GitHubResponseShapeError(GitHubAPIError):
    """Raised when a GitHub response body does not match the expected shape."""

    @classmethod
    def invalid(cls, path: str, detail: str) -> GitHubResponseShapeError:
        """Return an error for an undecodable response body."""
        return cls(f"Unexpected GitHub response for {path}: {detail}")


class GitHubConfigError(ConfigError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def empty_tokens(cls) -> GitHubConfigError:
        """Return an error when no usable token was provided."""
        return cls("At least one non-empty GitHub token is required")
