"""Jenkins client errors."""

from __future__ import annotations

from ciper.errors import RemoteAPIError, RemoteFailure


class JenkinsAPIError(RemoteAPIError):
    """Raised when Jenkins rejects a job operation."""

    @classmethod
    def http_error(cls, status_code: int, job_id: str) -> JenkinsAPIError:
        """Return an error for a non-2xx HTTP response."""
        return cls(
            f"Jenkins HTTP {status_code} for job {job_id}", status_code=status_code
        )

    @classmethod
    def not_found_error(cls, job_id: str) -> JenkinsAPIError:
        """Return an error for a job that does not exist."""
        return cls(
            f"Jenkins job {job_id} not found",
            status_code=404,
            failure=RemoteFailure.NOT_FOUND,
        )

    @classmethod
    def already_exists_error(cls, job_id: str, status_code: int) -> JenkinsAPIError:
        """Return an error for a create call naming an existing job."""
        return cls(
            f"Jenkins job {job_id} already exists",
            status_code=status_code,
            failure=RemoteFailure.ALREADY_EXISTS,
        )

    @classmethod
    def network_error(cls, job_id: str, detail: str) -> JenkinsAPIError:
        """Return an error for a transport failure."""
        return cls(f"Jenkins request for job {job_id} failed: {detail}")
