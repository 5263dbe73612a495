"""Jenkins side of the reconciliation: job templating and job lifecycle."""

from ciper.jenkins.client import CIServerClient, JenkinsClient, JenkinsConfig
from ciper.jenkins.errors import JenkinsAPIError
from ciper.jenkins.jobs import (
    DEFAULT_TEMPLATE_PATH,
    JobDefaults,
    JobReconciler,
    enable_permit_all,
    job_params,
)
from ciper.jenkins.template import format_value, render

__all__ = [
    "DEFAULT_TEMPLATE_PATH",
    "CIServerClient",
    "JenkinsAPIError",
    "JenkinsClient",
    "JenkinsConfig",
    "JobDefaults",
    "JobReconciler",
    "enable_permit_all",
    "format_value",
    "job_params",
    "render",
]
