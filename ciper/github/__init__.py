"""GitHub side of the reconciliation: discovery, qualification and webhooks."""

from ciper.github.client import GitHubRestClient, GitHubRestConfig, SourceControlClient
from ciper.github.errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubFetchError,
    GitHubResponseShapeError,
)
from ciper.github.models import FileContents, RepositorySummary, Webhook, WebhookSpec
from ciper.github.qualifier import MANIFEST_PATH, RepositoryQualifier, decode_manifest
from ciper.github.webhooks import (
    MANAGED_HOOK_NAMES,
    WebhookReconciler,
    is_managed_hook,
    managed_hook_specs,
)

__all__ = [
    "MANAGED_HOOK_NAMES",
    "MANIFEST_PATH",
    "FileContents",
    "GitHubAPIError",
    "GitHubConfigError",
    "GitHubFetchError",
    "GitHubResponseShapeError",
    "GitHubRestClient",
    "GitHubRestConfig",
    "RepositoryQualifier",
    "RepositorySummary",
    "SourceControlClient",
    "Webhook",
    "WebhookReconciler",
    "WebhookSpec",
    "decode_manifest",
    "is_managed_hook",
    "managed_hook_specs",
]
