"""ciper keeps GitHub organizations wired to Jenkins pull-request builds.

For every repository with a ``package.json`` it ensures the Jenkins trigger
webhooks exist on GitHub and a templated ``<name>-build-pr`` job exists on
Jenkins, and it can undo or patch that setup.
"""

from ciper.config import CiperConfig
from ciper.errors import ConfigError, RemoteAPIError, RemoteFetchError
from ciper.factory import CiperRuntime, build_runtime
from ciper.package import PackageDescriptor, build_package
from ciper.sync import OrganizationSyncResult, Poller, SyncOrchestrator

__all__ = [
    "CiperConfig",
    "CiperRuntime",
    "ConfigError",
    "OrganizationSyncResult",
    "PackageDescriptor",
    "Poller",
    "RemoteAPIError",
    "RemoteFetchError",
    "SyncOrchestrator",
    "build_package",
    "build_runtime",
]
