"""Package descriptors: the per-repository reconciliation record.

Usage
-----
Build a descriptor from a parsed ``package.json``::

    from ciper.package import build_package

    pkg = build_package(
        {"name": "@scope/thing", "repository": {"url": "git@github.com:o/thing"}}
    )
    assert pkg.job_name == "scope-thing"
    assert pkg.job_id == "scope-thing-build-pr"

"""

from ciper.package.builder import (
    DEFAULT_RUNTIME_VERSION,
    build_package,
    coerce_package,
    normalize_job_name,
)
from ciper.package.errors import PackageDescriptorError
from ciper.package.models import PackageDescriptor

__all__ = [
    "DEFAULT_RUNTIME_VERSION",
    "PackageDescriptor",
    "PackageDescriptorError",
    "build_package",
    "coerce_package",
    "normalize_job_name",
]
