"""Unit tests for repository slug and address parsing."""

from __future__ import annotations

import pytest

from ciper.common.slug import (
    address_slug,
    parse_repository_address,
    repo_slug,
)


def test_repo_slug_joins_owner_and_name() -> None:
    """Slugs are ``owner/name``."""
    assert repo_slug("org1", "thing") == "org1/thing"


@pytest.mark.parametrize(
    "address",
    [
        "git@github.com:org1/thing.git",
        "git@github.com:org1/thing",
        "ssh://git@github.com/org1/thing.git",
        "git+ssh://git@github.com/org1/thing.git",
        "https://github.com/org1/thing",
        "git+https://github.com/org1/thing.git",
        "https://ghe.example.test/mirror/org1/thing/",
        "org1/thing",
    ],
)
def test_parse_repository_address_variants(address: str) -> None:
    """Every supported address form resolves to the same owner and name."""
    assert parse_repository_address(address) == ("org1", "thing")


@pytest.mark.parametrize("address", ["", "thing", "https://github.com/thing"])
def test_parse_repository_address_rejects_short_paths(address: str) -> None:
    """Addresses without owner and name raise ValueError."""
    with pytest.raises(ValueError, match="Invalid repository address"):
        parse_repository_address(address)


def test_address_slug() -> None:
    """Addresses convert straight to slugs."""
    assert address_slug("git@github.com:org1/thing.git") == "org1/thing"
