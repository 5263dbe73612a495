"""Typed views of the GitHub REST payloads ciper reads and writes."""

from __future__ import annotations

import typing as typ

import msgspec


class RepositorySummary(msgspec.Struct, kw_only=True):
    """Entry of an organization or user repository listing."""

    name: str
    ssh_url: str
    full_name: str = ""
    archived: bool = False


class FileContents(msgspec.Struct, kw_only=True):
    """Response of the repository contents endpoint for a single file."""

    content: str = ""
    encoding: str = "base64"
    path: str = ""


class Webhook(msgspec.Struct, kw_only=True):
    """Webhook registered on a repository."""

    id: int
    name: str
    config: dict[str, typ.Any] = msgspec.field(default_factory=dict)
    events: list[str] = msgspec.field(default_factory=list)
    active: bool = True


class WebhookSpec(msgspec.Struct, kw_only=True, frozen=True):
    """Body of a webhook creation request."""

    name: str
    config: dict[str, str]
    events: tuple[str, ...]
    active: bool = True
