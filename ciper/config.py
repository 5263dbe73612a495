"""Process configuration for ciper.

All settings are constructor-level: :class:`CiperConfig` is built once, from
keyword arguments or from the environment, and handed to
:func:`ciper.factory.build_runtime`.
"""

from __future__ import annotations

import dataclasses
import os
import re
from pathlib import Path

from ciper.common.concurrency import DEFAULT_LIMIT
from ciper.errors import ConfigError
from ciper.jenkins.jobs import DEFAULT_TEMPLATE_PATH
from ciper.sync.poller import DEFAULT_POLL_INTERVAL_S

_DEFAULT_GITHUB_API_URL = "https://api.github.com"
_LIST_SEPARATOR = re.compile(r"[,\s]+")
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def _split_list(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(item for item in _LIST_SEPARATOR.split(raw) if item)


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _env_required(name: str) -> str:
    value = _env_str(name)
    if not value:
        raise ConfigError.missing_env(name)
    return value


def _env_bool(name: str) -> bool:
    raw = _env_str(name).lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ConfigError.invalid_value(name, raw, "a boolean")


def _env_positive_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError.invalid_value(name, raw, "a positive integer") from exc
    if value < 1:
        raise ConfigError.invalid_value(name, raw, "a positive integer")
    return value


def _env_positive_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError.invalid_value(name, raw, "a positive number") from exc
    if value <= 0:
        raise ConfigError.invalid_value(name, raw, "a positive number")
    return value


@dataclasses.dataclass(frozen=True, slots=True)
class CiperConfig:
    """Settings for one ciper process.

    Attributes
    ----------
    jenkins_url
        Base URL of the Jenkins server; also the target of the webhooks.
    github_tokens
        GitHub tokens, used round-robin.
    organizations
        Organizations synced by default and whitelisted in job templates.
    admins
        Jenkins admins templated into every job.
    node_type
        Build agent label templated into every job.
    credentials_id
        Jenkins credentials identifier templated into every job.
    github_auth_id
        Jenkins GitHub auth identifier templated into every job.
    github_api_url
        GitHub REST API root, for GitHub Enterprise installs.
    jenkins_user
        Jenkins user for basic authentication.
    jenkins_token
        Jenkins API token for basic authentication.
    template_path
        Job definition template.
    poll_interval_s
        Seconds between poll cycles.
    limit
        Concurrency ceiling per pipeline stage.
    permit_all
        Let every contributor trigger builds even with organizations set.
    start
        Start polling as soon as the process is running.

    """

    jenkins_url: str
    github_tokens: tuple[str, ...]
    organizations: tuple[str, ...] = ()
    admins: tuple[str, ...] = ()
    node_type: str = ""
    credentials_id: str = ""
    github_auth_id: str = ""
    github_api_url: str = _DEFAULT_GITHUB_API_URL
    jenkins_user: str | None = None
    jenkins_token: str | None = dataclasses.field(default=None, repr=False)
    template_path: Path = DEFAULT_TEMPLATE_PATH
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S
    limit: int = DEFAULT_LIMIT
    permit_all: bool = False
    start: bool = False

    @classmethod
    def from_env(cls) -> CiperConfig:
        """Build configuration from environment variables.

        Reads the following environment variables:

        - ``CIPER_JENKINS_URL``: Required Jenkins base URL
        - ``CIPER_GITHUB_TOKENS``: Required comma-separated GitHub tokens
        - ``CIPER_ORGS``: Comma-separated organizations
        - ``CIPER_ADMINS``: Comma-separated Jenkins admins
        - ``CIPER_NODE_TYPE``, ``CIPER_CREDENTIALS_ID``,
          ``CIPER_GITHUB_AUTH_ID``: Template defaults
        - ``CIPER_GITHUB_API_URL``: Optional GitHub API root
        - ``CIPER_JENKINS_USER``, ``CIPER_JENKINS_TOKEN``: Optional basic auth
        - ``CIPER_TEMPLATE_PATH``: Optional job template path
        - ``CIPER_POLL_INTERVAL_S``: Optional poll interval (default 3600)
        - ``CIPER_LIMIT``: Optional concurrency ceiling (default 10)
        - ``CIPER_PERMIT_ALL``, ``CIPER_START``: Optional booleans

        Raises
        ------
        ConfigError
            If a required variable is missing or a value cannot be parsed.

        """
        template = _env_str("CIPER_TEMPLATE_PATH")
        return cls(
            jenkins_url=_env_required("CIPER_JENKINS_URL"),
            github_tokens=_split_list(_env_required("CIPER_GITHUB_TOKENS")),
            organizations=_split_list(_env_str("CIPER_ORGS")),
            admins=_split_list(_env_str("CIPER_ADMINS")),
            node_type=_env_str("CIPER_NODE_TYPE"),
            credentials_id=_env_str("CIPER_CREDENTIALS_ID"),
            github_auth_id=_env_str("CIPER_GITHUB_AUTH_ID"),
            github_api_url=_env_str("CIPER_GITHUB_API_URL", _DEFAULT_GITHUB_API_URL),
            jenkins_user=_env_str("CIPER_JENKINS_USER") or None,
            jenkins_token=_env_str("CIPER_JENKINS_TOKEN") or None,
            template_path=Path(template) if template else DEFAULT_TEMPLATE_PATH,
            poll_interval_s=_env_positive_float(
                "CIPER_POLL_INTERVAL_S", DEFAULT_POLL_INTERVAL_S
            ),
            limit=_env_positive_int("CIPER_LIMIT", DEFAULT_LIMIT),
            permit_all=_env_bool("CIPER_PERMIT_ALL"),
            start=_env_bool("CIPER_START"),
        )
