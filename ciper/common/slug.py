"""Repository slug and address utilities.

Repository slugs are GitHub identifiers in ``owner/name`` format. GitHub also
hands out transport addresses (``git@github.com:owner/name.git``,
``ssh://git@github.com/owner/name.git``, ``https://github.com/owner/name``)
that must resolve to the same slug. They are not filesystem paths, so they
are parsed here rather than with ``pathlib``.
"""

from __future__ import annotations

import re

_SCP_ADDRESS = re.compile(r"^[\w.-]+@[\w.-]+:(?P<path>[^/].*)$")
_URL_ADDRESS = re.compile(r"^[a-z][a-z0-9+.-]*://[^/]+/(?P<path>.+)$", re.IGNORECASE)
_GIT_PREFIX = "git+"
_GIT_SUFFIX = ".git"


def repo_slug(owner: str, name: str) -> str:
    """Build a repository slug from owner and name.

    Examples
    --------
    >>> repo_slug("octo-org", "thing")
    'octo-org/thing'

    """
    return f"{owner}/{name}"


def parse_repository_address(address: str) -> tuple[str, str]:
    """Resolve any supported repository address to ``(owner, name)``.

    Accepts scp-style ssh addresses, URLs with any scheme (including
    ``git+ssh://`` and ``git+https://``) and bare ``owner/name`` slugs. A
    trailing ``.git`` and trailing slashes are ignored; for URLs only the
    last two path segments are significant.

    Raises
    ------
    ValueError
        If no owner and name can be extracted.

    Examples
    --------
    >>> parse_repository_address("git@github.com:octo-org/thing.git")
    ('octo-org', 'thing')
    >>> parse_repository_address("ssh://git@github.com/octo-org/thing")
    ('octo-org', 'thing')

    """
    text = address.strip()
    text = text.removeprefix(_GIT_PREFIX)

    path: str
    if match := _URL_ADDRESS.match(text):
        path = match["path"]
    elif match := _SCP_ADDRESS.match(text):
        path = match["path"]
    else:
        path = text

    path = path.strip("/").removesuffix(_GIT_SUFFIX)
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) < 2:  # noqa: PLR2004 - owner and name
        msg = f"Invalid repository address: cannot find owner/name in {address!r}"
        raise ValueError(msg)

    return segments[-2], segments[-1]


def address_slug(address: str) -> str:
    """Return the ``owner/name`` slug for a repository address."""
    return repo_slug(*parse_repository_address(address))
