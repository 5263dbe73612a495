"""Placeholder substitution for Jenkins job templates.

Templates use ``{placeholder}`` tokens made of letters, digits and
underscores. ``{{placeholder}}`` renders the literal text ``{placeholder}``.
Placeholders without a parameter are left untouched so that shell and Groovy
snippets inside the job definition survive rendering.
"""

from __future__ import annotations

import collections.abc as cabc
import re
import typing as typ

import msgspec

_PLACEHOLDER = re.compile(r"\{\{([0-9A-Za-z_]+)\}\}|\{([0-9A-Za-z_]+)\}")

type Escape = cabc.Callable[[str], str]


def format_value(value: object) -> str:
    """Render a parameter value as template text.

    Examples
    --------
    >>> format_value(True)
    'true'
    >>> format_value(None)
    ''
    >>> format_value({"node": "8"})
    '{"node":"8"}'

    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, cabc.Mapping | list | tuple):
        return msgspec.json.encode(value).decode("utf-8")
    return str(value)


def render(
    template: str,
    params: cabc.Mapping[str, typ.Any],
    *,
    escape: Escape | None = None,
) -> str:
    """Substitute ``params`` into ``template``.

    Parameters
    ----------
    template
        Template text.
    params
        Values keyed by placeholder name.
    escape
        Optional function applied to each rendered value, for example XML
        escaping for ``config.xml`` templates.

    Returns
    -------
    str
        Rendered text.

    """

    def substitute(match: re.Match[str]) -> str:
        literal, key = match.group(1), match.group(2)
        if literal is not None:
            return f"{{{literal}}}"
        if key not in params:
            return match.group(0)
        text = format_value(params[key])
        return escape(text) if escape is not None else text

    return _PLACEHOLDER.sub(substitute, template)
