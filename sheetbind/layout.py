"""Date/time layout translation from ``yyyy-MM-dd`` style patterns."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Union

_DIRECTIVES = {
    "yyyy": "%Y",
    "yy": "%y",
    "MM": "%m",
    "dd": "%d",
    "HH": "%H",
    "mm": "%M",
    "ss": "%S",
    "SSS": "%f",
}

# Longest alternatives first so "yyyy" never matches as two "yy".
_TOKEN_RE = re.compile("|".join(sorted(_DIRECTIVES, key=len, reverse=True)))


def convert_layout(layout: str) -> str:
    """Translate a pattern such as ``yyyy-MM-dd HH:mm:ss`` to strftime syntax.

    ``SSS`` maps to ``%f`` (microseconds), the closest strftime directive;
    use :func:`format_time` for exact millisecond output.
    """

    escaped = layout.replace("%", "%%")
    return _TOKEN_RE.sub(lambda m: _DIRECTIVES[m.group(0)], escaped)


def format_time(value: Union[datetime, date], layout: str) -> str:
    """Render ``value`` with a ``yyyy-MM-dd`` style pattern."""

    def render(match: "re.Match[str]") -> str:
        token = match.group(0)
        if token == "SSS":
            micro = value.microsecond if isinstance(value, datetime) else 0
            return f"{micro // 1000:03d}"
        return value.strftime(_DIRECTIVES[token])

    return _TOKEN_RE.sub(render, layout)
