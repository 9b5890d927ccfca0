"""Path template handling for ``{name}`` and ``{+name}`` placeholders.

``{name}`` is simple expansion: everything outside the unreserved set is
percent-encoded, including ``/``. ``{+name}`` is reserved expansion: reserved
characters such as ``/`` and ``:`` pass through so a full resource name
like ``accounts/1/apps/2`` can fill a single placeholder.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping
from urllib.parse import quote

_PLACEHOLDER_RE = re.compile(r"\{(\+?)([A-Za-z_$][A-Za-z0-9_.$-]*)\}")
_RESERVED = ":/?#[]@!$&'()*+,;="


def placeholders(template: str) -> list[str]:
    return [match.group(2) for match in _PLACEHOLDER_RE.finditer(template)]


def check_template(template: str, path_params: Iterable[tuple[str, bool]]) -> None:
    """Ensure ``template`` is filled by exactly the declared path parameters.

    ``path_params`` yields ``(name, required)`` pairs.
    """

    names = placeholders(template)
    if len(names) != len(set(names)):
        raise ValueError(f"Path template {template!r} repeats a placeholder")

    declared: dict[str, bool] = dict(path_params)
    missing = sorted(set(names) - set(declared))
    if missing:
        raise ValueError(f"Path template {template!r} has undeclared placeholders: {', '.join(missing)}")
    unused = sorted(set(declared) - set(names))
    if unused:
        raise ValueError(f"Path parameters not used by template {template!r}: {', '.join(unused)}")
    optional = sorted(name for name, required in declared.items() if not required)
    if optional:
        raise ValueError(f"Path parameters must be required: {', '.join(optional)}")


def expand(template: str, values: Mapping[str, Any]) -> str:
    def _sub(match: re.Match[str]) -> str:
        reserved, name = match.group(1), match.group(2)
        if name not in values or values[name] is None:
            raise KeyError(name)
        text = str(values[name])
        safe = _RESERVED if reserved else ""
        return quote(text, safe=safe)

    return _PLACEHOLDER_RE.sub(_sub, template)
