"""Route targets: what a link or navigation points at.

A target is either a plain path (``"/forum/new"``, optionally with a
query string or fragment) or a structured ``RouteTarget`` whose
placeholders are filled from ``params``.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


@dataclass(frozen=True, slots=True)
class RouteTarget:
    """A path template plus placeholder values.

    Usage::

        RouteTarget("/users/{id}", {"id": "42"})
        RouteTarget("/forum", query="type=question")
    """

    path_template: str
    params: Mapping[str, Any] = field(default_factory=dict)
    query: str = ""
    fragment: str = ""


type RouteTargetLike = str | RouteTarget | Mapping[str, Any]


def is_external(url: str) -> bool:
    """True for absolute URLs (``https://...``, ``mailto:``, ``//host``)."""
    return url.startswith("//") or _SCHEME.match(url) is not None


def coerce_target(target: RouteTargetLike) -> RouteTarget:
    """Normalize any accepted target form into a ``RouteTarget``.

    Accepts a plain string, a ``RouteTarget``, or a mapping with
    ``path`` (or ``pathname``) and optional ``params``/``query``.
    """
    if isinstance(target, RouteTarget):
        return target
    if isinstance(target, str):
        rest, _, fragment = target.partition("#")
        path, _, query = rest.partition("?")
        return RouteTarget(path or "/", query=query, fragment=fragment)
    if isinstance(target, Mapping):
        template = target.get("path", target.get("pathname"))
        if not isinstance(template, str):
            msg = f"Route target mapping needs a 'path' string, got {target!r}"
            raise TypeError(msg)
        return RouteTarget(
            template,
            dict(target.get("params") or {}),
            query=str(target.get("query", "")),
            fragment=str(target.get("fragment", "")),
        )
    msg = f"Unsupported route target: {target!r}"
    raise TypeError(msg)


def with_suffix(path: str, target: RouteTarget) -> str:
    """Append the target's query string and fragment to *path*."""
    if target.query:
        path = f"{path}?{target.query.lstrip('?')}"
    if target.fragment:
        path = f"{path}#{target.fragment.lstrip('#')}"
    return path
