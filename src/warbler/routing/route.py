"""Locale-neutral routes and the segments of their path templates.

A route is registered once, without a locale prefix, and answers under
every locale. The same template is also a link target: matching reads
placeholders out of a path, ``render`` writes values back into one.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

# Segment regex per converter; ``path`` swallows the rest of the URL
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "path": r".+",
}


@dataclass(frozen=True, slots=True)
class PathSegment:
    """One ``/``-separated piece of a path template.

    ``forum`` is static. ``{id}`` and ``{id:int}`` are placeholders with
    ``name="id"`` and a converter (``str`` unless given).
    """

    value: str
    name: str | None = None
    converter: str = "str"

    @property
    def is_param(self) -> bool:
        return self.name is not None

    @property
    def pattern(self) -> str:
        return CONVERTERS[self.converter]

    def is_filled_by(self, params: Mapping[str, object]) -> bool:
        """Whether *params* carries a usable value for this segment.

        ``None`` and ``""`` do not count: either would leave an empty
        segment that no route matches.
        """
        return not self.is_param or params.get(self.name or "") not in (None, "")

    def render(self, params: Mapping[str, object]) -> str:
        if not self.is_param:
            return self.value
        safe = "/" if self.converter == "path" else ""
        return quote(str(params[self.name or ""]), safe=safe)


@dataclass(frozen=True, slots=True)
class Route:
    """A handler and the locale-neutral path it answers on.

    ``/forum/new`` registered once serves ``/forum/new`` and
    ``/tr/forum/new``; the locale prefix never reaches the router.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    route: Route
    path_params: dict[str, str]
