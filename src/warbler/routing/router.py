"""Compiled router with trie-based path matching and path building.

Routes are registered during setup and compiled into an immutable
lookup structure when the app freezes. ``build_path`` is the reverse
direction: it fills a path template's placeholders to produce a link.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache

from warbler.errors import ConfigurationError, MethodNotAllowed, MissingRouteParameter, NotFound
from warbler.routing.route import CONVERTERS, PathSegment, Route, RouteMatch

_FLASK_STYLE = re.compile(r"<[^>/]+>")


@lru_cache(maxsize=512)
def _parse_cached(path: str) -> tuple[PathSegment, ...]:
    if _FLASK_STYLE.search(path):
        msg = (
            f"Route path {path!r} uses <param> syntax. "
            "Warbler expects {param} placeholders, e.g. /users/{id}."
        )
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            name, _, converter = part[1:-1].partition(":")
            converter = converter or "str"
            if not name or converter not in CONVERTERS:
                msg = f"Invalid placeholder {part!r} in route path {path!r}"
                raise ConfigurationError(msg)
            segments.append(PathSegment(part, name, converter))
        else:
            segments.append(PathSegment(value=part))
    return tuple(segments)


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/{id}"     -> [PathSegment("users"), PathSegment("{id}", "id")]
        "/users/{id:int}" -> [PathSegment("{id:int}", "id", "int")]

    Raises ``ConfigurationError`` for ``<param>`` syntax and unknown
    converters.
    """
    return list(_parse_cached(path))


def build_path(template: str, params: Mapping[str, object] | None = None) -> str:
    """Substitute *params* into the placeholders of *template*.

    Every placeholder must have a non-empty value; all missing names are
    reported at once via ``MissingRouteParameter``. Extra params are ignored.

    Examples::

        build_path("/users/{id}", {"id": "42"})  -> "/users/42"
        build_path("/users/{id}", {})            -> MissingRouteParameter
    """
    params = params or {}
    segments = _parse_cached(template)
    missing = tuple(seg.name for seg in segments if seg.name and not seg.is_filled_by(params))
    if missing:
        raise MissingRouteParameter(template, missing)

    return "/" + "/".join(seg.render(params) for seg in segments)


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all_route", "children", "param_child", "routes_by_method")

    def __init__(self) -> None:
        self.children: dict[str, _TrieNode] = {}
        # Single parameter child (only one param pattern per level)
        self.param_child: _ParamEdge | None = None
        self.catch_all_route: _CatchAllEdge | None = None
        self.routes_by_method: dict[str, Route] = {}


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_name: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """A catch-all (path) edge, consuming the remaining path."""

    param_name: str
    route_by_method: dict[str, Route]


class Router:
    """Compiled router with trie-based path matching.

    Usage::

        router = Router()
        router.add(Route("/users/{id:int}", handler, frozenset({"GET"}), name="user"))
        router.compile()
        match = router.match("GET", "/users/42")
        router.url_for("user", id=42)  # "/users/42"
    """

    __slots__ = ("_compiled", "_named", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._named: dict[str, Route] = {}
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        if route.name is not None:
            existing = self._named.get(route.name)
            if existing is not None and existing.path != route.path:
                msg = (
                    f"Route name {route.name!r} is already used by {existing.path!r}; "
                    f"cannot reuse it for {route.path!r}"
                )
                raise ConfigurationError(msg)
            self._named[route.name] = route

        node = self._root
        for seg in parse_path(route.path):
            if seg.converter == "path" and seg.is_param:
                # Catch-all: consumes rest of path, must be last segment
                if node.catch_all_route is None:
                    node.catch_all_route = _CatchAllEdge(
                        param_name=seg.name or "path",
                        route_by_method={},
                    )
                for method in route.methods:
                    node.catch_all_route.route_by_method[method] = route
                return

            if seg.is_param:
                if node.param_child is None:
                    node.param_child = _ParamEdge(
                        param_name=seg.name or "",
                        regex=re.compile(f"^{seg.pattern}$"),
                        node=_TrieNode(),
                    )
                node = node.param_child.node
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        for method in route.methods:
            node.routes_by_method[method] = route

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def url_for(self, name: str, /, **params: object) -> str:
        """Build the locale-neutral path of the route called *name*.

        Raises ``KeyError`` for an unknown name and
        ``MissingRouteParameter`` when a placeholder has no value.
        """
        try:
            route = self._named[name]
        except KeyError:
            msg = f"No route named {name!r}"
            raise KeyError(msg) from None
        return build_path(route.path, params)

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})

        if result is None:
            raise NotFound(f"No route matches {method} {path!r}")

        routes_by_method, params = result
        route = routes_by_method.get(method)
        if route is None and method == "HEAD":
            route = routes_by_method.get("GET")
        if route is not None:
            return RouteMatch(route=route, path_params=params)

        raise MethodNotAllowed(frozenset(routes_by_method))

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[dict[str, Route], dict[str, str]] | None:
        """Recursively match path parts against the trie."""
        if index == len(parts):
            if node.routes_by_method:
                return node.routes_by_method, params
            return None

        part = parts[index]

        # 1. Static child first (exact match)
        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        # 2. Parameter child
        edge = node.param_child
        if edge is not None and edge.regex.match(part):
            result = self._match_node(
                edge.node, parts, index + 1, {**params, edge.param_name: part}
            )
            if result is not None:
                return result

        # 3. Catch-all
        if node.catch_all_route is not None:
            remaining = "/".join(parts[index:])
            return (
                node.catch_all_route.route_by_method,
                {**params, node.catch_all_route.param_name: remaining},
            )

        return None
